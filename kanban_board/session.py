"""The running session: one store, one board, one controller."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .board import Board
from .config import Config
from .controller import InteractionController
from .store import JsonBoardStore


@dataclass
class Session:
    store: JsonBoardStore
    board: Board
    controller: InteractionController


def open_session(config: Config, board_path: str | Path | None = None) -> Session:
    """Load the board named by ``board_path`` (or the config) and wire it up."""
    store = JsonBoardStore(
        board_path or config.board_path,
        seed_labels=config.seed_labels,
        date_format=config.date_format,
        default_effort=config.default_effort,
    )
    board = store.load()
    controller = InteractionController(
        board,
        date_format=config.date_format,
        default_effort=config.default_effort,
    )
    return Session(store=store, board=board, controller=controller)
