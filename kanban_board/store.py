"""JSON file persistence for the board."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from .board import Board
from .errors import PersistenceFailure
from .models import (
    COLUMN_COUNT,
    DEFAULT_DATE_FORMAT,
    DEFAULT_EFFORT,
    DEFAULT_SEED_LABELS,
    task_from_dict,
    task_to_dict,
)

logger = logging.getLogger(__name__)


def board_to_dict(board: Board) -> dict:
    return {"columns": [[task_to_dict(t) for t in column] for column in board.columns]}


def board_from_dict(data: dict) -> Board:
    """Rebuild a Board from its stored form.

    Raises ValueError when the structure is not a three-column board.
    """
    if not isinstance(data, dict) or "columns" not in data:
        raise ValueError("Board data must be an object with a 'columns' field")
    columns = data["columns"]
    if not isinstance(columns, list) or len(columns) != COLUMN_COUNT:
        raise ValueError(f"Board data must have exactly {COLUMN_COUNT} columns")
    parsed = []
    for column in columns:
        if not isinstance(column, list):
            raise ValueError("Each column must be a list of tasks")
        parsed.append([task_from_dict(entry) for entry in column])
    return Board(parsed)


class JsonBoardStore:
    """Reads and writes the whole board as one JSON document.

    ``save`` never leaves a half-written file behind: the new content goes to
    a temporary file in the same directory, which then replaces the target.
    """

    def __init__(
        self,
        path: str | Path,
        seed_labels: Iterable[str] = DEFAULT_SEED_LABELS,
        date_format: str = DEFAULT_DATE_FORMAT,
        default_effort: str = DEFAULT_EFFORT,
    ) -> None:
        self.path = Path(path)
        self.seed_labels = tuple(seed_labels)
        self.date_format = date_format
        self.default_effort = default_effort

    def load(self) -> Board:
        """Load the board, seeding and saving a default one if needed."""
        try:
            board = self._read()
        except FileNotFoundError:
            logger.info("[STORE] No board at %s; creating the default board", self.path)
            return self._seed()
        except (OSError, ValueError, RecursionError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors;
            # deeply nested arrays raise RecursionError
            logger.warning("[STORE] Could not read %s (%s); using the default board", self.path, e)
            self._set_aside()
            return self._seed()

        board.store = self
        logger.debug("[STORE] Loaded %d task(s) from %s", board.task_count(), self.path)
        return board

    def save(self, board: Board) -> None:
        """Write the full board atomically. Raises PersistenceFailure."""
        tmp_name: str | None = None
        try:
            content = json.dumps(board_to_dict(board), indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(str(self.path), str(e)) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("[STORE] Could not remove temp file %s", tmp_name)
        logger.debug("[STORE] Saved %d task(s) to %s", board.task_count(), self.path)

    def _read(self) -> Board:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return board_from_dict(data)

    def _seed(self) -> Board:
        board = Board.seeded(
            labels=self.seed_labels,
            date_format=self.date_format,
            effort=self.default_effort,
            store=self,
        )
        try:
            self.save(board)
        except PersistenceFailure as e:
            board.last_save_error = e
            logger.warning("[STORE] Default board could not be saved: %s", e)
        return board

    def _set_aside(self) -> None:
        """Keep an unreadable board file as a backup before reseeding.

        The first backup is ``<name>.bak``; later ones get ``.bak.1``,
        ``.bak.2`` and so on, so an earlier backup is never overwritten.
        """
        if not self.path.exists():
            return
        backup = self._free_backup_path()
        try:
            os.replace(self.path, backup)
            logger.warning("[STORE] Unreadable board moved to %s", backup)
        except OSError as e:
            logger.warning("[STORE] Could not move unreadable board aside: %s", e)

    def _free_backup_path(self) -> Path:
        backup = self.path.with_name(self.path.name + ".bak")
        n = 0
        while backup.exists():
            n += 1
            backup = self.path.with_name(f"{self.path.name}.bak.{n}")
        return backup
