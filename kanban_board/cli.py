"""CLI entry point for kanban-board."""

from __future__ import annotations

import argparse
import logging
import sys

from .board import Board
from .config import Config
from .controller import (
    BeginDrag,
    CommitEdit,
    CreateTask,
    DeleteViaEdit,
    EndDrag,
    HoverColumn,
    Outcome,
    RemoveTask,
    SelectTask,
    UpdateBuffer,
)
from .models import COLUMN_TITLES, column_index
from .session import open_session


def render_board(board: Board) -> str:
    """Plain-text view of the board, one section per column."""
    lines: list[str] = []
    for col_idx, (title, column) in enumerate(zip(COLUMN_TITLES, board.snapshot())):
        lines.append(f"[{col_idx}] {title} ({len(column)})")
        if not column:
            lines.append("    (empty)")
        for row_idx, task in enumerate(column):
            lines.append(f"  {row_idx:>2}. {task.display()}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kanban-board",
        description="Single-user kanban board stored in a local JSON file.",
    )
    parser.add_argument(
        "--board",
        type=str,
        default=None,
        help="Path to the board JSON file (or set KANBAN_BOARD_FILE env var)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("show", help="Print the board")

    add = sub.add_parser("add", help="Create a task in 'planned'")
    add.add_argument("label", type=str)
    add.add_argument("--date", type=str, default=None)
    add.add_argument("--effort", type=str, default=None)

    edit = sub.add_parser("edit", help="Edit a task (it moves to the end of its column)")
    edit.add_argument("column", type=column_index, help="Column index or title")
    edit.add_argument("row", type=int)
    edit.add_argument("--label", type=str, default=None)
    edit.add_argument("--date", type=str, default=None)
    edit.add_argument("--effort", type=str, default=None)
    edit.add_argument(
        "--delete",
        action="store_true",
        help="Delete the task instead of saving the edit",
    )

    remove = sub.add_parser("remove", help="Delete a task")
    remove.add_argument("column", type=column_index, help="Column index or title")
    remove.add_argument("row", type=int)

    move = sub.add_parser("move", help="Move a task to the end of another column")
    move.add_argument("column", type=column_index, help="Column index or title")
    move.add_argument("row", type=int)
    move.add_argument("dest", type=column_index, help="Destination column index or title")

    return parser


def _intents_for(args: argparse.Namespace) -> list:
    if args.command == "add":
        return [CreateTask(args.label, args.date, args.effort)]
    if args.command == "edit":
        final = DeleteViaEdit() if args.delete else CommitEdit()
        return [
            SelectTask(args.column, args.row),
            UpdateBuffer(args.label, args.date, args.effort),
            final,
        ]
    if args.command == "remove":
        return [RemoveTask(args.column, args.row)]
    if args.command == "move":
        # Same path a pointer drag takes through the controller
        return [
            BeginDrag(args.column, args.row),
            HoverColumn(args.dest),
            EndDrag(released=True),
        ]
    return []


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = Config.load(args.config)

    # Configure logging
    level = logging.DEBUG if args.verbose else getattr(
        logging, str(config.log_level).upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    # Resolve board path
    board_path = args.board
    if not board_path:
        import os
        board_path = os.environ.get("KANBAN_BOARD_FILE")

    session = open_session(config, board_path)
    if session.board.last_save_error:
        logging.warning("Board is not being saved: %s", session.board.last_save_error)

    controller = session.controller
    for intent in _intents_for(args):
        controller.post(intent)
    outcomes: list[Outcome] = controller.process()

    failed = [o for o in outcomes if not o.ok]
    for outcome in outcomes:
        if outcome.warning:
            logging.warning("Change kept in memory only: %s", outcome.warning)
    for outcome in failed:
        logging.error("%s was rejected: %s", type(outcome.intent).__name__, outcome.error)

    print(render_board(session.board))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
