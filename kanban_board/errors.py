"""Exceptions raised by the board, the controller and the store."""

from __future__ import annotations


class BoardError(Exception):
    """Base class for kanban board errors."""


class ValidationRejected(BoardError):
    """A task was submitted with an empty label."""


class OutOfRange(BoardError, IndexError):
    """A column or row index does not exist on the board.

    Seeing one means the controller and the board disagree about layout.
    """

    def __init__(self, column: int, row: int | None = None) -> None:
        self.column = column
        self.row = row
        if row is None:
            msg = f"No column {column}"
        else:
            msg = f"No task at column {column}, row {row}"
        super().__init__(msg)


class StaleReference(BoardError):
    """The selected or dragged task is no longer on the board."""

    def __init__(self, task_id: int | None, action: str) -> None:
        self.task_id = task_id
        self.action = action
        super().__init__(f"Cannot {action}: task {task_id} no longer exists")


class DragInProgress(BoardError):
    """A drag was started while another drag is still active."""


class PersistenceFailure(BoardError):
    """The board file could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
