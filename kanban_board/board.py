"""Board aggregate: three ordered columns and the operations that change them."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from .errors import OutOfRange, PersistenceFailure, ValidationRejected
from .models import (
    COLUMN_COUNT,
    DEFAULT_DATE_FORMAT,
    DEFAULT_EFFORT,
    DEFAULT_SEED_LABELS,
    Task,
    today,
)

logger = logging.getLogger(__name__)


class BoardStore(Protocol):
    def save(self, board: Board) -> None: ...


class Board:
    """Holds the columns and is the only place they are mutated.

    Every successful mutation is written through to ``store`` (if set).
    Validation happens before any list is touched, so a failed call leaves
    the board exactly as it was.
    """

    def __init__(
        self,
        columns: Iterable[Iterable[Task]] | None = None,
        store: BoardStore | None = None,
    ) -> None:
        self.columns: list[list[Task]] = [[] for _ in range(COLUMN_COUNT)]
        self.store = store
        self.last_save_error: PersistenceFailure | None = None
        self._next_id = 1

        if columns is not None:
            given = [list(col) for col in columns]
            if len(given) != COLUMN_COUNT:
                raise ValueError(
                    f"A board has exactly {COLUMN_COUNT} columns, got {len(given)}"
                )
            self.columns = given
        self._assign_missing_ids()

    @classmethod
    def seeded(
        cls,
        labels: Iterable[str] = DEFAULT_SEED_LABELS,
        date_format: str = DEFAULT_DATE_FORMAT,
        effort: str = DEFAULT_EFFORT,
        store: BoardStore | None = None,
    ) -> Board:
        """Return the starter board used when nothing has been saved yet.

        Blank labels are skipped, as ``create`` would reject them.
        """
        day = today(date_format)
        planned = [Task(label=label, date=day, effort=effort) for label in labels]
        planned = [task for task in planned if task.has_label]
        return cls([planned, [], []], store=store)

    # ------------------------------------------------------------------
    # ids
    # ------------------------------------------------------------------

    def _assign_missing_ids(self) -> None:
        seen: set[int] = set()
        for task in self.all_tasks():
            if task.id is not None and task.id in seen:
                logger.warning("Duplicate task id %d; assigning a new one", task.id)
                task.id = None
            if task.id is not None:
                seen.add(task.id)
        self._next_id = max(seen, default=0) + 1
        for task in self.all_tasks():
            if task.id is None:
                task.id = self._allocate_id()

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def all_tasks(self) -> list[Task]:
        return [task for column in self.columns for task in column]

    def task_count(self) -> int:
        return sum(len(column) for column in self.columns)

    def task_at(self, column: int, row: int) -> Task:
        self._check_position(column, row)
        return self.columns[column][row]

    def locate(self, task_id: int | None) -> tuple[int, int] | None:
        """Return the current (column, row) of a task id, or None."""
        if task_id is None:
            return None
        for col_idx, column in enumerate(self.columns):
            for row_idx, task in enumerate(column):
                if task.id == task_id:
                    return col_idx, row_idx
        return None

    def snapshot(self) -> tuple[tuple[Task, ...], ...]:
        """Copies of every column, safe to hand to rendering code."""
        return tuple(tuple(task.copy() for task in column) for column in self.columns)

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def create(self, task: Task) -> Task:
        """Append a new task to the "planned" column."""
        if not task.has_label:
            raise ValidationRejected("Task label must not be empty")
        task.id = self._allocate_id()
        self.columns[0].append(task)
        logger.debug("Created task %d '%s'", task.id, task.label)
        self._persist()
        return task

    def edit(self, column: int, row: int, new_task: Task) -> Task:
        """Replace the task at (column, row) and move it to the column's end.

        The replacement keeps the original task's id. An empty label is
        rejected without touching the board; deleting through the edit form
        is ``delete_via_edit``.
        """
        self._check_position(column, row)
        if not new_task.has_label:
            raise ValidationRejected("Task label must not be empty")
        old = self.columns[column].pop(row)
        new_task.id = old.id
        self.columns[column].append(new_task)
        logger.debug(
            "[EDIT] task %d '%s' -> '%s' (column %d)",
            old.id, old.label, new_task.label, column,
        )
        self._persist()
        return new_task

    def delete_via_edit(self, column: int, row: int) -> Task:
        """Delete the task whose label was cleared in the edit form."""
        self._check_position(column, row)
        removed = self.columns[column].pop(row)
        logger.debug("[EDIT] task %d deleted by clearing its label", removed.id)
        self._persist()
        return removed

    def remove(self, column: int, row: int) -> Task:
        self._check_position(column, row)
        removed = self.columns[column].pop(row)
        logger.debug("Removed task %d '%s'", removed.id, removed.label)
        self._persist()
        return removed

    def move(self, source_column: int, source_row: int, dest_column: int) -> Task:
        """Move a task to the end of ``dest_column``.

        Moving within the same column sends the task to the bottom.
        """
        self._check_position(source_column, source_row)
        self._check_column(dest_column)
        task = self.columns[source_column].pop(source_row)
        self.columns[dest_column].append(task)
        logger.debug(
            "Moved task %d '%s' from column %d to %d",
            task.id, task.label, source_column, dest_column,
        )
        self._persist()
        return task

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _check_column(self, column: int) -> None:
        if not isinstance(column, int) or not 0 <= column < COLUMN_COUNT:
            raise OutOfRange(column)

    def _check_position(self, column: int, row: int) -> None:
        self._check_column(column)
        if not isinstance(row, int) or not 0 <= row < len(self.columns[column]):
            raise OutOfRange(column, row)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self)
        except PersistenceFailure as e:
            self.last_save_error = e
            logger.warning("Board changes kept in memory but not saved: %s", e)
        else:
            self.last_save_error = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.columns == other.columns

    def __repr__(self) -> str:
        counts = ", ".join(str(len(column)) for column in self.columns)
        return f"Board(columns=[{counts}])"
