"""Interaction controller: turns UI events into Board operations.

The controller owns the transient selection (edit form) and drag state.
Neither is persisted. Both refer to tasks by id, so they survive other
tasks moving around and detect when their task has disappeared.

Rendering code should not call Board methods directly. It posts intents
with ``post()`` while drawing, and the application calls ``process()`` once
per cycle to apply them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .board import Board
from .errors import (
    BoardError,
    DragInProgress,
    OutOfRange,
    PersistenceFailure,
    StaleReference,
    ValidationRejected,
)
from .models import DEFAULT_DATE_FORMAT, DEFAULT_EFFORT, Task, today

logger = logging.getLogger(__name__)


@dataclass
class SelectionState:
    """The task open in the edit form, plus its edit buffer."""

    task_id: int
    column: int
    row: int
    buffer: Task


@dataclass
class DragState:
    """The task being dragged and the column under the pointer."""

    task_id: int
    column: int
    row: int
    target: int | None = None


# ----------------------------------------------------------------------
# Intents
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class CreateTask:
    label: str
    date: str | None = None
    effort: str | None = None


@dataclass(frozen=True)
class SelectTask:
    column: int
    row: int


@dataclass(frozen=True)
class UpdateBuffer:
    label: str | None = None
    date: str | None = None
    effort: str | None = None


@dataclass(frozen=True)
class CommitEdit:
    pass


@dataclass(frozen=True)
class DeleteViaEdit:
    pass


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class RemoveTask:
    column: int
    row: int


@dataclass(frozen=True)
class BeginDrag:
    column: int
    row: int


@dataclass(frozen=True)
class HoverColumn:
    column: int | None


@dataclass(frozen=True)
class EndDrag:
    released: bool


INTENT_TYPES = (
    CreateTask,
    SelectTask,
    UpdateBuffer,
    CommitEdit,
    DeleteViaEdit,
    CancelEdit,
    RemoveTask,
    BeginDrag,
    HoverColumn,
    EndDrag,
)


@dataclass
class Outcome:
    """What happened to one processed intent."""

    intent: Any
    ok: bool
    result: Any = None
    error: BoardError | None = None
    warning: PersistenceFailure | None = None


@dataclass
class InteractionController:
    board: Board
    date_format: str = DEFAULT_DATE_FORMAT
    default_effort: str = DEFAULT_EFFORT
    selection: SelectionState | None = None
    drag: DragState | None = None
    _pending: list = field(default_factory=list, repr=False)

    # ------------------------------------------------------------------
    # Read access for rendering
    # ------------------------------------------------------------------

    def is_selected(self, task: Task) -> bool:
        return self.selection is not None and self.selection.task_id == task.id

    def is_dragging(self, task: Task | None = None) -> bool:
        if self.drag is None:
            return False
        return task is None or self.drag.task_id == task.id

    # ------------------------------------------------------------------
    # Create / edit / remove
    # ------------------------------------------------------------------

    def create_task(
        self, label: str, date: str | None = None, effort: str | None = None
    ) -> Task:
        task = Task(
            label=label,
            date=date if date is not None else today(self.date_format),
            effort=effort if effort is not None else self.default_effort,
        )
        return self.board.create(task)

    def select_for_edit(self, column: int, row: int) -> SelectionState:
        task = self.board.task_at(column, row)
        self.selection = SelectionState(
            task_id=task.id, column=column, row=row, buffer=task.copy()
        )
        logger.debug("[EDIT] selected task %d at (%d, %d)", task.id, column, row)
        return self.selection

    def update_buffer(
        self,
        label: str | None = None,
        date: str | None = None,
        effort: str | None = None,
    ) -> Task:
        """Change edit-form fields. Nothing is saved until ``commit_edit``."""
        if self.selection is None:
            raise StaleReference(None, "update the edit form")
        buffer = self.selection.buffer
        if label is not None:
            buffer.label = label
        if date is not None:
            buffer.date = date
        if effort is not None:
            buffer.effort = effort
        return buffer

    def commit_edit(self) -> Task:
        """Apply the edit buffer to the selected task.

        The selection is cleared whether or not the edit went through.
        """
        selection = self._take_selection("commit edit")
        column, row = self._relocate(selection.task_id, "commit edit")
        return self.board.edit(column, row, selection.buffer.copy())

    def delete_via_edit(self) -> Task:
        """Delete the selected task from the edit form."""
        selection = self._take_selection("delete task")
        column, row = self._relocate(selection.task_id, "delete task")
        return self.board.delete_via_edit(column, row)

    def cancel_edit(self) -> None:
        self.selection = None

    def remove_task(self, column: int, row: int) -> Task:
        removed = self.board.remove(column, row)
        if self.selection is not None and self.selection.task_id == removed.id:
            self.selection = None
        return removed

    # ------------------------------------------------------------------
    # Drag and drop
    # ------------------------------------------------------------------

    def begin_drag(self, column: int, row: int) -> DragState:
        if self.drag is not None:
            raise DragInProgress(
                f"Task {self.drag.task_id} is already being dragged"
            )
        task = self.board.task_at(column, row)
        self.drag = DragState(task_id=task.id, column=column, row=row)
        logger.debug("[DRAG] start task %d at (%d, %d)", task.id, column, row)
        return self.drag

    def hover_column(self, column: int | None) -> None:
        """Record the drop zone under the pointer; None means no zone."""
        if self.drag is None:
            return
        self.drag.target = column

    def end_drag(self, released: bool) -> Task | None:
        """Finish the drag, moving the task if it was dropped on a column.

        The drag state is cleared in every case.
        """
        drag, self.drag = self.drag, None
        if drag is None or not released or drag.target is None:
            if drag is not None:
                logger.debug("[DRAG] cancelled for task %d", drag.task_id)
            return None
        column, row = self._relocate(drag.task_id, "move task")
        return self.board.move(column, row, drag.target)

    # ------------------------------------------------------------------
    # Intent queue
    # ------------------------------------------------------------------

    def post(self, intent: Any) -> None:
        """Queue an intent. Raises TypeError for anything that is not one."""
        if not isinstance(intent, INTENT_TYPES):
            raise TypeError(f"Unknown intent: {intent!r}")
        self._pending.append(intent)

    def process(self) -> list[Outcome]:
        """Apply every queued intent once, in order.

        Domain errors abort only the intent that raised them.
        """
        pending, self._pending = self._pending, []
        outcomes = []
        for intent in pending:
            outcomes.append(self.dispatch(intent))
        return outcomes

    def dispatch(self, intent: Any) -> Outcome:
        handler = self._handler_for(intent)
        previous_error = self.board.last_save_error
        try:
            result = handler()
        except ValidationRejected as e:
            logger.debug("Ignored %s: %s", type(intent).__name__, e)
            return Outcome(intent, ok=False, error=e)
        except OutOfRange as e:
            logger.error("Board and controller out of sync on %r: %s", intent, e)
            return Outcome(intent, ok=False, error=e)
        except (StaleReference, DragInProgress) as e:
            logger.warning("Aborted %s: %s", type(intent).__name__, e)
            return Outcome(intent, ok=False, error=e)
        save_error = self.board.last_save_error
        warning = save_error if save_error is not previous_error else None
        return Outcome(intent, ok=True, result=result, warning=warning)

    def _handler_for(self, intent: Any) -> Callable[[], Any]:
        if isinstance(intent, CreateTask):
            return lambda: self.create_task(intent.label, intent.date, intent.effort)
        if isinstance(intent, SelectTask):
            return lambda: self.select_for_edit(intent.column, intent.row)
        if isinstance(intent, UpdateBuffer):
            return lambda: self.update_buffer(intent.label, intent.date, intent.effort)
        if isinstance(intent, CommitEdit):
            return self.commit_edit
        if isinstance(intent, DeleteViaEdit):
            return self.delete_via_edit
        if isinstance(intent, CancelEdit):
            return self.cancel_edit
        if isinstance(intent, RemoveTask):
            return lambda: self.remove_task(intent.column, intent.row)
        if isinstance(intent, BeginDrag):
            return lambda: self.begin_drag(intent.column, intent.row)
        if isinstance(intent, HoverColumn):
            return lambda: self.hover_column(intent.column)
        if isinstance(intent, EndDrag):
            return lambda: self.end_drag(intent.released)
        raise TypeError(f"Unknown intent: {intent!r}")

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _take_selection(self, action: str) -> SelectionState:
        selection, self.selection = self.selection, None
        if selection is None:
            raise StaleReference(None, action)
        return selection

    def _relocate(self, task_id: int, action: str) -> tuple[int, int]:
        position = self.board.locate(task_id)
        if position is None:
            raise StaleReference(task_id, action)
        return position
