"""Data models for tasks on the kanban board."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date as _date

COLUMN_TITLES: tuple[str, ...] = ("planned", "in progress", "done")
COLUMN_COUNT = len(COLUMN_TITLES)

DEFAULT_DATE_FORMAT = "%d.%m.%y"
DEFAULT_EFFORT = "0h:0m"
DEFAULT_SEED_LABELS: tuple[str, ...] = (
    "Education Rust",
    "Education C++",
    "Education Assembler",
    "Education English",
    "Education Painting",
)

# Key names used by older board files, still accepted on read.
_LEGACY_KEYS = {"task": "label", "time": "effort"}


def today(date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return _date.today().strftime(date_format)


@dataclass
class Task:
    """A single unit of work on the board.

    ``date`` and ``effort`` are free text; nothing checks that ``date`` is a
    real calendar day. ``id`` is assigned by the Board when the task is
    added and stays with the task through edits and moves.
    """

    label: str = ""
    date: str = field(default_factory=today)
    effort: str = DEFAULT_EFFORT
    id: int | None = None

    @property
    def has_label(self) -> bool:
        return bool(self.label.strip())

    def copy(self) -> Task:
        return replace(self)

    def display(self) -> str:
        return f"{self.label} | {self.date} | {self.effort}"


def column_index(value: int | str) -> int:
    """Resolve a column index or title (``"in-progress"`` allowed) to an int.

    Raises ValueError for unknown titles. Integers are returned unchecked;
    range checks belong to the Board.
    """
    if isinstance(value, int):
        return value
    raw = value.strip()
    if raw.lstrip("-").isdigit():
        return int(raw)
    lowered = raw.lower().replace("-", " ").replace("_", " ")
    for idx, title in enumerate(COLUMN_TITLES):
        if lowered == title:
            return idx
    raise ValueError(f"Unknown column: {value!r}")


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "label": task.label,
        "date": task.date,
        "effort": task.effort,
    }


def task_from_dict(data: dict) -> Task:
    """Build a Task from its stored form, accepting legacy key names."""
    if not isinstance(data, dict):
        raise ValueError(f"Task entry must be an object, got {type(data).__name__}")
    values = dict(data)
    for old, new in _LEGACY_KEYS.items():
        if old in values and new not in values:
            values[new] = values.pop(old)

    tid = values.get("id")
    if tid is not None and (not isinstance(tid, int) or isinstance(tid, bool)):
        raise ValueError(f"Task id must be an integer, got {tid!r}")
    for key in ("label", "date", "effort"):
        if key in values and not isinstance(values[key], str):
            raise ValueError(f"Task field '{key}' must be a string")

    return Task(
        label=values.get("label", ""),
        date=values.get("date", ""),
        effort=values.get("effort", DEFAULT_EFFORT),
        id=tid,
    )
