"""Tests for Board mutations and invariants (no file I/O)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from kanban_board.board import Board
from kanban_board.errors import OutOfRange, PersistenceFailure, ValidationRejected
from kanban_board.models import Task


def _make_task(label, date="01.01.24", effort="0h:0m", **kwargs):
    return Task(label=label, date=date, effort=effort, **kwargs)


def _board(planned=(), progress=(), done=(), store=None) -> Board:
    return Board(
        [
            [_make_task(l) for l in planned],
            [_make_task(l) for l in progress],
            [_make_task(l) for l in done],
        ],
        store=store,
    )


def _labels(board: Board, column: int) -> list[str]:
    return [t.label for t in board.columns[column]]


def _assert_invariants(board: Board) -> None:
    assert len(board.columns) == 3
    ids = [t.id for t in board.all_tasks()]
    assert len(ids) == len(set(ids))
    assert None not in ids


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_empty_board_has_three_columns():
    board = Board()
    assert board.columns == [[], [], []]
    _assert_invariants(board)


def test_board_rejects_wrong_column_count():
    with pytest.raises(ValueError):
        Board([[], []])


def test_seeded_board():
    board = Board.seeded()
    assert _labels(board, 0) == [
        "Education Rust",
        "Education C++",
        "Education Assembler",
        "Education English",
        "Education Painting",
    ]
    assert board.columns[1] == []
    assert board.columns[2] == []
    assert all(t.effort == "0h:0m" for t in board.columns[0])
    _assert_invariants(board)


def test_ids_assigned_after_existing_max():
    board = Board([[_make_task("a", id=10), _make_task("b")], [], []])
    assert board.columns[0][0].id == 10
    assert board.columns[0][1].id == 11
    created = board.create(_make_task("c"))
    assert created.id == 12


def test_duplicate_ids_are_reassigned():
    board = Board([[_make_task("a", id=1)], [_make_task("b", id=1)], []])
    _assert_invariants(board)
    assert board.columns[0][0].id == 1


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_appends_to_planned():
    board = _board(planned=["a"], progress=["b"])
    task = board.create(_make_task("new"))
    assert _labels(board, 0) == ["a", "new"]
    assert _labels(board, 1) == ["b"]
    assert task.id is not None
    _assert_invariants(board)


def test_create_rejects_empty_label():
    board = _board(planned=["a"])
    with pytest.raises(ValidationRejected):
        board.create(_make_task(""))
    assert _labels(board, 0) == ["a"]


def test_identical_tasks_get_distinct_ids():
    board = Board()
    first = board.create(_make_task("same"))
    second = board.create(_make_task("same"))
    assert first.id != second.id
    assert first != second


# ---------------------------------------------------------------------------
# edit / delete_via_edit / remove
# ---------------------------------------------------------------------------


def test_edit_replaces_and_appends_to_same_column():
    board = _board(progress=["A", "x", "y"])
    old_id = board.columns[1][0].id
    edited = board.edit(1, 0, _make_task("B"))
    assert _labels(board, 1) == ["x", "y", "B"]
    assert edited.id == old_id
    _assert_invariants(board)


def test_edit_with_empty_label_changes_nothing():
    board = _board(progress=["A", "x"])
    with pytest.raises(ValidationRejected):
        board.edit(1, 0, _make_task(""))
    assert _labels(board, 1) == ["A", "x"]


def test_delete_via_edit_removes_task():
    board = _board(progress=["A", "x"])
    removed = board.delete_via_edit(1, 0)
    assert removed.label == "A"
    assert _labels(board, 1) == ["x"]


def test_remove():
    board = _board(planned=["a", "b", "c"])
    removed = board.remove(0, 1)
    assert removed.label == "b"
    assert _labels(board, 0) == ["a", "c"]


@pytest.mark.parametrize("column, row", [(3, 0), (-1, 0), (0, 5), (1, 0), (0, -1)])
def test_index_errors_raise_out_of_range(column, row):
    board = _board(planned=["a"])
    with pytest.raises(OutOfRange):
        board.remove(column, row)
    with pytest.raises(OutOfRange):
        board.edit(column, row, _make_task("z"))
    assert _labels(board, 0) == ["a"]


def test_out_of_range_is_an_index_error():
    with pytest.raises(IndexError):
        Board().task_at(0, 0)


# ---------------------------------------------------------------------------
# move
# ---------------------------------------------------------------------------


def test_move_is_atomic_transfer():
    board = _board(planned=["a", "b", "T", "c"], progress=["x"])
    total = board.task_count()
    moved = board.move(0, 2, 1)
    assert moved.label == "T"
    assert "T" not in _labels(board, 0)
    assert board.columns[1][-1] is moved
    assert board.task_count() == total
    _assert_invariants(board)


def test_move_within_same_column_sends_task_to_end():
    board = _board(planned=["a", "b", "c"])
    board.move(0, 0, 0)
    assert _labels(board, 0) == ["b", "c", "a"]


def test_move_to_bad_column_leaves_board_untouched():
    board = _board(planned=["a"])
    with pytest.raises(OutOfRange):
        board.move(0, 0, 3)
    assert _labels(board, 0) == ["a"]


def test_locate_follows_task_through_moves():
    board = _board(planned=["a", "b"])
    tid = board.columns[0][0].id
    board.move(0, 0, 2)
    assert board.locate(tid) == (2, 0)
    board.remove(2, 0)
    assert board.locate(tid) is None


def test_snapshot_is_detached():
    board = _board(planned=["a"])
    snap = board.snapshot()
    snap[0][0].label = "changed"
    assert _labels(board, 0) == ["a"]
    assert len(snap) == 3


# ---------------------------------------------------------------------------
# write-through
# ---------------------------------------------------------------------------


def test_every_mutation_saves():
    store = MagicMock()
    board = _board(planned=["a", "b", "c"], store=store)

    board.create(_make_task("d"))
    board.edit(0, 0, _make_task("e"))
    board.move(0, 0, 1)
    board.remove(0, 0)
    board.delete_via_edit(1, 0)

    assert store.save.call_count == 5
    store.save.assert_called_with(board)


def test_rejected_mutation_does_not_save():
    store = MagicMock()
    board = _board(planned=["a"], store=store)
    with pytest.raises(ValidationRejected):
        board.create(_make_task(""))
    with pytest.raises(OutOfRange):
        board.move(0, 4, 1)
    store.save.assert_not_called()


def test_save_failure_keeps_change_in_memory(caplog):
    store = MagicMock()
    store.save.side_effect = PersistenceFailure("board.json", "disk full")
    board = _board(planned=["a"], store=store)

    board.move(0, 0, 2)

    assert _labels(board, 2) == ["a"]
    assert isinstance(board.last_save_error, PersistenceFailure)
    assert "not saved" in caplog.text


def test_successful_save_clears_previous_error():
    store = MagicMock()
    store.save.side_effect = [PersistenceFailure("board.json", "disk full"), None]
    board = _board(planned=["a", "b"], store=store)

    board.remove(0, 0)
    assert board.last_save_error is not None
    board.remove(0, 0)
    assert board.last_save_error is None


def test_seeded_board_skips_blank_labels():
    board = Board.seeded(labels=["", "x", "   "])
    assert _labels(board, 0) == ["x"]
