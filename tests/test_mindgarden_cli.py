"""Tests for cli/mindgarden.py helpers that do not need a running terminal."""

from cli.mindgarden import selection_row


def test_selection_row_keeps_selected_habit():
    assert selection_row(["read", "run", "water"], "run") == 1


def test_selection_row_falls_back_to_first():
    assert selection_row(["read", "run"], None) == 0
    assert selection_row(["read", "run"], "deleted") == 0


def test_selection_row_empty_table():
    assert selection_row([], "read") is None
