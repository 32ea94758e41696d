#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Test suite for the global selection and cross-tab injection.

Run with: pytest tests/test_selection.py -v
"""

from streamtabs.models import Line, Selection
from streamtabs.selection import SelectionController, inject_selection


# =============================================================================
# Tests: Toggle
# =============================================================================


class TestSelectionToggle:
    """At most one selection, toggled by sequence number."""

    def test_starts_empty(self):
        assert SelectionController().current is None

    def test_select_twice_clears(self):
        controller = SelectionController()
        assert controller.select(7, "seven") == Selection(7, "seven")
        assert controller.select(7, "seven") is None
        assert controller.current is None

    def test_select_other_replaces(self):
        controller = SelectionController()
        controller.select(7, "seven")
        controller.select(9, "nine")
        assert controller.current == Selection(9, "nine")

    def test_identity_is_sequence_not_text(self):
        controller = SelectionController()
        controller.select(1, "same text")
        controller.select(2, "same text")
        assert controller.current == Selection(2, "same text")

    def test_clear(self):
        controller = SelectionController()
        assert controller.clear() is False
        controller.select(3, "x")
        assert controller.clear() is True
        assert controller.current is None

    def test_stale_detection(self):
        controller = SelectionController()
        assert controller.is_stale([10]) is False
        controller.select(4, "old")
        assert controller.is_stale([4]) is False
        assert controller.is_stale([5]) is True

    def test_any_holder_keeps_selection_fresh(self):
        """One tab still holding the line is enough."""
        controller = SelectionController()
        controller.select(4, "rare")
        assert controller.is_stale([9, 2]) is False
        assert controller.is_stale([9, None]) is True
        assert controller.is_stale([]) is True


# =============================================================================
# Tests: Injection
# =============================================================================


class TestInjectSelection:
    """Merging the selected line into a tab's lines."""

    def test_no_selection(self):
        rendered, rank = inject_selection([Line(1, "a")], None)
        assert [(r.sequence, r.is_selected) for r in rendered] == [(1, False)]
        assert rank is None

    def test_injected_between_neighbors(self):
        lines = [Line(1, "foo first"), Line(3, "foo second")]
        rendered, rank = inject_selection(lines, Selection(2, "picked elsewhere"))

        assert [r.sequence for r in rendered] == [1, 2, 3]
        assert rendered[1].text == "picked elsewhere"
        assert rendered[1].is_selected
        assert rank == 1

    def test_existing_line_is_flagged_not_duplicated(self):
        lines = [Line(1, "a"), Line(2, "b"), Line(3, "c")]
        rendered, rank = inject_selection(lines, Selection(2, "b"))

        assert len(rendered) == 3
        assert [r.is_selected for r in rendered] == [False, True, False]
        assert rank == 1

    def test_injected_at_front_and_back(self):
        lines = [Line(5, "a"), Line(6, "b")]

        rendered, rank = inject_selection(lines, Selection(2, "early"))
        assert rank == 0
        assert rendered[0].sequence == 2

        rendered, rank = inject_selection(lines, Selection(9, "late"))
        assert rank == 2
        assert rendered[-1].sequence == 9

    def test_injected_into_empty_tab(self):
        rendered, rank = inject_selection([], Selection(3, "only"))
        assert [(r.sequence, r.is_selected) for r in rendered] == [(3, True)]
        assert rank == 0

    def test_input_lines_untouched(self):
        lines = [Line(1, "a"), Line(3, "c")]
        inject_selection(lines, Selection(2, "b"))
        assert lines == [Line(1, "a"), Line(3, "c")]
