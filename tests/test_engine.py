#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Test suite for StreamEngine: intents, unread rules and frames.

Run with: pytest tests/test_engine.py -v
"""

import threading

import pytest

from streamtabs.debug_logger import reset_logger
from streamtabs.engine import StreamEngine
from streamtabs.models import (
    ClearSelection,
    CycleTab,
    Mode,
    Quit,
    SelectLine,
    Selection,
    SwitchTab,
    TogglePause,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Keep the debug logger disabled for engine tests."""
    monkeypatch.delenv("STREAMTABS_DEBUG", raising=False)
    monkeypatch.delenv("STREAMTABS_LOG_LEVEL", raising=False)
    monkeypatch.setenv("STREAMTABS_CONFIG", "/nonexistent/streamtabs/settings.json")
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def engine() -> StreamEngine:
    """Engine with tabs (all), foo, bar."""
    return StreamEngine(["foo", "bar"])


def visible_texts(engine: StreamEngine, index=None):
    return [line.text for line in engine.frame(index).visible_lines]


# =============================================================================
# Tests: Ingestion
# =============================================================================


class TestIngest:
    """Lines flowing into the tabs."""

    def test_scenario_a(self):
        engine = StreamEngine(["foo"])
        for text in ["a", "b foo", "c", "d foo"]:
            engine.ingest(text)

        assert visible_texts(engine, 0) == ["a", "b foo", "c", "d foo"]
        assert visible_texts(engine, 1) == ["b foo", "d foo"]

    def test_version_increases(self, engine):
        before = engine.version
        engine.ingest("x")
        assert engine.version > before

    def test_lines_read(self, engine):
        for text in ["1", "2", "3"]:
            engine.ingest(text)
        assert engine.lines_read == 3

    def test_close_input(self, engine):
        assert engine.input_closed is False
        engine.close_input()
        engine.close_input()
        assert engine.input_closed is True
        assert engine.frame().input_closed is True

    def test_capacity_applies_to_every_tab(self):
        engine = StreamEngine(["x"], capacity=3)
        for i in range(5):
            engine.ingest(f"x{i}")

        assert visible_texts(engine, 0) == ["x2", "x3", "x4"]
        assert visible_texts(engine, 1) == ["x2", "x3", "x4"]


# =============================================================================
# Tests: Unread accounting
# =============================================================================


class TestUnread:
    """Unread counts and the view events that clear them."""

    def test_filters_count_independently(self):
        engine = StreamEngine(["foo", "bar"])
        engine.ingest("foo only")
        engine.ingest("bar only")
        engine.ingest("foo and bar")

        # Tab 0 is focused and live, so it reads everything immediately
        assert engine.unread_counts() == [0, 2, 2]

    def test_focus_live_marks_read(self, engine):
        engine.ingest("foo and bar")
        engine.ingest("bar only")
        assert engine.unread_counts()[2] == 2

        engine.focus(2)
        assert engine.unread_counts()[2] == 0

    def test_paused_focus_keeps_post_pause_unread(self, engine):
        engine.ingest("bar before pause")
        engine.pause()
        engine.ingest("bar after pause")
        assert engine.unread_counts()[2] == 2

        engine.focus(2)
        assert engine.unread_counts()[2] == 1

    def test_focused_tab_accumulates_unread_while_paused(self, engine):
        engine.ingest("visible")
        assert engine.unread_counts()[0] == 0

        engine.pause()
        engine.ingest("hidden while paused")
        assert engine.unread_counts()[0] == 1

    def test_unpause_marks_focused_tab_read(self, engine):
        engine.pause()
        engine.ingest("hidden")
        engine.unpause()
        assert engine.unread_counts()[0] == 0

    def test_pause_marks_focused_tab_read_to_snapshot(self, engine):
        engine.focus(1)
        engine.ingest("foo")  # focused live: read
        engine.focus(0)
        engine.ingest("foo again")
        engine.focus(1)
        engine.focus(0)
        engine.ingest("foo third")
        assert engine.unread_counts()[1] == 1

        engine.focus(1)
        engine.pause()
        engine.ingest("foo fourth")
        assert engine.unread_counts()[1] == 1

    def test_unread_monotonic_without_view_events(self, engine):
        previous = engine.unread_counts()
        for i in range(40):
            engine.ingest("foo" if i % 2 else "bar")
            if i == 20:
                engine.pause()
            current = engine.unread_counts()
            assert current[1] >= previous[1]
            assert current[2] >= previous[2]
            previous = current


# =============================================================================
# Tests: Focus
# =============================================================================


class TestFocus:
    """Tab switching."""

    def test_invalid_index_is_ignored(self, engine):
        engine.focus(1)
        assert engine.focus(7) is False
        assert engine.focus(-1) is False
        assert engine.focused_tab_index == 1

    def test_cycle_wraps(self, engine):
        assert engine.cycle() == 1
        assert engine.cycle() == 2
        assert engine.cycle() == 0

    def test_frame_reports_focus(self, engine):
        engine.focus(2)
        assert engine.frame().focused_tab_index == 2


# =============================================================================
# Tests: Pause
# =============================================================================


class TestPause:
    """Snapshot semantics through the engine."""

    def test_pause_freezes_visible_lines(self, engine):
        for text in ["one", "two", "three", "four"]:
            engine.ingest(text)
        engine.pause()
        engine.ingest("five")
        engine.ingest("six")

        assert engine.mode is Mode.PAUSED
        assert visible_texts(engine) == ["one", "two", "three", "four"]

        engine.unpause()
        assert visible_texts(engine) == ["one", "two", "three", "four", "five", "six"]

    def test_pause_snapshots_all_tabs_at_once(self, engine):
        engine.ingest("foo 1")
        engine.ingest("bar 1")
        engine.pause()
        engine.ingest("foo 2")
        engine.ingest("bar 2")

        assert visible_texts(engine, 1) == ["foo 1"]
        assert visible_texts(engine, 2) == ["bar 1"]

    def test_toggle_pause(self, engine):
        assert engine.toggle_pause() is Mode.PAUSED
        assert engine.frame().paused
        assert engine.toggle_pause() is Mode.LIVE

    def test_pause_with_eviction(self):
        engine = StreamEngine(["x"], capacity=5)
        for i in range(4):
            engine.ingest(str(i))
        engine.pause()
        for i in range(4, 7):
            engine.ingest(str(i))

        assert visible_texts(engine) == ["2", "3"]


# =============================================================================
# Tests: Selection
# =============================================================================


class TestSelection:
    """Cross-tab injection of the selected line."""

    def test_scenario_d(self):
        """A selected line shows up in a tab that never matched it."""
        engine = StreamEngine(["foo"])
        texts = ["foo 0", "a", "foo 2", "b", "c", "foo 5", "d", "picked", "foo 8"]
        for text in texts:
            engine.ingest(text)

        engine.select(7, "picked")
        frame = engine.frame(1)

        assert [(l.sequence, l.is_selected) for l in frame.visible_lines] == [
            (0, False), (2, False), (5, False), (7, True), (8, False),
        ]
        assert frame.selection_rank == 3
        stored = engine.tabs[1].buffer.range(0, 100)
        assert 7 not in [line.sequence for line in stored]

    def test_selected_line_flagged_in_matching_tab(self, engine):
        engine.ingest("foo")
        engine.ingest("bar")
        engine.select(0, "foo")

        frame = engine.frame(0)
        assert [l.is_selected for l in frame.visible_lines] == [True, False]
        assert frame.selection_rank == 0

    def test_selection_survives_focus_and_pause(self, engine):
        engine.ingest("foo")
        engine.select(0, "foo")
        engine.focus(2)
        engine.pause()
        engine.unpause()
        assert engine.current_selection == Selection(0, "foo")
        assert engine.frame().selection_rank == 0

    def test_toggle_and_replace(self, engine):
        engine.select(3, "x")
        engine.select(3, "x")
        assert engine.current_selection is None

        engine.select(3, "x")
        engine.select(4, "y")
        assert engine.current_selection == Selection(4, "y")

    def test_clear_selection(self, engine):
        engine.select(1, "x")
        assert engine.clear_selection() is True
        assert engine.clear_selection() is False
        assert engine.frame().selection_rank is None

    def test_stale_selection_never_highlights(self):
        """An evicted selection stays recorded but is not injected."""
        engine = StreamEngine(["x"], capacity=3)
        engine.ingest("old")
        engine.select(0, "old")
        for i in range(3):
            engine.ingest(f"new {i}")

        assert engine.current_selection == Selection(0, "old")
        frame = engine.frame()
        assert frame.selection_rank is None
        assert all(not line.is_selected for line in frame.visible_lines)
        assert [l.text for l in frame.visible_lines] == ["new 0", "new 1", "new 2"]

        # Selecting it again still toggles it off
        assert engine.select(0, "old") is None

    def test_selection_held_only_by_filter_tab(self):
        """A line evicted from tab 0 but kept by a sparse filter tab still highlights."""
        engine = StreamEngine(["rare"], capacity=3)
        engine.ingest("rare event")
        for i in range(5):
            engine.ingest(f"noise {i}")

        engine.focus(1)
        engine.select(0, "rare event")

        frame = engine.frame(1)
        assert [(l.sequence, l.is_selected) for l in frame.visible_lines] == [(0, True)]
        assert frame.selection_rank == 0

        all_frame = engine.frame(0)
        assert [l.sequence for l in all_frame.visible_lines] == [0, 3, 4, 5]
        assert all_frame.visible_lines[0].is_selected
        assert all_frame.selection_rank == 0

    def test_selection_injected_into_paused_view(self, engine):
        for text in ["foo 0", "bar 1", "foo 2"]:
            engine.ingest(text)
        engine.focus(1)
        engine.pause()
        engine.select(1, "bar 1")

        frame = engine.frame()
        assert [l.text for l in frame.visible_lines] == ["foo 0", "bar 1", "foo 2"]
        assert frame.selection_rank == 1


# =============================================================================
# Tests: Intents
# =============================================================================


class TestDispatch:
    """Presenter intents."""

    def test_each_intent(self, engine):
        engine.ingest("foo")
        engine.dispatch(SwitchTab(1))
        assert engine.focused_tab_index == 1

        engine.dispatch(CycleTab())
        assert engine.focused_tab_index == 2

        engine.dispatch(SwitchTab(9))
        assert engine.focused_tab_index == 2

        engine.dispatch(TogglePause())
        assert engine.paused

        engine.dispatch(SelectLine(0, "foo"))
        assert engine.current_selection == Selection(0, "foo")

        engine.dispatch(ClearSelection())
        assert engine.current_selection is None

        engine.dispatch(Quit())
        assert engine.quit_requested.is_set()

    def test_unknown_intent(self, engine):
        with pytest.raises(TypeError):
            engine.dispatch("pause")


# =============================================================================
# Tests: Concurrency
# =============================================================================


class TestConcurrency:
    """Ingestion and rendering running at the same time."""

    def test_frames_consistent_during_ingest(self):
        engine = StreamEngine(["7"], capacity=200)
        done = threading.Event()
        problems = []

        def render_loop():
            while not done.is_set():
                frame = engine.frame(0)
                sequences = [l.sequence for l in frame.visible_lines]
                if len(sequences) > 200:
                    problems.append(("size", len(sequences)))
                if sequences != sorted(sequences):
                    problems.append(("order", sequences[:5]))
                engine.toggle_pause()

        thread = threading.Thread(target=render_loop)
        thread.start()
        try:
            for i in range(5000):
                engine.ingest(f"line {i}")
        finally:
            done.set()
            thread.join()

        assert problems == []
        assert engine.lines_read == 5000
