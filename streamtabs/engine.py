#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
StreamEngine - shared state between the ingestion thread and the viewer.

The engine owns the tabs, unread counters, display mode, selection and
focused tab. Ingestion mutates it one line at a time; the presenter reads
copy-out Frames and sends intents back. One re-entrant lock serializes
all of it so a render never sees a half-applied append or a pause that
snapshotted only some tabs.
"""

import threading
from typing import List, Optional, Sequence

from streamtabs.debug_logger import DebugLogger, get_logger
from streamtabs.models import (
    MAX_STORED_LINES_PER_TAB,
    ClearSelection,
    CycleTab,
    Frame,
    Line,
    Mode,
    Quit,
    SelectLine,
    Selection,
    SwitchTab,
    TogglePause,
)
from streamtabs.router import Router, Tab, build_tabs
from streamtabs.selection import SelectionController, inject_selection
from streamtabs.unread import UnreadTracker
from streamtabs.view_state import ViewStateMachine


class StreamEngine:
    """
    Stream multiplexer and view state for one viewer instance.

    Attributes:
        tabs: Tab 0 followed by one tab per filter
        quit_requested: Set once the user asks to quit; ingestion stops on it
    """

    def __init__(
        self,
        filters: Sequence[str],
        capacity: int = MAX_STORED_LINES_PER_TAB,
        logger: Optional[DebugLogger] = None,
    ) -> None:
        """
        Build the tabs for a fixed set of filters.

        Args:
            filters: Filter strings for tabs 1..N
            capacity: Per-tab buffer capacity
            logger: Debug logger (defaults to the global one)
        """
        self.tabs: List[Tab] = build_tabs(filters, capacity)
        self.capacity = capacity
        self.unread = UnreadTracker(len(self.tabs))
        self.router = Router(self.tabs, self.unread)
        self.view = ViewStateMachine()
        self.selection = SelectionController()
        self.quit_requested = threading.Event()
        self._focused = 0
        self._input_closed = False
        self._version = 0
        self._lock = threading.RLock()
        self._logger = logger or get_logger()

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def tab_count(self) -> int:
        return len(self.tabs)

    @property
    def focused_tab_index(self) -> int:
        with self._lock:
            return self._focused

    @property
    def mode(self) -> Mode:
        with self._lock:
            return self.view.mode

    @property
    def paused(self) -> bool:
        return self.mode is Mode.PAUSED

    @property
    def version(self) -> int:
        """Increases on every state change; lets the presenter skip idle redraws."""
        with self._lock:
            return self._version

    @property
    def input_closed(self) -> bool:
        with self._lock:
            return self._input_closed

    @property
    def lines_read(self) -> int:
        return self.router.allocator.next_sequence

    @property
    def current_selection(self) -> Optional[Selection]:
        with self._lock:
            return self.selection.current

    def unread_counts(self) -> List[int]:
        with self._lock:
            return self.unread.unread_counts()

    # =========================================================================
    # Ingestion side
    # =========================================================================

    def ingest(self, text: str) -> Line:
        """
        Route one incoming line into every matching tab.

        While live, a line landing in the focused tab counts as read right
        away. While paused it stays unread like in any other tab.
        """
        with self._lock:
            routed: List[int] = []
            line = self.router.ingest(text, on_append=routed.append)
            if not self.view.paused and self._focused in routed:
                self.unread.mark_seen_through(self._focused, self.unread.total(self._focused))
            self._version += 1
        self._logger.line_routed(line.sequence, routed)
        return line

    def close_input(self, reason: str = "eof") -> None:
        """Record that the line source is exhausted; the state stays browsable."""
        with self._lock:
            if self._input_closed:
                return
            self._input_closed = True
            self._version += 1
        self._logger.input_closed(self.lines_read, reason)

    # =========================================================================
    # Intents
    # =========================================================================

    def _mark_focused_seen(self) -> None:
        index = self._focused
        cutoff = self.view.seen_cutoff(index, self.unread.total(index))
        self.unread.mark_seen_through(index, cutoff)

    def focus(self, index: int) -> bool:
        """
        Focus a tab and mark it read up to what is visible.

        Out-of-range indices are ignored.

        Returns:
            True if the index was valid
        """
        with self._lock:
            if not 0 <= index < len(self.tabs):
                return False
            unread_before = self.unread.unread(index)
            self._focused = index
            self._mark_focused_seen()
            self._version += 1
            paused = self.view.paused
        self._logger.tab_focused(index, unread_before, paused)
        return True

    def cycle(self) -> int:
        """Focus the next tab, wrapping to tab 0. Returns the new index."""
        with self._lock:
            next_index = (self._focused + 1) % len(self.tabs)
            self.focus(next_index)
            return next_index

    def pause(self) -> bool:
        with self._lock:
            changed = self.view.pause([tab.buffer for tab in self.tabs])
            if changed:
                self._mark_focused_seen()
                self._version += 1
                captured = [s.captured_length for s in self.view.snapshots]
        if changed:
            self._logger.pause_changed(True, captured)
        return changed

    def unpause(self) -> bool:
        with self._lock:
            changed = self.view.unpause()
            if changed:
                self._mark_focused_seen()
                self._version += 1
        if changed:
            self._logger.pause_changed(False)
        return changed

    def toggle_pause(self) -> Mode:
        with self._lock:
            if self.view.paused:
                self.unpause()
            else:
                self.pause()
            return self.view.mode

    def select(self, sequence: int, text: str) -> Optional[Selection]:
        """Toggle the global selection. Returns the selection afterwards."""
        with self._lock:
            selection = self.selection.select(sequence, text)
            self._version += 1
        self._logger.selection_changed(selection.sequence if selection else None)
        return selection

    def clear_selection(self) -> bool:
        with self._lock:
            cleared = self.selection.clear()
            if cleared:
                self._version += 1
        if cleared:
            self._logger.selection_changed(None)
        return cleared

    def request_quit(self) -> None:
        """Ask ingestion to stop; the presenter exits on its own."""
        self.quit_requested.set()
        self._logger.quit(self.lines_read)

    def dispatch(self, intent) -> None:
        """Apply one presenter intent."""
        if isinstance(intent, SwitchTab):
            self.focus(intent.index)
        elif isinstance(intent, CycleTab):
            self.cycle()
        elif isinstance(intent, TogglePause):
            self.toggle_pause()
        elif isinstance(intent, SelectLine):
            self.select(intent.sequence, intent.text)
        elif isinstance(intent, ClearSelection):
            self.clear_selection()
        elif isinstance(intent, Quit):
            self.request_quit()
        else:
            raise TypeError(f"unknown intent: {intent!r}")

    # =========================================================================
    # Render side
    # =========================================================================

    def visible_lines(self, index: int) -> List[Line]:
        """
        Copy out the lines a tab may show in the current mode.

        Live: the whole buffer (the presenter shows its tail). Paused: the
        oldest lines that existed when the pause began.
        """
        with self._lock:
            buffer = self.tabs[index].buffer
            return buffer.head(self.view.visible_count(index, buffer))

    def _injectable_selection(self) -> Optional[Selection]:
        current = self.selection.current
        if current is None:
            return None
        holders = [tab.buffer.oldest_sequence for tab in self.tabs if tab.matches(current.text)]
        if self.selection.is_stale(holders):
            return None
        return current

    def frame(self, index: Optional[int] = None) -> Frame:
        """
        Build the render view for a tab (the focused one by default).

        Returns:
            Frame with the tab's visible lines, the selection injected at its
            chronological slot, and the global state around it
        """
        with self._lock:
            if index is None:
                index = self._focused
            lines = self.visible_lines(index)
            rendered, rank = inject_selection(lines, self._injectable_selection())
            return Frame(
                visible_lines=rendered,
                unread_counts=self.unread.unread_counts(),
                mode=self.view.mode,
                focused_tab_index=self._focused,
                selection_rank=rank,
                tab_labels=[tab.label for tab in self.tabs],
                input_closed=self._input_closed,
            )
