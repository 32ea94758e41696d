#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Main TUI application for the streamtabs viewer.

Shows the unfiltered stream and one tab per filter with:
- Unread badges per tab
- Pause (space) freezing every tab at the same instant
- A pinned line injected into every tab (click or 's', 'd' to clear)
"""

from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer

from streamtabs.debug_logger import get_logger
from streamtabs.engine import StreamEngine
from streamtabs.models import (
    POLL_INTERVAL,
    ClearSelection,
    CycleTab,
    Quit,
    SelectLine,
    SwitchTab,
    TogglePause,
)
from streamtabs.source import LineSource, start_ingestion
from streamtabs.tui.widgets import LineView, TabStrip


class StreamTabsApp(App):
    """
    Textual presenter for a StreamEngine.

    Polls the engine on a short timer and redraws only when its state
    changed. Every key and click becomes an engine intent.
    """

    TITLE = "streamtabs"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("q", "quit_viewer", "Quit"),
        Binding("ctrl+c", "quit_viewer", "Quit", show=False, priority=True),
        Binding("tab", "cycle_tab", "Next tab", priority=True),
        Binding("space", "toggle_pause", "Pause"),
        Binding("s,S", "select_middle", "Select"),
        Binding("d,D", "clear_selection", "Clear"),
    ] + [Binding(str(i), f"focus_tab({i})", f"Tab {i}", show=False) for i in range(10)]

    def __init__(
        self,
        engine: StreamEngine,
        source: Optional[LineSource] = None,
    ) -> None:
        """
        Initialize the app.

        Args:
            engine: Engine holding the tabs and view state
            source: Line source to ingest on a background thread (optional;
                    without one the app only browses what the engine holds)
        """
        super().__init__()
        self.engine = engine
        self.source = source
        self._drawn_version = -1
        self._refresh_timer = None
        self._debug_logger = get_logger()

    def compose(self) -> ComposeResult:
        """Compose the app layout."""
        yield TabStrip(id="tab-strip")
        yield LineView(id="line-view")
        yield Footer()

    def on_mount(self) -> None:
        """Start ingestion and the redraw timer."""
        if self.source is not None:
            start_ingestion(self.source, self.engine)

        self._redraw()
        self._refresh_timer = self.set_interval(POLL_INTERVAL, self._on_refresh_timer)

    def _on_refresh_timer(self) -> None:
        """Redraw when the engine changed since the last frame."""
        if self.engine.version != self._drawn_version:
            self._redraw()

    def _redraw(self) -> None:
        """Pull a frame from the engine and hand it to the widgets."""
        version = self.engine.version
        try:
            frame = self.engine.frame()
            with self._debug_logger.timer("render", {"lines": len(frame.visible_lines)}):
                self.query_one("#tab-strip", TabStrip).show_frame(frame)
                self.query_one("#line-view", LineView).show_frame(frame)
        except Exception as e:
            self._debug_logger.error("render", str(e))
            self.notify(f"Error drawing frame: {e}", severity="error")
        self._drawn_version = version

    def _apply(self, intent) -> None:
        self.engine.dispatch(intent)
        self._redraw()

    # =========================================================================
    # Actions
    # =========================================================================

    def action_cycle_tab(self) -> None:
        """Focus the next tab."""
        self._apply(CycleTab())

    def action_focus_tab(self, index: int) -> None:
        """Jump to a tab by number; unknown tabs are ignored."""
        self._apply(SwitchTab(index))

    def action_toggle_pause(self) -> None:
        """Freeze or resume every tab."""
        self._apply(TogglePause())

    def action_clear_selection(self) -> None:
        self._apply(ClearSelection())

    def action_select_middle(self) -> None:
        """Toggle selection of the middle line on screen."""
        line = self.query_one("#line-view", LineView).middle_visible_line()
        if line is not None:
            self._apply(SelectLine(line.sequence, line.text))

    def action_quit_viewer(self) -> None:
        """Stop ingestion and leave the app."""
        self.engine.dispatch(Quit())
        self.exit()

    # =========================================================================
    # Mouse
    # =========================================================================

    def on_tab_strip_tab_clicked(self, message: TabStrip.TabClicked) -> None:
        self._apply(SwitchTab(message.index))

    def on_line_view_line_clicked(self, message: LineView.LineClicked) -> None:
        self._apply(SelectLine(message.line.sequence, message.line.text))


def run_app(engine: StreamEngine, source: Optional[LineSource] = None) -> None:
    """
    Run the TUI application.

    Args:
        engine: Engine built from the command-line filters
        source: Line source feeding the engine
    """
    app = StreamTabsApp(engine, source=source)
    app.run()
