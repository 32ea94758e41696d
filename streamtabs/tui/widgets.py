#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Widgets for the streamtabs viewer.

TabStrip draws the row of tab boxes with unread badges; LineView draws
the focused tab's lines. Both only render the last Frame they were given
and turn mouse clicks into messages for the app.
"""

from typing import List, Optional

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from streamtabs.models import Frame, RenderedLine
from streamtabs.tui.layout import (
    EOF_LABEL,
    PAUSED_LABEL,
    TabCell,
    layout_tabs,
    middle_visible_line,
    tab_index_at,
    viewport_for_lines,
)

# Rich styles for the strip and body
FOCUSED_BORDER = "white"
IDLE_BORDER = "bright_black"
NUMBER_STYLE = "bright_black"
ALL_TAB_TITLE_STYLE = "bright_black"
UNREAD_STYLE = "dark_cyan"
STATUS_STYLE = "grey70"
SELECTED_STYLE = "yellow"


class TabStrip(Widget):
    """Three-row strip of rounded tab boxes."""

    class TabClicked(Message):
        """Posted when a tab box is clicked."""

        def __init__(self, index: int) -> None:
            self.index = index
            super().__init__()

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.frame = Frame()
        self.cells: List[TabCell] = []

    def show_frame(self, frame: Frame) -> None:
        self.frame = frame
        self.refresh()

    def render(self) -> Text:
        frame = self.frame
        width = self.size.width
        self.cells = layout_tabs(frame.tab_labels, frame.unread_counts, width, frame.paused)

        top, middle, bottom = Text(), Text(), Text()
        column = 0
        for cell in self.cells:
            if cell.left > column:
                gap = " " * (cell.left - column)
                for row in (top, middle, bottom):
                    row.append(gap)

            border = FOCUSED_BORDER if cell.index == frame.focused_tab_index else IDLE_BORDER
            horizontal = "─" * cell.inner_width
            top.append(f"╭{horizontal}╮", style=border)
            bottom.append(f"╰{horizontal}╯", style=border)

            middle.append("│", style=border)
            for role, piece in cell.inner_pieces():
                if role == "number":
                    middle.append(piece, style=NUMBER_STYLE)
                elif role == "title" and cell.index == 0:
                    middle.append(piece, style=ALL_TAB_TITLE_STYLE)
                elif role == "unread":
                    middle.append(piece, style=UNREAD_STYLE)
                else:
                    middle.append(piece)
            middle.append("│", style=border)
            column = cell.right + 1

        status = ""
        if frame.paused:
            status += PAUSED_LABEL
        if frame.input_closed:
            status += EOF_LABEL
        if status and column < width:
            middle.append(status[: width - column], style=STATUS_STYLE)

        return Text("\n").join([top, middle, bottom])

    def on_click(self, event: events.Click) -> None:
        index = tab_index_at(self.cells, event.x)
        if index is not None:
            self.post_message(self.TabClicked(index))


class LineView(Widget):
    """Body of the viewer: the focused tab's lines, bottom anchored."""

    class LineClicked(Message):
        """Posted when a drawn line is clicked."""

        def __init__(self, line: RenderedLine) -> None:
            self.line = line
            super().__init__()

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.frame = Frame()
        self.rows: List[Optional[RenderedLine]] = []

    def show_frame(self, frame: Frame) -> None:
        self.frame = frame
        self.refresh()

    def layout_rows(self, height: int) -> List[Optional[RenderedLine]]:
        """Map each body row to the line drawn on it (None for blank rows)."""
        frame = self.frame
        lines = frame.visible_lines
        start, count, first_row = viewport_for_lines(height, len(lines), frame.selection_rank, frame.paused)
        rows: List[Optional[RenderedLine]] = [None] * max(0, height)
        for offset, line in enumerate(lines[start : start + count]):
            rows[first_row + offset] = line
        return rows

    def render(self) -> Text:
        width = self.size.width
        self.rows = self.layout_rows(self.size.height)

        rendered = []
        for line in self.rows:
            if line is None:
                rendered.append(Text())
                continue
            text = Text.from_ansi(line.text)
            if line.is_selected:
                text = Text(text.plain, style=SELECTED_STYLE)
            text.truncate(width, overflow="crop")
            rendered.append(text)
        return Text("\n", no_wrap=True, overflow="crop").join(rendered)

    def middle_visible_line(self) -> Optional[RenderedLine]:
        return middle_visible_line(self.rows)

    def on_click(self, event: events.Click) -> None:
        if 0 <= event.y < len(self.rows):
            line = self.rows[event.y]
            if line is not None:
                self.post_message(self.LineClicked(line))
