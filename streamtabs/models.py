#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data models for streamtabs.

Defines the immutable line record, tab and mode enums, the per-frame
render view handed to the presenter, and the user intents the presenter
sends back into the engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


# Per-tab storage bound. Oldest entries are evicted first.
MAX_STORED_LINES_PER_TAB = 5_000

# Tab 0 plus up to nine filter tabs, addressable with keys 0-9.
MAX_FILTERS = 9
MAX_TABS = MAX_FILTERS + 1

# Seconds between presenter polls of the engine.
POLL_INTERVAL = 0.05

ALL_TAB_LABEL = "(all)"


class TabKind(Enum):
    """How a tab decides membership of an incoming line."""

    ALL = "all"
    FILTER = "filter"


class Mode(Enum):
    """Process-wide display mode."""

    LIVE = "live"
    PAUSED = "paused"


@dataclass(frozen=True)
class Line:
    """
    A single ingested line.

    Attributes:
        sequence: Global arrival number, unique and strictly increasing
        text: Line content without the trailing newline
    """

    sequence: int
    text: str


@dataclass(frozen=True)
class Selection:
    """The one line pinned by the user, identified by its sequence number."""

    sequence: int
    text: str


@dataclass(frozen=True)
class RenderedLine:
    """A line as it should be drawn in the focused tab."""

    sequence: int
    text: str
    is_selected: bool = False


@dataclass
class Frame:
    """
    Everything the presenter needs for one render pass.

    Attributes:
        visible_lines: Focused tab content, oldest first, with the selection injected
        unread_counts: Unread matches per tab, indexed like the tabs
        mode: Live or paused
        focused_tab_index: Index of the tab being shown
        selection_rank: Position of the selected line in visible_lines, if shown
        tab_labels: Display label per tab
        input_closed: True once the line source reached end of stream
    """

    visible_lines: List[RenderedLine] = field(default_factory=list)
    unread_counts: List[int] = field(default_factory=list)
    mode: Mode = Mode.LIVE
    focused_tab_index: int = 0
    selection_rank: Optional[int] = None
    tab_labels: List[str] = field(default_factory=list)
    input_closed: bool = False

    @property
    def paused(self) -> bool:
        return self.mode is Mode.PAUSED


# =============================================================================
# Presenter -> engine intents
# =============================================================================


@dataclass(frozen=True)
class SwitchTab:
    index: int


@dataclass(frozen=True)
class CycleTab:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class SelectLine:
    sequence: int
    text: str


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class Quit:
    pass
