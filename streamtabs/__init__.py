#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
streamtabs - Core module.

Splits a continuous stream of text lines into tabs: one with every line
and one per substring filter, with pause, unread counts and a pinned line
shown across all tabs.

Usage:
    from streamtabs import StreamEngine

    engine = StreamEngine(["error", "warn"])
    engine.ingest("warn: disk at 91%")
    frame = engine.frame()
"""

# Engine
from streamtabs.engine import StreamEngine

# Data models - Constants
from streamtabs.models import (
    ALL_TAB_LABEL,
    MAX_FILTERS,
    MAX_STORED_LINES_PER_TAB,
    MAX_TABS,
    POLL_INTERVAL,
)

# Data models - Enums
from streamtabs.models import (
    Mode,
    TabKind,
)

# Data models - Dataclasses
from streamtabs.models import (
    Frame,
    Line,
    RenderedLine,
    Selection,
)

# Intents
from streamtabs.models import (
    ClearSelection,
    CycleTab,
    Quit,
    SelectLine,
    SwitchTab,
    TogglePause,
)

# Components
from streamtabs.buffer import TabBuffer
from streamtabs.router import Router, SequenceAllocator, Tab, build_tabs
from streamtabs.selection import SelectionController, inject_selection
from streamtabs.unread import UnreadTracker
from streamtabs.view_state import SnapshotView, ViewStateMachine

# Input
from streamtabs.source import LineSource, run_ingestion, start_ingestion

# CLI entry point
from streamtabs.cli import main

__all__ = [
    # Engine
    "StreamEngine",
    # Constants
    "ALL_TAB_LABEL",
    "MAX_FILTERS",
    "MAX_STORED_LINES_PER_TAB",
    "MAX_TABS",
    "POLL_INTERVAL",
    # Enums
    "Mode",
    "TabKind",
    # Dataclasses
    "Frame",
    "Line",
    "RenderedLine",
    "Selection",
    # Intents
    "ClearSelection",
    "CycleTab",
    "Quit",
    "SelectLine",
    "SwitchTab",
    "TogglePause",
    # Components
    "TabBuffer",
    "Router",
    "SequenceAllocator",
    "Tab",
    "build_tabs",
    "SelectionController",
    "inject_selection",
    "UnreadTracker",
    "SnapshotView",
    "ViewStateMachine",
    # Input
    "LineSource",
    "run_ingestion",
    "start_ingestion",
    # CLI
    "main",
]
