#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Sequence allocation and routing of incoming lines to tabs.

Every line gets one global sequence number, then lands in tab 0 and in
each filter tab whose pattern it contains.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from streamtabs.buffer import TabBuffer
from streamtabs.models import (
    ALL_TAB_LABEL,
    MAX_FILTERS,
    MAX_STORED_LINES_PER_TAB,
    Line,
    TabKind,
)
from streamtabs.unread import UnreadTracker


class SequenceAllocator:
    """Single allocation point for line sequence numbers, starting at 0."""

    def __init__(self, start: int = 0) -> None:
        self._next = start
        self._lock = threading.Lock()

    @property
    def next_sequence(self) -> int:
        """The number the next allocation will return."""
        with self._lock:
            return self._next

    def allocate(self) -> int:
        with self._lock:
            sequence = self._next
            self._next += 1
            return sequence


@dataclass
class Tab:
    """
    One view over the stream.

    Attributes:
        index: Position in the tab strip (0 is the unfiltered tab)
        kind: ALL or FILTER
        pattern: Substring to match; empty for the ALL tab
        buffer: Bounded storage of matched lines
    """

    index: int
    kind: TabKind
    pattern: str = ""
    buffer: TabBuffer = field(default_factory=TabBuffer)

    @property
    def label(self) -> str:
        return ALL_TAB_LABEL if self.kind is TabKind.ALL else self.pattern

    def matches(self, text: str) -> bool:
        """Case-sensitive substring test; the ALL tab matches everything."""
        if self.kind is TabKind.ALL:
            return True
        return self.pattern in text


def build_tabs(filters: Sequence[str], capacity: int = MAX_STORED_LINES_PER_TAB) -> List[Tab]:
    """
    Create tab 0 plus one filter tab per pattern.

    Args:
        filters: Filter strings, in tab order (at most MAX_FILTERS)
        capacity: Per-tab buffer capacity

    Returns:
        List of tabs, index 0 first

    Raises:
        ValueError: If there are too many filters or one is empty
    """
    if len(filters) > MAX_FILTERS:
        raise ValueError(f"at most {MAX_FILTERS} filters are supported, got {len(filters)}")

    tabs = [Tab(index=0, kind=TabKind.ALL, buffer=TabBuffer(capacity))]
    for offset, pattern in enumerate(filters, start=1):
        if not pattern:
            raise ValueError("filter strings must not be empty")
        tabs.append(Tab(index=offset, kind=TabKind.FILTER, pattern=pattern, buffer=TabBuffer(capacity)))
    return tabs


class Router:
    """
    Fan-out of ingested lines into tab buffers.

    Runs synchronously with ingestion: one call per incoming line, in
    arrival order.
    """

    def __init__(
        self,
        tabs: List[Tab],
        unread: UnreadTracker,
        allocator: Optional[SequenceAllocator] = None,
    ) -> None:
        self.tabs = tabs
        self.unread = unread
        self.allocator = allocator or SequenceAllocator()

    def matching_tabs(self, text: str) -> List[int]:
        """Indices of the tabs a line belongs to."""
        return [tab.index for tab in self.tabs if tab.matches(text)]

    def ingest(self, text: str, on_append: Optional[Callable[[int], None]] = None) -> Line:
        """
        Number a line and append it to every matching tab.

        Args:
            text: Raw line text
            on_append: Called with each tab index after its append is recorded

        Returns:
            The immutable Line that was stored
        """
        line = Line(sequence=self.allocator.allocate(), text=text)
        for index in self.matching_tabs(text):
            self.tabs[index].buffer.append(line)
            self.unread.record(index)
            if on_append is not None:
                on_append(index)
        return line
