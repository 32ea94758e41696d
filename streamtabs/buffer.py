#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Bounded per-tab line storage.

Each tab keeps its own ring buffer of matched lines. Appends past the
capacity drop the oldest entry in the same critical section, so a reader
never sees the buffer over capacity or mid-eviction.
"""

import threading
from collections import deque
from typing import Deque, List, Optional, Tuple

from streamtabs.models import MAX_STORED_LINES_PER_TAB, Line


class TabBuffer:
    """
    Ring buffer of lines ordered by sequence number.

    Only copy-out reads are exposed; the underlying deque never leaves
    this object.

    Attributes:
        capacity: Maximum number of lines retained
    """

    def __init__(self, capacity: int = MAX_STORED_LINES_PER_TAB) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._lines: Deque[Line] = deque(maxlen=capacity)
        self._total_appended = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    @property
    def total_appended(self) -> int:
        """Number of lines ever appended, including evicted ones."""
        with self._lock:
            return self._total_appended

    @property
    def oldest_sequence(self) -> Optional[int]:
        """Sequence number of the oldest retained line, or None when empty."""
        with self._lock:
            return self._lines[0].sequence if self._lines else None

    def append(self, line: Line) -> None:
        """
        Store a line, evicting the oldest one when full.

        Args:
            line: Line to append. Its sequence must exceed every stored one.
        """
        with self._lock:
            if self._lines and line.sequence <= self._lines[-1].sequence:
                raise ValueError(
                    f"sequence {line.sequence} is not after {self._lines[-1].sequence}"
                )
            # deque(maxlen=...) drops from the left as part of the append
            self._lines.append(line)
            self._total_appended += 1

    def range(self, start: int, stop: int) -> List[Line]:
        """
        Copy out lines by logical position, oldest first.

        Args:
            start: First position (inclusive), clamped to the buffer
            stop: Last position (exclusive), clamped to the buffer

        Returns:
            Lines in [start, stop), possibly empty
        """
        with self._lock:
            size = len(self._lines)
            start = max(0, min(start, size))
            stop = max(start, min(stop, size))
            if start == 0 and stop == size:
                return list(self._lines)
            return [self._lines[i] for i in range(start, stop)]

    def head(self, n: int) -> List[Line]:
        """Return the oldest n lines."""
        return self.range(0, n)

    def tail(self, n: int) -> List[Line]:
        """Return the most recent n lines, oldest first."""
        with self._lock:
            if n <= 0:
                return []
            lines = list(self._lines)
        return lines[-n:] if len(lines) > n else lines

    def counts(self) -> Tuple[int, int]:
        """Return (length, total_appended) read together."""
        with self._lock:
            return len(self._lines), self._total_appended
