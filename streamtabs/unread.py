#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Per-tab unread accounting.

Each tab counts every match it ever received and how many of those the
user has seen. The seen mark only moves forward, so unread counts never
drop except at a view event.
"""

import threading
from typing import List


class UnreadTracker:
    """Total and seen match counters for a fixed number of tabs."""

    def __init__(self, tab_count: int) -> None:
        self._total: List[int] = [0] * tab_count
        self._seen: List[int] = [0] * tab_count
        self._lock = threading.Lock()

    def record(self, index: int) -> int:
        """Count one new match for a tab. Returns the new total."""
        with self._lock:
            self._total[index] += 1
            return self._total[index]

    def total(self, index: int) -> int:
        with self._lock:
            return self._total[index]

    def totals(self) -> List[int]:
        with self._lock:
            return list(self._total)

    def unread(self, index: int) -> int:
        with self._lock:
            return max(0, self._total[index] - self._seen[index])

    def unread_counts(self) -> List[int]:
        """Unread count for every tab, read under one lock."""
        with self._lock:
            return [max(0, t - s) for t, s in zip(self._total, self._seen)]

    def mark_seen_through(self, index: int, cutoff: int) -> None:
        """
        Mark matches up to a cumulative count as seen.

        Args:
            index: Tab index
            cutoff: Cumulative match count the user has now seen; capped at the
                    tab total and ignored if it would move the mark backwards
        """
        with self._lock:
            capped = min(cutoff, self._total[index])
            if capped > self._seen[index]:
                self._seen[index] = capped
