#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Live/paused state machine with per-tab snapshots.

Pausing records, for every tab at the same instant, how many lines the
buffer held and how many it had ever received. While paused only the
lines that existed at that moment are visible; lines arriving later keep
filling the buffer underneath but stay hidden until unpause.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from streamtabs.buffer import TabBuffer
from streamtabs.models import Mode


@dataclass(frozen=True)
class SnapshotView:
    """
    Pause-time bookkeeping for one tab.

    Attributes:
        captured_length: Buffer length when pause began
        captured_total: Cumulative appends to the buffer when pause began
    """

    captured_length: int
    captured_total: int

    def visible_count(self, length: int, total: int) -> int:
        """
        How many of the oldest buffered lines belong to the snapshot now.

        Eviction is FIFO, so lines appended after the pause are only dropped
        once every pre-pause line is gone. Whatever post-pause lines remain
        sit at the tail; the rest of the buffer is the (possibly shrunken)
        snapshot.
        """
        appended_since = max(0, total - self.captured_total)
        return min(self.captured_length, length - min(appended_since, length))


class ViewStateMachine:
    """Global display mode plus one SnapshotView per tab while paused."""

    def __init__(self) -> None:
        self.mode = Mode.LIVE
        self._snapshots: Optional[List[SnapshotView]] = None

    @property
    def paused(self) -> bool:
        return self.mode is Mode.PAUSED

    @property
    def snapshots(self) -> List[SnapshotView]:
        return list(self._snapshots or [])

    def snapshot(self, index: int) -> Optional[SnapshotView]:
        if self._snapshots is None or not 0 <= index < len(self._snapshots):
            return None
        return self._snapshots[index]

    def pause(self, buffers: Sequence[TabBuffer]) -> bool:
        """
        Enter paused mode, snapshotting every buffer.

        Callers must hold the lock that serializes appends so all tabs are
        captured at one consistent moment.

        Returns:
            True if the mode changed, False if already paused
        """
        if self.paused:
            return False
        snapshots = []
        for buffer in buffers:
            length, total = buffer.counts()
            snapshots.append(SnapshotView(captured_length=length, captured_total=total))
        self._snapshots = snapshots
        self.mode = Mode.PAUSED
        return True

    def unpause(self) -> bool:
        """Return to live mode and discard all snapshots."""
        if not self.paused:
            return False
        self._snapshots = None
        self.mode = Mode.LIVE
        return True

    def toggle(self, buffers: Sequence[TabBuffer]) -> Mode:
        if self.paused:
            self.unpause()
        else:
            self.pause(buffers)
        return self.mode

    def visible_count(self, index: int, buffer: TabBuffer) -> int:
        """Number of the buffer's oldest lines a render pass may show."""
        length, total = buffer.counts()
        snapshot = self.snapshot(index)
        if snapshot is None:
            return length
        return snapshot.visible_count(length, total)

    def seen_cutoff(self, index: int, live_total: int) -> int:
        """
        Cumulative match count that focusing a tab marks as read.

        Live: everything received so far. Paused: only what existed when the
        pause began.
        """
        snapshot = self.snapshot(index)
        if snapshot is None:
            return live_total
        return snapshot.captured_total
