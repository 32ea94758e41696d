#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Global line selection and its injection into every tab.

One line can be pinned at a time. It is never copied into a tab buffer;
instead each render merges it into the tab's visible lines at the slot
its sequence number falls into.
"""

from bisect import bisect_left
from typing import Iterable, List, Optional, Sequence, Tuple

from streamtabs.models import Line, RenderedLine, Selection


class SelectionController:
    """Holds at most one selected line, toggled by sequence number."""

    def __init__(self) -> None:
        self._selection: Optional[Selection] = None

    @property
    def current(self) -> Optional[Selection]:
        return self._selection

    def select(self, sequence: int, text: str) -> Optional[Selection]:
        """
        Toggle the selection.

        Selecting the line that is already selected clears it; selecting any
        other line replaces the selection. Identity is the sequence number,
        since different lines can share the same text.

        Returns:
            The selection after the toggle, or None if it was cleared
        """
        if self._selection is not None and self._selection.sequence == sequence:
            self._selection = None
        else:
            self._selection = Selection(sequence=sequence, text=text)
        return self._selection

    def clear(self) -> bool:
        """Drop the selection. Returns True if there was one."""
        had_selection = self._selection is not None
        self._selection = None
        return had_selection

    def is_stale(self, holder_oldest: Iterable[Optional[int]]) -> bool:
        """
        Whether the selected line has been evicted from every buffer.

        Args:
            holder_oldest: Oldest retained sequence of each tab that matches
                           the selected line (None for an empty tab). A tab
                           keeps a contiguous run of its matches, so it still
                           holds the line when that run starts at or before it.
        """
        if self._selection is None:
            return False
        sequence = self._selection.sequence
        return not any(oldest is not None and oldest <= sequence for oldest in holder_oldest)


def inject_selection(
    lines: Sequence[Line],
    selection: Optional[Selection],
) -> Tuple[List[RenderedLine], Optional[int]]:
    """
    Merge the selected line into a tab's visible lines.

    Args:
        lines: Visible lines of one tab, ordered by sequence
        selection: The global selection, or None

    Returns:
        (rendered lines, rank of the selected line or None)

    Example:
        >>> lines = [Line(1, "foo first"), Line(3, "foo second")]
        >>> rendered, rank = inject_selection(lines, Selection(2, "picked"))
        >>> [r.sequence for r in rendered], rank
        ([1, 2, 3], 1)
    """
    rendered = [RenderedLine(sequence=line.sequence, text=line.text) for line in lines]
    if selection is None:
        return rendered, None

    sequences = [line.sequence for line in lines]
    rank = bisect_left(sequences, selection.sequence)
    if rank < len(sequences) and sequences[rank] == selection.sequence:
        existing = rendered[rank]
        rendered[rank] = RenderedLine(sequence=existing.sequence, text=existing.text, is_selected=True)
    else:
        rendered.insert(
            rank,
            RenderedLine(sequence=selection.sequence, text=selection.text, is_selected=True),
        )
    return rendered, rank
