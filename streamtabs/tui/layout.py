#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Layout math for the viewer: tab strip geometry, unread badges and the
body viewport. Pure functions, so they can be tested without a terminal.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from streamtabs.models import RenderedLine

PAUSED_LABEL = " (paused)"
EOF_LABEL = " (eof)"
UNREAD_SLOT_WIDTH = 6
UNREAD_CAP = 999


def clip_with_ellipsis(text: str, width: int) -> str:
    """
    Clip text to a width, marking truncation with "...".

    Args:
        text: Text to clip
        width: Maximum number of characters

    Returns:
        The text itself if it fits, otherwise a prefix ending in "..."
    """
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= 3:
        return "." * width
    return text[: width - 3] + "..."


def fit_tab_title(label: str, width: int) -> str:
    """Pad a tab label with one space each side and fit it to exactly width columns."""
    if width <= 0:
        return ""
    if width <= 2:
        return " " * width
    piece = f" {clip_with_ellipsis(label, width - 2)} "
    return piece[:width].ljust(width)


def format_unread_slot(unread: int) -> str:
    """
    Fixed-width unread badge, blank when nothing is unread.

    Example:
        >>> format_unread_slot(7)
        '    •7'
        >>> format_unread_slot(1000)
        ' •999+'
    """
    if unread <= 0:
        return " " * UNREAD_SLOT_WIDTH
    badge = "•999+" if unread > UNREAD_CAP else f"•{unread}"
    return badge.rjust(UNREAD_SLOT_WIDTH)


@dataclass(frozen=True)
class TabCell:
    """
    Geometry and text pieces for one tab box in the strip.

    Attributes:
        index: Tab index
        left: Column of the left border
        right: Column of the right border
        number: Shortcut piece, e.g. " 3 "
        title: Label piece, padded to its budget
        unread: Unread badge slot
    """

    index: int
    left: int
    right: int
    number: str
    title: str
    unread: str

    @property
    def inner_width(self) -> int:
        return self.right - self.left - 1

    def inner_pieces(self) -> List[Tuple[str, str]]:
        """
        Content pieces clipped to the inner width, tagged with their role.

        Roles are "number", "title", "unread" and "pad".
        """
        remaining = self.inner_width
        pieces = []
        for role, text in (("number", self.number), ("title", self.title), ("unread", self.unread), ("pad", " ")):
            if remaining <= 0:
                break
            shown = text[:remaining]
            if shown:
                pieces.append((role, shown))
                remaining -= len(shown)
        if remaining > 0:
            pieces.append(("pad", " " * remaining))
        return pieces


def layout_tabs(
    labels: Sequence[str],
    unread_counts: Sequence[int],
    total_cols: int,
    paused: bool = False,
) -> List[TabCell]:
    """
    Fit tab boxes into the terminal width, left to right.

    Each box holds the shortcut number, the label and the unread slot. Labels
    are truncated to make room; tabs that no longer fit are left out. When
    paused, room is kept for the paused marker.

    Args:
        labels: Tab labels in index order
        unread_counts: Unread count per tab
        total_cols: Available width
        paused: Whether to reserve space for the paused marker

    Returns:
        One TabCell per tab that fits
    """
    limit = total_cols - len(PAUSED_LABEL) if paused else total_cols
    limit = max(0, limit)
    cells: List[TabCell] = []
    x = 0

    for index, label in enumerate(labels):
        if x >= limit:
            break
        remaining = limit - x
        if remaining < 3:
            break

        number = f" {index} "
        unread = format_unread_slot(unread_counts[index] if index < len(unread_counts) else 0)
        fixed_width = len(number) + len(unread) + 1
        desired = fixed_width + len(label) + 2

        inner_width = min(desired, remaining - 2)
        title = fit_tab_title(label, max(0, inner_width - fixed_width))
        right = x + inner_width + 1
        cells.append(TabCell(index=index, left=x, right=right, number=number, title=title, unread=unread))

        x = right + 1
        if index + 1 < len(labels) and x < limit:
            x += 1

    return cells


def tab_index_at(cells: Sequence[TabCell], column: int) -> Optional[int]:
    """Tab index whose box spans a column, if any."""
    for cell in cells:
        if cell.left <= column <= cell.right:
            return cell.index
    return None


def viewport_for_lines(
    body_height: int,
    line_count: int,
    selection_rank: Optional[int],
    paused: bool,
) -> Tuple[int, int, int]:
    """
    Decide which lines to draw and where.

    Live (or no selection): the newest lines, bottom anchored. Paused with a
    selection: a window that puts the selected line as close to the middle
    row as the content allows.

    Args:
        body_height: Rows available for lines
        line_count: Number of visible lines in the frame
        selection_rank: Index of the selected line in the frame, if any
        paused: Whether the viewer is paused

    Returns:
        (start_index, visible_count, first_row) where first_row is the body row
        of the first drawn line
    """
    visible_count = min(line_count, max(0, body_height))
    if visible_count == 0:
        return 0, 0, 0

    if paused and selection_rank is not None:
        half = body_height // 2
        start_index = max(0, selection_rank - half)
        start_index = min(start_index, line_count - visible_count)

        selected_row = selection_rank - start_index
        first_row = max(0, half - selected_row)
        first_row = min(first_row, body_height - visible_count)
        return start_index, visible_count, first_row

    start_index = line_count - visible_count
    return start_index, visible_count, body_height - visible_count


def middle_visible_line(rows: Sequence[Optional[RenderedLine]]) -> Optional[RenderedLine]:
    """The middle line among the rows that were drawn with content."""
    drawn = [row for row in rows if row is not None]
    if not drawn:
        return None
    return drawn[len(drawn) // 2]
