"""Incremental substring search over the rendered rows."""

from __future__ import annotations

import logging

from pi.tte.buffer import Document
from pi.tte.render import Viewport, ViewSnapshot

logger = logging.getLogger(__name__)

FORWARD = 1
BACKWARD = -1


def find_match(
    doc: Document, query: bytes, last_match: int = -1, direction: int = FORWARD
) -> tuple[int, int] | None:
    """Scan rows starting after *last_match*, wrapping around once.

    Returns ``(row_index, render_offset)`` of the first hit, or ``None``.
    With ``last_match == -1`` and a forward direction the scan starts at
    row 0.
    """
    if not query:
        return None
    current = last_match
    for _ in range(doc.num_rows):
        current += direction
        if current == -1:
            current = doc.num_rows - 1
        elif current == doc.num_rows:
            current = 0
        offset = doc.find(query, current)
        if offset != -1:
            return current, offset
    return None


class IncrementalSearch:
    """Search state that lives for the duration of one search prompt.

    The cursor and offsets are snapshotted when the search starts so that
    cancelling puts the view back exactly where it was.
    """

    def __init__(self, doc: Document, view: Viewport) -> None:
        self._doc = doc
        self._view = view
        self.saved = ViewSnapshot.take(view)
        self.last_match = -1
        self.direction = FORWARD

    def update(self, query: bytes, direction: int | None = None) -> bool:
        """Re-run the search for *query* and move the cursor to the hit.

        With no *direction* the query changed and the scan restarts from the
        top; otherwise it continues from the last match in that direction.
        """
        if direction is None:
            self.last_match = -1
            self.direction = FORWARD
        else:
            self.direction = direction
        if self.last_match == -1:
            self.direction = FORWARD

        match = find_match(self._doc, query, self.last_match, self.direction)
        if match is None:
            return False

        y, offset = match
        self.last_match = y
        self._view.cy = y
        self._view.cx = self._doc.rows[y].rx_to_cx(offset)
        # Scroll past the end so the next scroll() puts the match on top
        self._view.row_offset = self._doc.num_rows
        logger.debug("search %r matched row %d offset %d", query, y, offset)
        return True

    def cancel(self) -> None:
        """Restore the cursor and viewport to where the search began."""
        self.saved.restore(self._view)
