"""Viewport scrolling and frame composition.

A frame is built into one list of byte chunks and handed to the terminal in
a single ``write`` call: hide cursor, home, every text row, the status bar,
the message bar, the cursor position, show cursor.  Nothing is written
incrementally, so the terminal never shows a half-drawn screen.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from pi.tte.buffer import Document

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
CURSOR_HOME = b"\x1b[H"
CLEAR_LINE = b"\x1b[K"
CLEAR_SCREEN = b"\x1b[2J"
INVERT = b"\x1b[7m"
RESET_ATTRS = b"\x1b[m"
CRLF = b"\r\n"
CURSOR_POSITION_FMT = "\x1b[{};{}H"

FILLER = b"~"
NO_NAME = "[No Name]"
MODIFIED_MARKER = "(modified)"
STATUS_NAME_WIDTH = 20

# Status bar and message bar
RESERVED_ROWS = 2


# ---------------------------------------------------------------------------
# Viewport state
# ---------------------------------------------------------------------------


@dataclass
class Viewport:
    """Cursor position and the visible window onto the document."""

    cx: int = 0
    cy: int = 0
    rx: int = 0
    row_offset: int = 0
    col_offset: int = 0
    screen_rows: int = 0
    screen_cols: int = 0

    def resize(self, rows: int, cols: int) -> None:
        """Adopt new terminal dimensions, keeping two rows for the bars."""
        self.screen_rows = max(0, rows - RESERVED_ROWS)
        self.screen_cols = max(0, cols)


@dataclass
class ViewSnapshot:
    cx: int
    cy: int
    row_offset: int
    col_offset: int

    @classmethod
    def take(cls, view: Viewport) -> ViewSnapshot:
        return cls(view.cx, view.cy, view.row_offset, view.col_offset)

    def restore(self, view: Viewport) -> None:
        view.cx = self.cx
        view.cy = self.cy
        view.row_offset = self.row_offset
        view.col_offset = self.col_offset


def scroll(doc: Document, view: Viewport) -> None:
    """Recompute ``rx`` and nudge the offsets so the cursor stays visible.

    Each offset only moves as far as needed; the view never recentres.
    """
    row = doc.row(view.cy)
    view.rx = row.cx_to_rx(view.cx) if row is not None else 0

    if view.cy < view.row_offset:
        view.row_offset = view.cy
    if view.cy >= view.row_offset + view.screen_rows:
        view.row_offset = view.cy - view.screen_rows + 1

    if view.rx < view.col_offset:
        view.col_offset = view.rx
    if view.rx >= view.col_offset + view.screen_cols:
        view.col_offset = view.rx - view.screen_cols + 1

    view.row_offset = max(0, view.row_offset)
    view.col_offset = max(0, view.col_offset)


# ---------------------------------------------------------------------------
# Frame composition
# ---------------------------------------------------------------------------


def _encode(text: str) -> bytes:
    return os.fsencode(text)


def welcome_line(banner: str, cols: int) -> bytes:
    """Centre *banner* in *cols* columns with a leading filler glyph."""
    text = _encode(banner)[:cols]
    padding = (cols - len(text)) // 2
    out = bytearray()
    if padding:
        out += FILLER
        padding -= 1
    out += b" " * padding
    out += text
    return bytes(out)


def draw_rows(
    out: list[bytes], doc: Document, view: Viewport, banner: str
) -> None:
    for y in range(view.screen_rows):
        file_row = y + view.row_offset
        row = doc.row(file_row)
        if row is None:
            if doc.num_rows == 0 and y == view.screen_rows // 3:
                out.append(welcome_line(banner, view.screen_cols))
            else:
                out.append(FILLER)
        else:
            start = min(view.col_offset, len(row.render))
            length = max(0, min(len(row.render) - start, view.screen_cols))
            out.append(row.render[start : start + length])
        out.append(CLEAR_LINE)
        out.append(CRLF)


def status_bar(doc: Document, view: Viewport) -> bytes:
    """Inverted bar: name and modified marker left, position right."""
    name = doc.filename if doc.filename else NO_NAME
    marker = MODIFIED_MARKER if doc.modified else ""
    left = _encode(f"{name[:STATUS_NAME_WIDTH]} {marker}")

    row = doc.row(view.cy)
    line_width = row.size if row is not None else 0
    right = _encode(
        f"{view.cy + 1}/{doc.num_rows} {view.cx + 1}/{line_width}"
    )

    cols = view.screen_cols
    left = left[:cols]
    out = bytearray(INVERT)
    out += left
    length = len(left)
    while length < cols:
        if cols - length == len(right):
            out += right
            break
        out += b" "
        length += 1
    out += RESET_ATTRS
    return bytes(out)


def message_bar(message: str, cols: int) -> bytes:
    return CLEAR_LINE + _encode(message)[: max(0, cols)]


def cursor_position(view: Viewport) -> bytes:
    row = max(0, view.cy - view.row_offset) + 1
    col = max(0, view.rx - view.col_offset) + 1
    return CURSOR_POSITION_FMT.format(row, col).encode("ascii")


def compose_frame(
    doc: Document,
    view: Viewport,
    *,
    message: str = "",
    banner: str = "",
) -> bytes:
    """Build one complete frame.  *message* is shown only if non-empty;
    the caller decides whether it has expired.
    """
    out: list[bytes] = [HIDE_CURSOR, CURSOR_HOME]
    draw_rows(out, doc, view, banner)
    out.append(status_bar(doc, view))
    out.append(CRLF)
    out.append(message_bar(message, view.screen_cols))
    out.append(cursor_position(view))
    out.append(SHOW_CURSOR)
    return b"".join(out)


def clear_screen() -> bytes:
    return CLEAR_SCREEN + CURSOR_HOME
