"""Line-based text buffer.

A :class:`Document` is an ordered list of :class:`Row` objects.  Each row
keeps its raw bytes (``chars``) and a derived, tab-expanded copy
(``render``) that is rebuilt whenever the raw bytes change.

All indices are clamped rather than raised on: editing past the end of a
row, deleting at the very start of the document, or addressing a row that
does not exist are no-ops.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TAB = 0x09
SPACE = 0x20


# ---------------------------------------------------------------------------
# Row
# ---------------------------------------------------------------------------


@dataclass
class Row:
    """One line of the document, without its line terminator."""

    chars: bytearray = field(default_factory=bytearray)
    tab_stop: int = 8
    render: bytes = b""

    def __post_init__(self) -> None:
        self.chars = bytearray(self.chars)
        self.update()

    @property
    def size(self) -> int:
        return len(self.chars)

    def update(self) -> None:
        """Rebuild ``render`` from ``chars`` by expanding tabs."""
        out = bytearray()
        for byte in self.chars:
            if byte == TAB:
                # At least one space, then pad to the next tab stop
                out.append(SPACE)
                while len(out) % self.tab_stop != 0:
                    out.append(SPACE)
            else:
                out.append(byte)
        self.render = bytes(out)

    def cx_to_rx(self, cx: int) -> int:
        """Map a raw index to the rendered column it is drawn at."""
        rx = 0
        for byte in self.chars[: max(0, cx)]:
            if byte == TAB:
                rx += (self.tab_stop - 1) - (rx % self.tab_stop)
            rx += 1
        return rx

    def rx_to_cx(self, rx: int) -> int:
        """Map a rendered column back to the raw index that produced it."""
        cur_rx = 0
        for cx, byte in enumerate(self.chars):
            if byte == TAB:
                cur_rx += (self.tab_stop - 1) - (cur_rx % self.tab_stop)
            cur_rx += 1
            if cur_rx > rx:
                return cx
        return self.size

    def insert_char(self, at: int, byte: int) -> None:
        at = min(max(at, 0), self.size)
        self.chars.insert(at, byte)
        self.update()

    def append(self, data: bytes) -> None:
        self.chars.extend(data)
        self.update()

    def delete_char(self, at: int) -> None:
        if at < 0 or at >= self.size:
            return
        del self.chars[at]
        self.update()

    def truncate(self, at: int) -> bytes:
        """Cut the row at *at* and return the removed tail."""
        at = min(max(at, 0), self.size)
        tail = bytes(self.chars[at:])
        del self.chars[at:]
        self.update()
        return tail


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class Document:
    """Ordered rows plus the modified flag and the bound file name.

    Row index ``num_rows`` is a valid virtual position meaning "below the
    last line"; inserting a character there first appends an empty row.
    """

    def __init__(
        self,
        lines: list[bytes] | None = None,
        *,
        filename: str | None = None,
        tab_stop: int = 8,
    ) -> None:
        self.tab_stop = tab_stop
        self.rows: list[Row] = [
            Row(bytearray(line), tab_stop) for line in (lines or [])
        ]
        self.filename = filename
        self.modified = False

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    def row(self, y: int) -> Row | None:
        """Return row *y*, or ``None`` for the virtual row and beyond."""
        if 0 <= y < len(self.rows):
            return self.rows[y]
        return None

    # -- row operations -----------------------------------------------------

    def insert_row(self, at: int, text: bytes = b"") -> None:
        if at < 0 or at > len(self.rows):
            return
        self.rows.insert(at, Row(bytearray(text), self.tab_stop))
        self.modified = True

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= len(self.rows):
            return
        del self.rows[at]
        self.modified = True

    # -- character operations -----------------------------------------------

    def insert_char(self, y: int, x: int, byte: int) -> None:
        if y < 0 or y > len(self.rows):
            return
        if y == len(self.rows):
            self.insert_row(len(self.rows))
        self.rows[y].insert_char(x, byte)
        self.modified = True

    def delete_char(self, y: int, x: int) -> tuple[int, int]:
        """Delete the byte before ``(y, x)``, joining lines at column 0.

        Returns the cursor position after the deletion.
        """
        row = self.row(y)
        if row is None:
            return y, x
        x = min(max(x, 0), row.size)
        if x == 0 and y == 0:
            return y, x

        if x > 0:
            row.delete_char(x - 1)
            self.modified = True
            return y, x - 1

        previous = self.rows[y - 1]
        new_x = previous.size
        previous.append(bytes(row.chars))
        self.delete_row(y)
        return y - 1, new_x

    def split_row(self, y: int, x: int) -> tuple[int, int]:
        """Break row *y* at raw index *x*; the tail becomes row ``y + 1``.

        Returns the cursor position at the start of the new line.
        """
        row = self.row(y)
        if row is None:
            # On the virtual row a newline just appends an empty line
            self.insert_row(len(self.rows))
            return len(self.rows), 0
        if x <= 0:
            self.insert_row(y)
        else:
            tail = row.truncate(x)
            self.insert_row(y + 1, tail)
        return y + 1, 0

    # -- persistence -----------------------------------------------------------

    def serialize(self) -> bytes:
        """Join the raw rows with one ``\\n`` after each."""
        return b"".join(bytes(row.chars) + b"\n" for row in self.rows)

    # -- search ------------------------------------------------------------

    def find(self, needle: bytes, y: int) -> int:
        """Return the rendered offset of *needle* in row *y*, or -1."""
        row = self.row(y)
        if row is None or not needle:
            return -1
        return row.render.find(needle)
