"""Keyboard input decoding for the editor.

Turns the raw byte stream coming from a terminal in raw mode into one
logical key per call.  Plain bytes come back as single-character strings
(``chr(byte)``), recognised escape sequences come back as named keys such as
``"up"`` or ``"pageDown"``.  Names are always longer than one character, so
the two never collide.
"""

from __future__ import annotations

from typing import Protocol

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

ESC = 0x1B
DEL = 0x7F


# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and the ctrl combinator."""

    escape = "escape"
    enter = "\r"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        """Return the character a terminal sends for ``ctrl+<key>``."""
        return chr(ord(key) & 0x1F)


SYMBOLIC_KEYS: frozenset[str] = frozenset(
    {
        Key.escape,
        Key.backspace,
        Key.delete,
        Key.home,
        Key.end,
        Key.page_up,
        Key.page_down,
        Key.up,
        Key.down,
        Key.left,
        Key.right,
    }
)

# ---------------------------------------------------------------------------
# Escape sequence tables
# ---------------------------------------------------------------------------

# ESC [ <digit> ~  -- terminals disagree on which digit is Home/End
TILDE_SEQUENCES: dict[str, str] = {
    "1": Key.home,
    "7": Key.home,
    "4": Key.end,
    "8": Key.end,
    "3": Key.delete,
    "5": Key.page_up,
    "6": Key.page_down,
}

# ESC [ <letter>
CSI_SEQUENCES: dict[str, str] = {
    "A": Key.up,
    "B": Key.down,
    "C": Key.right,
    "D": Key.left,
    "H": Key.home,
    "F": Key.end,
}

# ESC O <letter>
SS3_SEQUENCES: dict[str, str] = {
    "H": Key.home,
    "F": Key.end,
}


# ---------------------------------------------------------------------------
# Byte source protocol
# ---------------------------------------------------------------------------


class ByteSource(Protocol):
    """Anything that can hand out one input byte at a time."""

    def read_byte(self, timeout: float) -> int | None:
        """Return the next byte, or ``None`` if *timeout* elapsed first."""
        ...


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def read_key(
    source: ByteSource,
    timeout: float = 0.1,
    escape_timeout: float = 0.1,
) -> KeyId | None:
    """Read and decode exactly one key from *source*.

    Returns ``None`` when no byte arrived within *timeout*.  Every call starts
    a fresh decode; nothing is carried over between calls.
    """
    byte = source.read_byte(timeout)
    if byte is None:
        return None

    if byte == DEL:
        return Key.backspace
    if byte != ESC:
        return chr(byte)

    return _decode_escape(source, escape_timeout)


def _decode_escape(source: ByteSource, timeout: float) -> KeyId:
    """Decode whatever follows a lone ESC byte.

    Anything unrecognised, or a sequence cut short by the timeout, collapses
    to a bare escape.
    """
    first = source.read_byte(timeout)
    if first is None:
        return Key.escape
    second = source.read_byte(timeout)
    if second is None:
        return Key.escape

    lead, code = chr(first), chr(second)

    if lead == "[":
        if "0" <= code <= "9":
            third = source.read_byte(timeout)
            if third is None or chr(third) != "~":
                return Key.escape
            return TILDE_SEQUENCES.get(code, Key.escape)
        return CSI_SEQUENCES.get(code, Key.escape)

    if lead == "O":
        return SS3_SEQUENCES.get(code, Key.escape)

    return Key.escape


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def parse_key_id(key_id: str) -> KeyId:
    """Resolve a binding description such as ``"ctrl+q"`` to a decoded key."""
    lowered = key_id.lower()
    if lowered.startswith("ctrl+") and len(lowered) == 6:
        return Key.ctrl(lowered[-1])
    if lowered == "enter":
        return Key.enter
    if lowered == "tab":
        return "\t"
    if lowered == "space":
        return " "
    return key_id


def matches_key(key: KeyId, key_id: str) -> bool:
    """Check whether a decoded *key* corresponds to *key_id*."""
    return key == parse_key_id(key_id)


def is_printable(key: KeyId) -> bool:
    """Printable ASCII, the only bytes accepted into a line prompt."""
    return len(key) == 1 and 32 <= ord(key) < 127


def is_control(key: KeyId) -> bool:
    """True for C0 control characters and DEL."""
    return len(key) == 1 and (ord(key) < 32 or ord(key) == DEL)
