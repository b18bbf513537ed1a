"""Tests for pi.tte.render -- scrolling and frame composition."""

from __future__ import annotations

from pi.tte.buffer import Document
from pi.tte.render import (
    CLEAR_LINE,
    CRLF,
    CURSOR_HOME,
    HIDE_CURSOR,
    INVERT,
    RESET_ATTRS,
    SHOW_CURSOR,
    Viewport,
    ViewSnapshot,
    compose_frame,
    cursor_position,
    message_bar,
    scroll,
    status_bar,
    welcome_line,
)

BANNER = "tte -- version 0.1.0"


def make_view(rows: int = 12, cols: int = 80) -> Viewport:
    view = Viewport()
    view.resize(rows, cols)
    return view


def frame_rows(frame: bytes, screen_rows: int) -> list[bytes]:
    """Return the text rows of *frame* with their trailing clear-line."""
    body = frame[len(HIDE_CURSOR + CURSOR_HOME) :]
    return body.split(CRLF)[:screen_rows]


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------


class TestViewport:
    def test_resize_reserves_two_rows(self) -> None:
        view = make_view(24, 80)
        assert view.screen_rows == 22
        assert view.screen_cols == 80

    def test_resize_never_goes_negative(self) -> None:
        view = make_view(1, 0)
        assert view.screen_rows == 0
        assert view.screen_cols == 0

    def test_snapshot_round_trip(self) -> None:
        view = make_view()
        view.cx, view.cy, view.row_offset, view.col_offset = 3, 4, 2, 1
        saved = ViewSnapshot.take(view)
        view.cx = view.cy = view.row_offset = view.col_offset = 0
        saved.restore(view)
        assert (view.cx, view.cy, view.row_offset, view.col_offset) == (3, 4, 2, 1)


class TestScroll:
    """Offsets move just enough to keep the cursor on screen."""

    def test_cursor_below_window_scrolls_down(self) -> None:
        doc = Document([b"x"] * 30)
        view = make_view()
        view.cy = 15
        scroll(doc, view)
        assert view.row_offset == 6

    def test_cursor_above_window_scrolls_up(self) -> None:
        doc = Document([b"x"] * 30)
        view = make_view()
        view.row_offset = 20
        view.cy = 4
        scroll(doc, view)
        assert view.row_offset == 4

    def test_cursor_inside_window_leaves_offset(self) -> None:
        doc = Document([b"x"] * 30)
        view = make_view()
        view.row_offset = 5
        view.cy = 10
        scroll(doc, view)
        assert view.row_offset == 5

    def test_horizontal_scroll(self) -> None:
        doc = Document([b"a" * 100])
        view = make_view()
        view.cx = 90
        scroll(doc, view)
        assert view.rx == 90
        assert view.col_offset == 11

    def test_rx_accounts_for_tabs(self) -> None:
        doc = Document([b"ab\tc"])
        view = make_view()
        view.cx = 3
        scroll(doc, view)
        assert view.rx == 8

    def test_rx_is_zero_on_virtual_row(self) -> None:
        doc = Document([b"abc"])
        view = make_view()
        view.cy = 1
        scroll(doc, view)
        assert view.rx == 0

    def test_search_hint_puts_match_on_top(self) -> None:
        doc = Document([b"x"] * 30)
        view = make_view()
        view.cy = 25
        view.row_offset = doc.num_rows
        scroll(doc, view)
        assert view.row_offset == 25

    def test_invariants_hold_for_every_row(self) -> None:
        doc = Document([b"\tline"] * 50)
        view = make_view(8, 10)
        for cy in list(range(51)) + list(range(50, -1, -1)):
            view.cy = cy
            view.cx = 0 if cy == 50 else 5
            scroll(doc, view)
            assert view.row_offset <= view.cy < view.row_offset + view.screen_rows
            assert view.col_offset <= view.rx < view.col_offset + view.screen_cols


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


class TestDrawRows:
    def test_filler_rows_below_short_document(self) -> None:
        doc = Document([b"one", b"two", b"three"])
        view = make_view()
        rows = frame_rows(compose_frame(doc, view, banner=BANNER), 10)
        assert rows[:3] == [b"one" + CLEAR_LINE, b"two" + CLEAR_LINE, b"three" + CLEAR_LINE]
        assert sum(1 for row in rows if row.startswith(b"~")) == 7

    def test_banner_only_on_empty_document(self) -> None:
        doc = Document()
        view = make_view()
        rows = frame_rows(compose_frame(doc, view, banner=BANNER), 10)
        assert BANNER.encode() in rows[3]
        assert rows[3].startswith(b"~ ")
        assert all(row == b"~" + CLEAR_LINE for i, row in enumerate(rows) if i != 3)

    def test_no_banner_with_content(self) -> None:
        doc = Document([b"x"])
        view = make_view()
        frame = compose_frame(doc, view, banner=BANNER)
        assert BANNER.encode() not in frame

    def test_row_sliced_by_column_offset(self) -> None:
        doc = Document([b"0123456789"])
        view = make_view(12, 4)
        view.col_offset = 3
        rows = frame_rows(compose_frame(doc, view), 10)
        assert rows[0] == b"3456" + CLEAR_LINE

    def test_column_offset_past_row_end_draws_nothing(self) -> None:
        doc = Document([b"abc", b"a much longer line"])
        view = make_view()
        view.col_offset = 10
        rows = frame_rows(compose_frame(doc, view), 10)
        assert rows[0] == CLEAR_LINE
        assert rows[1] == b"ger line" + CLEAR_LINE

    def test_tabs_are_drawn_expanded(self) -> None:
        doc = Document([b"\tx"])
        view = make_view()
        rows = frame_rows(compose_frame(doc, view), 10)
        assert rows[0] == b" " * 8 + b"x" + CLEAR_LINE


class TestWelcomeLine:
    def test_centred_with_filler(self) -> None:
        assert welcome_line("abc", 11) == b"~   abc"

    def test_truncated_to_width(self) -> None:
        assert welcome_line("abcdef", 4) == b"abcd"


# ---------------------------------------------------------------------------
# Bars and cursor
# ---------------------------------------------------------------------------


class TestStatusBar:
    def test_name_marker_and_position(self) -> None:
        doc = Document([b"ab\tc", b"", b"last"], filename="test.txt")
        doc.modified = True
        view = make_view()
        bar = status_bar(doc, view)
        assert bar.startswith(INVERT)
        assert bar.endswith(RESET_ATTRS)
        inner = bar[len(INVERT) : -len(RESET_ATTRS)]
        assert inner.startswith(b"test.txt (modified)")
        assert inner.endswith(b"1/3 1/4")
        assert len(inner) == 80

    def test_unnamed_clean_document(self) -> None:
        doc = Document()
        view = make_view()
        bar = status_bar(doc, view)
        assert b"[No Name]" in bar
        assert b"(modified)" not in bar
        assert b"1/0 1/0" in bar

    def test_long_name_is_cut(self) -> None:
        doc = Document([b"x"], filename="a" * 40)
        view = make_view()
        bar = status_bar(doc, view)
        assert b"a" * 20 + b" " in bar
        assert b"a" * 21 not in bar

    def test_right_side_dropped_when_it_does_not_fit(self) -> None:
        doc = Document([b"x"], filename="name.txt")
        view = make_view(12, 10)
        inner = status_bar(doc, view)[len(INVERT) : -len(RESET_ATTRS)]
        assert inner == b"name.txt  "


class TestMessageBar:
    def test_clears_then_draws(self) -> None:
        assert message_bar("hello", 80) == CLEAR_LINE + b"hello"

    def test_truncated_to_width(self) -> None:
        assert message_bar("hello", 3) == CLEAR_LINE + b"hel"


class TestCursorPosition:
    def test_one_based_screen_coordinates(self) -> None:
        view = make_view()
        view.cy, view.rx = 2, 5
        assert cursor_position(view) == b"\x1b[3;6H"

    def test_relative_to_offsets(self) -> None:
        view = make_view()
        view.cy, view.rx = 12, 30
        view.row_offset, view.col_offset = 10, 20
        assert cursor_position(view) == b"\x1b[3;11H"


# ---------------------------------------------------------------------------
# Whole frame
# ---------------------------------------------------------------------------


class TestComposeFrame:
    def test_frame_order(self) -> None:
        doc = Document([b"abc"], filename="f")
        view = make_view()
        view.cx = 2
        scroll(doc, view)
        frame = compose_frame(doc, view, message="hi")
        assert frame.startswith(HIDE_CURSOR + CURSOR_HOME)
        assert frame.endswith(b"\x1b[1;3H" + SHOW_CURSOR)
        status_at = frame.index(INVERT)
        message_at = frame.index(CLEAR_LINE + b"hi")
        assert frame.index(b"abc") < status_at < message_at

    def test_row_count(self) -> None:
        doc = Document([b"x"] * 40)
        view = make_view()
        frame = compose_frame(doc, view)
        body = frame[len(HIDE_CURSOR + CURSOR_HOME) :]
        # Ten text rows plus the status bar each end in CRLF
        assert body.count(CRLF) == 11

    def test_empty_message(self) -> None:
        doc = Document([b"x"])
        view = make_view()
        frame = compose_frame(doc, view)
        assert RESET_ATTRS + CRLF + CLEAR_LINE + b"\x1b[1;1H" in frame
