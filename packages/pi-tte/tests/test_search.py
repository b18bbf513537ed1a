"""Tests for pi.tte.search -- incremental search and wrap-around."""

from __future__ import annotations

from pi.tte.buffer import Document
from pi.tte.render import Viewport, scroll
from pi.tte.search import BACKWARD, FORWARD, IncrementalSearch, find_match


def make_view(rows: int = 12, cols: int = 80) -> Viewport:
    view = Viewport()
    view.resize(rows, cols)
    return view


class TestFindMatch:
    def test_first_hit_from_top(self) -> None:
        doc = Document([b"ab\tc", b"", b"last"])
        assert find_match(doc, b"last") == (2, 0)

    def test_offset_in_render_space(self) -> None:
        doc = Document([b"\tneedle"])
        assert find_match(doc, b"needle") == (0, 8)

    def test_no_match(self) -> None:
        doc = Document([b"abc"])
        assert find_match(doc, b"zzz") is None

    def test_empty_query(self) -> None:
        doc = Document([b"abc"])
        assert find_match(doc, b"") is None

    def test_empty_document(self) -> None:
        assert find_match(Document(), b"a") is None

    def test_forward_wraps(self) -> None:
        doc = Document([b"hit", b"miss", b"hit"])
        assert find_match(doc, b"hit", last_match=2, direction=FORWARD) == (0, 0)

    def test_backward_wraps(self) -> None:
        doc = Document([b"hit", b"miss", b"hit"])
        assert find_match(doc, b"hit", last_match=0, direction=BACKWARD) == (2, 0)

    def test_single_match_finds_itself_again(self) -> None:
        doc = Document([b"a", b"hit", b"b"])
        assert find_match(doc, b"hit", last_match=1, direction=FORWARD) == (1, 0)


class TestIncrementalSearch:
    def test_update_moves_cursor_to_match(self) -> None:
        doc = Document([b"ab\tc", b"", b"last"])
        view = make_view()
        search = IncrementalSearch(doc, view)
        assert search.update(b"last") is True
        assert (view.cy, view.cx) == (2, 0)
        assert view.row_offset == doc.num_rows

    def test_cursor_lands_on_raw_index(self) -> None:
        doc = Document([b"\tfoo"])
        view = make_view()
        IncrementalSearch(doc, view).update(b"foo")
        assert view.cx == 1

    def test_miss_leaves_cursor(self) -> None:
        doc = Document([b"abc", b"def"])
        view = make_view()
        view.cy, view.cx = 1, 2
        assert IncrementalSearch(doc, view).update(b"zzz") is False
        assert (view.cy, view.cx) == (1, 2)

    def test_cancel_restores_view(self) -> None:
        doc = Document([f"line {i}".encode() for i in range(40)])
        view = make_view()
        view.cy, view.cx, view.row_offset = 3, 2, 1
        search = IncrementalSearch(doc, view)
        search.update(b"line 35")
        scroll(doc, view)
        assert view.cy == 35
        search.cancel()
        assert (view.cy, view.cx, view.row_offset, view.col_offset) == (3, 2, 1, 0)

    def test_next_and_previous_cycle(self) -> None:
        doc = Document([b"x1", b"x2", b"x3"])
        view = make_view()
        search = IncrementalSearch(doc, view)
        search.update(b"x")
        assert view.cy == 0
        search.update(b"x", FORWARD)
        assert view.cy == 1
        search.update(b"x", FORWARD)
        assert view.cy == 2
        search.update(b"x", FORWARD)
        assert view.cy == 0
        search.update(b"x", BACKWARD)
        assert view.cy == 2

    def test_changed_query_restarts_from_top(self) -> None:
        doc = Document([b"ab", b"abc", b"abcd"])
        view = make_view()
        search = IncrementalSearch(doc, view)
        search.update(b"ab")
        search.update(b"ab", FORWARD)
        assert view.cy == 1
        search.update(b"abcd")
        assert view.cy == 2
        search.update(b"ab")
        assert view.cy == 0

    def test_backward_without_previous_match_scans_forward(self) -> None:
        doc = Document([b"a", b"hit", b"hit"])
        view = make_view()
        search = IncrementalSearch(doc, view)
        search.update(b"hit", BACKWARD)
        assert view.cy == 1
