"""The editing session: mode dispatch, cursor policy, save and quit.

One :class:`Editor` owns the document, the viewport and the current mode.
The loop in :meth:`Editor.run` is strictly turn based: read one key, apply
it, render one frame.  Resize notifications are polled between turns.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal, Union

from pi.tte.buffer import Document
from pi.tte.config import EditorConfig
from pi.tte.fileio import read_lines, write_atomically
from pi.tte.keybindings import EditorKeybindingsManager
from pi.tte.keys import Key, KeyId, is_control, is_printable, read_key
from pi.tte.render import Viewport, compose_frame, scroll
from pi.tte.search import BACKWARD, FORWARD, IncrementalSearch

if TYPE_CHECKING:
    from pi.tte.terminal import Terminal

logger = logging.getLogger(__name__)

TTE_VERSION = "0.1.0"
WELCOME_BANNER = f"tte -- version {TTE_VERSION}"
HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"
STATUS_MESSAGE_MAX = 80

SAVE_AS_PROMPT = "Save as: %s (ESC to cancel)"
SEARCH_PROMPT = "Search: %s (Use ESC/Arrows/Enter)"
QUIT_WARNING = (
    "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit."
)


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


@dataclass
class NormalMode:
    pass


@dataclass
class SaveAsPrompt:
    input: str = ""
    template: str = SAVE_AS_PROMPT


@dataclass
class SearchPrompt:
    search: IncrementalSearch
    input: str = ""
    template: str = SEARCH_PROMPT


@dataclass
class QuitConfirm:
    remaining: int


Mode = Union[NormalMode, SaveAsPrompt, SearchPrompt, QuitConfirm]

PromptOutcome = Literal["edited", "submitted", "cancelled", "ignored"]


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


class Editor:
    """Editing session bound to one terminal and one document."""

    def __init__(
        self,
        terminal: Terminal,
        config: EditorConfig | None = None,
        *,
        document: Document | None = None,
        keybindings: EditorKeybindingsManager | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.terminal = terminal
        self.config = config or EditorConfig()
        self.doc = document or Document(tab_stop=self.config.tab_stop)
        self.view = Viewport()
        self.keybindings = keybindings or EditorKeybindingsManager()
        self.mode: Mode = NormalMode()
        self.status_message: str = ""
        self.status_time: float = 0.0
        self.quit_requested: bool = False
        self._clock = clock

        self.update_window_size()

    # -- lifecycle ----------------------------------------------------------

    def open(self, path: str) -> None:
        """Load *path* into a fresh document.  ``OSError`` propagates."""
        lines = read_lines(path)
        self.doc = Document(lines, filename=path, tab_stop=self.config.tab_stop)
        self.view.cx = self.view.cy = 0
        self.view.row_offset = self.view.col_offset = 0

    def run(self) -> None:
        """Process keys until the user quits."""
        self.set_status_message(HELP_MESSAGE)
        self.refresh_screen()
        while not self.quit_requested:
            if self.terminal.consume_resize():
                self.update_window_size()
                self.refresh_screen()
            key = read_key(
                self.terminal,
                self.config.read_timeout,
                self.config.escape_timeout,
            )
            if key is None:
                continue
            self.process_key(key)
            if not self.quit_requested:
                self.refresh_screen()

    def update_window_size(self) -> None:
        rows, cols = self.terminal.get_size()
        self.view.resize(rows, cols)
        self.view.cy = min(self.view.cy, self.doc.num_rows)
        self._clamp_cx()
        logger.debug("window size %dx%d", cols, rows)

    # -- rendering ----------------------------------------------------------

    def set_status_message(self, fmt: str, *args: object) -> None:
        """Format a status message, truncated to the status field size."""
        message = fmt % args if args else fmt
        self.status_message = message[:STATUS_MESSAGE_MAX]
        self.status_time = self._clock()

    def visible_message(self) -> str:
        if self._clock() - self.status_time < self.config.message_timeout:
            return self.status_message
        return ""

    def refresh_screen(self) -> None:
        scroll(self.doc, self.view)
        frame = compose_frame(
            self.doc,
            self.view,
            message=self.visible_message(),
            banner=WELCOME_BANNER,
        )
        self.terminal.write(frame)

    # -- dispatch -------------------------------------------------------------

    def process_key(self, key: KeyId) -> None:
        """Apply one key according to the current mode."""
        match self.mode:
            case SearchPrompt() as prompt:
                self._process_search_key(prompt, key)
            case SaveAsPrompt() as prompt:
                self._process_save_as_key(prompt, key)
            case QuitConfirm() as confirm:
                self._process_quit_confirm_key(confirm, key)
            case _:
                self._process_normal_key(key)

    def _process_normal_key(self, key: KeyId) -> None:
        kb = self.keybindings
        view = self.view

        if kb.matches(key, "quit"):
            self._request_quit()
        elif kb.matches(key, "save"):
            self.save()
        elif kb.matches(key, "find"):
            self.find()
        elif kb.matches(key, "newLine"):
            view.cy, view.cx = self.doc.split_row(view.cy, view.cx)
        elif kb.matches(key, "deleteCharBackward"):
            view.cy, view.cx = self.doc.delete_char(view.cy, view.cx)
        elif kb.matches(key, "deleteCharForward"):
            self.move_cursor(Key.right)
            view.cy, view.cx = self.doc.delete_char(view.cy, view.cx)
        elif kb.matches(key, "pageUp"):
            self.page(Key.up)
        elif kb.matches(key, "pageDown"):
            self.page(Key.down)
        elif kb.matches(key, "cursorLineStart"):
            view.cx = 0
        elif kb.matches(key, "cursorLineEnd"):
            row = self.doc.row(view.cy)
            view.cx = row.size if row is not None else 0
        elif kb.matches(key, "cursorUp"):
            self.move_cursor(Key.up)
        elif kb.matches(key, "cursorDown"):
            self.move_cursor(Key.down)
        elif kb.matches(key, "cursorLeft"):
            self.move_cursor(Key.left)
        elif kb.matches(key, "cursorRight"):
            self.move_cursor(Key.right)
        elif kb.matches(key, "redraw") or kb.matches(key, "ignore"):
            pass
        elif len(key) == 1 and (key == "\t" or not is_control(key)):
            self.insert_char(key)

    # -- editing ----------------------------------------------------------------

    def insert_char(self, key: KeyId) -> None:
        self.doc.insert_char(self.view.cy, self.view.cx, ord(key))
        self.view.cx += 1

    # -- cursor movement ---------------------------------------------------------

    def move_cursor(self, key: KeyId) -> None:
        """Single-step move with row-aware clamping."""
        view = self.view
        row = self.doc.row(view.cy)

        if key == Key.left:
            if view.cx > 0:
                view.cx -= 1
            elif view.cy > 0:
                view.cy -= 1
                view.cx = self.doc.rows[view.cy].size
        elif key == Key.right:
            if row is not None and view.cx < row.size:
                view.cx += 1
            elif row is not None and view.cx == row.size:
                view.cy += 1
                view.cx = 0
        elif key == Key.up:
            if view.cy > 0:
                view.cy -= 1
        elif key == Key.down:
            if view.cy < self.doc.num_rows:
                view.cy += 1

        self._clamp_cx()

    def page(self, direction: KeyId) -> None:
        """Snap to the viewport edge, then step a screenful of rows."""
        view = self.view
        if direction == Key.up:
            view.cy = view.row_offset
        else:
            view.cy = view.row_offset + view.screen_rows - 1
            view.cy = min(view.cy, self.doc.num_rows)
        for _ in range(view.screen_rows):
            self.move_cursor(direction)

    def _clamp_cx(self) -> None:
        row = self.doc.row(self.view.cy)
        row_len = row.size if row is not None else 0
        self.view.cx = min(max(self.view.cx, 0), row_len)

    # -- save ---------------------------------------------------------------

    def save(self) -> None:
        """Write the document, asking for a file name first if needed."""
        if self.doc.filename is None:
            self.mode = SaveAsPrompt()
            self._show_prompt(self.mode)
            return
        self._write_file()

    def _write_file(self) -> None:
        filename = self.doc.filename
        assert filename is not None
        data = self.doc.serialize()
        try:
            written = write_atomically(filename, data, self.config.file_mode)
        except OSError as exc:
            logger.exception("saving %s failed", filename)
            self.set_status_message(
                "Can't save! I/O error: %s", exc.strerror or exc
            )
            return
        self.doc.modified = False
        self.set_status_message("%d bytes written to disk", written)

    def _process_save_as_key(self, prompt: SaveAsPrompt, key: KeyId) -> None:
        outcome = self._edit_prompt(prompt, key)
        if outcome == "cancelled":
            self.mode = NormalMode()
            self.set_status_message("Save aborted")
        elif outcome == "submitted":
            self.mode = NormalMode()
            self.doc.filename = os.fsdecode(prompt.input.encode("ascii"))
            self._write_file()
        else:
            self._show_prompt(prompt)

    # -- search ---------------------------------------------------------------

    def find(self) -> None:
        """Enter the incremental search prompt."""
        self.mode = SearchPrompt(IncrementalSearch(self.doc, self.view))
        self._show_prompt(self.mode)

    def _process_search_key(self, prompt: SearchPrompt, key: KeyId) -> None:
        kb = self.keybindings
        outcome = self._edit_prompt(prompt, key)
        if outcome == "cancelled":
            prompt.search.cancel()
            self.mode = NormalMode()
            return
        if outcome == "submitted":
            self.mode = NormalMode()
            return

        query = prompt.input.encode("ascii")
        if outcome == "ignored" and kb.matches(key, "searchNext"):
            prompt.search.update(query, FORWARD)
        elif outcome == "ignored" and kb.matches(key, "searchPrevious"):
            prompt.search.update(query, BACKWARD)
        else:
            prompt.search.update(query)
        self._show_prompt(prompt)

    # -- line prompt --------------------------------------------------------

    def _show_prompt(self, prompt: SaveAsPrompt | SearchPrompt) -> None:
        self.set_status_message(prompt.template, prompt.input)

    def _edit_prompt(
        self, prompt: SaveAsPrompt | SearchPrompt, key: KeyId
    ) -> PromptOutcome:
        """Apply one key to the prompt's input line."""
        kb = self.keybindings
        if kb.matches(key, "promptDeleteChar"):
            prompt.input = prompt.input[:-1]
            return "edited"
        if kb.matches(key, "promptCancel"):
            self.set_status_message("")
            return "cancelled"
        if kb.matches(key, "promptSubmit"):
            if prompt.input:
                self.set_status_message("")
                return "submitted"
            return "ignored"
        if is_printable(key):
            prompt.input += key
            return "edited"
        return "ignored"

    # -- quit -------------------------------------------------------------------

    def _request_quit(self) -> None:
        remaining = self.config.quit_times - 1
        if not self.doc.modified or remaining <= 0:
            self.quit_requested = True
            return
        self.mode = QuitConfirm(remaining)
        self.set_status_message(QUIT_WARNING, remaining)

    def _process_quit_confirm_key(self, confirm: QuitConfirm, key: KeyId) -> None:
        if not self.keybindings.matches(key, "quit"):
            # Any other key disarms the countdown
            self.mode = NormalMode()
            self._process_normal_key(key)
            return
        confirm.remaining -= 1
        if confirm.remaining <= 0:
            self.quit_requested = True
            return
        self.set_status_message(QUIT_WARNING, confirm.remaining)
