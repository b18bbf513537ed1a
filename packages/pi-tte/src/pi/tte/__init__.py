"""pi-tte: a tiny full-screen terminal text editor."""

from pi.tte.buffer import Document, Row
from pi.tte.config import EditorConfig, load_config
from pi.tte.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
)
from pi.tte.keys import Key, KeyId, matches_key, read_key
from pi.tte.render import Viewport, compose_frame, scroll
from pi.tte.search import IncrementalSearch, find_match
from pi.tte.session import TTE_VERSION, Editor
from pi.tte.terminal import ProcessTerminal, Terminal, TerminalError

__version__ = TTE_VERSION

__all__ = [
    # Buffer
    "Document",
    "Row",
    # Config
    "EditorConfig",
    "load_config",
    # Keys
    "Key",
    "KeyId",
    "matches_key",
    "read_key",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    # Rendering
    "Viewport",
    "compose_frame",
    "scroll",
    # Search
    "IncrementalSearch",
    "find_match",
    # Session
    "Editor",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "TerminalError",
]
