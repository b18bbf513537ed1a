"""Editor keybindings manager."""

from __future__ import annotations

from typing import Literal

from pi.tte.keys import KeyId, matches_key

EditorAction = Literal[
    # Commands
    "quit",
    "save",
    "find",
    "redraw",
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    "pageUp",
    "pageDown",
    # Editing
    "deleteCharBackward",
    "deleteCharForward",
    "newLine",
    "ignore",
    # Line prompt
    "promptSubmit",
    "promptCancel",
    "promptDeleteChar",
    "searchNext",
    "searchPrevious",
]

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Commands
    "quit": "ctrl+q",
    "save": "ctrl+s",
    "find": "ctrl+f",
    "redraw": "ctrl+l",
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorLineStart": "home",
    "cursorLineEnd": "end",
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    # Editing
    "deleteCharBackward": ["backspace", "ctrl+h"],
    "deleteCharForward": "delete",
    "newLine": "enter",
    "ignore": "escape",
    # Line prompt
    "promptSubmit": "enter",
    "promptCancel": "escape",
    "promptDeleteChar": ["backspace", "ctrl+h", "delete"],
    "searchNext": ["right", "down"],
    "searchPrevious": ["left", "up"],
}


class EditorKeybindingsManager:
    """Maps editor actions to the keys that trigger them."""

    def __init__(
        self, config: EditorKeybindingsConfig | None = None
    ) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        # Start with defaults
        for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with caller config
        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, key: KeyId, action: EditorAction) -> bool:
        """Check if a decoded key triggers a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        return any(matches_key(key, key_id) for key_id in keys)
