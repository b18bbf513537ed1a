"""Editor configuration.

There is no configuration file.  Defaults live on :class:`EditorConfig`;
``PI_TTE_*`` environment variables override them and command-line flags
override those in turn.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Callable

from pi.tte.fileio import DEFAULT_FILE_MODE

logger = logging.getLogger(__name__)

ENV_PREFIX = "PI_TTE_"


@dataclass(frozen=True)
class EditorConfig:
    """Tunable editor behaviour."""

    tab_stop: int = 8
    quit_times: int = 3
    message_timeout: float = 5.0
    read_timeout: float = 0.1
    escape_timeout: float = 0.1
    file_mode: int = DEFAULT_FILE_MODE

    def with_overrides(self, **overrides: Any) -> EditorConfig:
        """Return a copy with every non-``None`` override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return _validated(replace(self, **values))


def _parse_octal(value: str) -> int:
    return int(value, 8)


_PARSERS: dict[str, Callable[[str], Any]] = {
    "tab_stop": int,
    "quit_times": int,
    "message_timeout": float,
    "read_timeout": float,
    "escape_timeout": float,
    "file_mode": _parse_octal,
}

_MINIMUMS: dict[str, float] = {
    "tab_stop": 1,
    "quit_times": 1,
    "message_timeout": 0,
    "read_timeout": 0,
    "escape_timeout": 0,
    "file_mode": 0,
}


def _validated(config: EditorConfig) -> EditorConfig:
    defaults = EditorConfig()
    fixes: dict[str, Any] = {}
    for f in fields(config):
        value = getattr(config, f.name)
        if value < _MINIMUMS[f.name]:
            logger.warning(
                "invalid %s=%r, using default %r",
                f.name,
                value,
                getattr(defaults, f.name),
            )
            fixes[f.name] = getattr(defaults, f.name)
    return replace(config, **fixes) if fixes else config


def load_config(env: Mapping[str, str] | None = None) -> EditorConfig:
    """Build the configuration from defaults and ``PI_TTE_*`` variables."""
    env = os.environ if env is None else env
    values: dict[str, Any] = {}
    for name, parse in _PARSERS.items():
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is None or raw == "":
            continue
        try:
            values[name] = parse(raw)
        except ValueError:
            logger.warning("ignoring %s%s=%r", ENV_PREFIX, name.upper(), raw)
    return EditorConfig().with_overrides(**values)
