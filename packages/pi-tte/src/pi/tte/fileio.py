"""Reading and writing the edited file."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


def read_lines(path: str | os.PathLike[str]) -> list[bytes]:
    """Read *path* as raw lines with trailing ``\\n``/``\\r`` stripped.

    Raises ``OSError`` if the file can not be read.
    """
    data = Path(path).read_bytes()
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    lines = [line.rstrip(b"\r") for line in lines]
    logger.info("loaded %s (%d lines)", path, len(lines))
    return lines


def write_atomically(
    path: str | os.PathLike[str],
    data: bytes,
    mode: int = DEFAULT_FILE_MODE,
) -> int:
    """Replace *path* with *data* and return the number of bytes written.

    The bytes go to a temporary file in the same directory which is then
    renamed over the target, so a failed write never truncates the original.
    An existing file keeps its permission bits; a new file gets *mode*.
    """
    target = Path(path)
    try:
        mode = target.stat().st_mode & 0o7777
    except FileNotFoundError:
        pass

    directory = target.parent if str(target.parent) else Path(".")
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=directory
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise

    logger.info("wrote %d bytes to %s", len(data), target)
    return len(data)
