"""File I/O helpers."""

from __future__ import annotations

import contextlib
import os
import tempfile
from typing import TYPE_CHECKING

from pagesmith.exceptions import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path


def ensure_directory(path: Path, *, create: bool = False) -> Path:
    """Check that ``path`` is a readable directory.

    Args:
        path: Directory to check.
        create: Create the directory (and parents) if it does not exist.

    Returns:
        The absolute directory path.

    Raises:
        ConfigurationError: If the directory is missing, cannot be created,
            is not a directory, or is not readable.
    """
    if create and not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create directory {path}: {e}"
            raise ConfigurationError(msg, path=path) from e

    if not path.is_dir():
        msg = f"Not a directory: {path}"
        raise ConfigurationError(msg, path=path)

    if not os.access(path, os.R_OK | os.X_OK):
        msg = f"Directory is not readable: {path}"
        raise ConfigurationError(msg, path=path)

    return path.absolute()


def atomic_write_text(path: Path, text: str) -> None:
    """Write UTF-8 text to a file atomically using a temporary file.

    Parent directories are created as needed. Concurrent writers never leave
    a partially written file behind; the last replace wins.

    Args:
        path: Destination file path.
        text: Text content to write.

    Raises:
        OSError: If any step of the write fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            _ = tmp.write(text)
        os.replace(tmp_name, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_name)
