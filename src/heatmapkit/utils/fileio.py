"""
Atomic file writes for CLI outputs.

Each writer serializes into a temporary file next to the destination and then
moves it into place with ``os.replace()``. Readers (a renderer polling for a
colour grid, a user opening the CSV) therefore see the previous file or the
complete new one, never a truncated one.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Callable, IO


def _atomic_write(path: str | os.PathLike, write: Callable[[IO[str]], None]) -> None:
    path = os.fspath(path)
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=os.path.dirname(path) or ".", suffix=".tmp", delete=False, newline=""
        ) as tmp:
            tmp_path = tmp.name
            write(tmp)
        os.replace(tmp_path, path)
    except BaseException:
        # The destination is untouched; only the temp file needs cleaning up
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_text(path: str | os.PathLike, content: str) -> None:
    """Write *content* to *path* atomically."""
    _atomic_write(path, lambda f: f.write(content))


def atomic_write_json(path: str | os.PathLike, data: Any, *, indent: int = 2) -> None:
    """Write *data* as JSON to *path* atomically.

    Parameters
    ----------
    path:
        Destination file path.
    data:
        JSON-serializable object (e.g. transform parameters).
    indent:
        JSON indentation (default 2).
    """
    _atomic_write(path, lambda f: json.dump(data, f, indent=indent))
