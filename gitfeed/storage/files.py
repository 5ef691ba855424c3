"""File helpers for the cache artifacts.

Writes go to a temporary sibling and are renamed over the target, so a crash
mid-write leaves either the old artifact or the new one, never a torn file.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
import typing as typ

from .errors import CacheStateError, PersistenceError

if typ.TYPE_CHECKING:
    from pathlib import Path


def read_artifact(path: Path) -> bytes | None:
    """Return the artifact bytes, or ``None`` when the file does not exist.

    Raises
    ------
    CacheStateError
        If the file exists but cannot be read.

    """
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise CacheStateError.unreadable(path, exc) from exc


def write_artifact_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` using write-to-temp-then-rename.

    Raises
    ------
    PersistenceError
        If the directory, temporary file, or rename fails.

    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        raise PersistenceError.write_failed(path, exc) from exc
