"""Persisted freshness token for conditional feed requests.

The token is opaque: it is whatever the server last sent in its freshness
header, stored as UTF-8 text. The store never invents or clears a value.
"""

from __future__ import annotations

import typing as typ

from gitfeed.logging import get_logger, log_debug, log_warning

from .errors import CacheStateError, PersistenceError
from .files import read_artifact, write_artifact_atomic

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)


class FreshnessTokenStore:
    """Own the current freshness token and its persisted copy.

    The in-memory value loaded at startup is authoritative for the life of
    the process; sharing one cache directory between concurrently polling
    processes is not supported.
    """

    def __init__(self, path: Path) -> None:
        """Create a store bound to ``path``; call :meth:`load` to read it."""
        self._path = path
        self._value: str | None = None

    @property
    def path(self) -> Path:
        """Return the artifact location."""
        return self._path

    @property
    def value(self) -> str | None:
        """Return the current token, if any."""
        return self._value

    def load(self) -> str | None:
        """Read the persisted token; missing or unreadable files yield ``None``."""
        try:
            raw = read_artifact(self._path)
            text = raw.decode("utf-8").strip() if raw is not None else ""
        except UnicodeDecodeError as exc:
            error = CacheStateError.corrupt(self._path, str(exc))
            log_warning(logger, "Ignoring freshness token: %s", error)
            text = ""
        except CacheStateError as exc:
            log_warning(logger, "Ignoring freshness token: %s", exc)
            text = ""
        self._value = text or None
        return self._value

    def update(self, new_value: str | None) -> bool:
        """Adopt a server-supplied token.

        Returns
        -------
        bool
            ``True`` when the stored value changed. ``None`` and blank values
            are ignored so a response without the header never erases the
            last known token.

        """
        if new_value is None or not new_value.strip():
            return False
        candidate = new_value.strip()
        if candidate == self._value:
            return False
        self._value = candidate
        log_debug(logger, "Freshness token updated to %r", candidate)
        return True

    def persist(self) -> bool:
        """Write the current token to disk, returning ``False`` on failure."""
        if self._value is None:
            return False
        try:
            write_artifact_atomic(self._path, self._value.encode("utf-8"))
        except PersistenceError as exc:
            log_warning(logger, "Unable to persist freshness token: %s", exc)
            return False
        return True


__all__ = ["FreshnessTokenStore"]
