"""Errors raised by the local persistence layer."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class PersistenceError(OSError):
    """Raised when a persisted artifact cannot be written."""

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialise with a message and the artifact path."""
        self.path = path
        super().__init__(message)

    @classmethod
    def write_failed(cls, path: Path, exc: BaseException) -> PersistenceError:
        """Return an error for a failed atomic write."""
        return cls(f"failed to write {path}: {exc}", path=path)


class CacheStateError(ValueError):
    """Raised when a persisted artifact exists but cannot be used."""

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialise with a message and the artifact path."""
        self.path = path
        super().__init__(message)

    @classmethod
    def unreadable(cls, path: Path, exc: BaseException) -> CacheStateError:
        """Return an error for an artifact that could not be read."""
        return cls(f"failed to read {path}: {exc}", path=path)

    @classmethod
    def corrupt(cls, path: Path, detail: str) -> CacheStateError:
        """Return an error for an artifact whose contents cannot be decoded."""
        return cls(f"corrupt cache artifact {path}: {detail}", path=path)
