"""Bounded, deduplicated event history persisted as a JSON artifact.

The artifact is a JSON array of raw feed records, newest first. Records are
written exactly as the feed delivered them so a later release can interpret
fields this one ignores.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from gitfeed.feed.models import Event, parse_events
from gitfeed.logging import get_logger, log_debug, log_info, log_warning

from .errors import CacheStateError, PersistenceError
from .files import read_artifact, write_artifact_atomic

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

DEFAULT_MAX_EVENTS = 50


def merge_events(
    new_events: cabc.Iterable[Event],
    existing: cabc.Iterable[Event],
    *,
    max_size: int,
) -> tuple[Event, ...]:
    """Prepend ``new_events`` to ``existing``, dedupe by id and cap the length.

    The first occurrence of an id wins, so an incoming event replaces the
    stored copy of the same id. Overflow is trimmed from the oldest end.
    """
    seen: set[str] = set()
    merged: list[Event] = []
    for event in (*new_events, *existing):
        if event.id in seen:
            continue
        seen.add(event.id)
        merged.append(event)
        if len(merged) >= max_size:
            break
    return tuple(merged)


class HistoryStore:
    """Own the in-memory history and its persisted copy.

    Parameters
    ----------
    path
        Location of the history artifact.
    max_size
        Maximum number of events retained.

    """

    def __init__(self, path: Path, *, max_size: int = DEFAULT_MAX_EVENTS) -> None:
        """Create an empty store bound to ``path``; call :meth:`load` to fill it."""
        if max_size < 1:
            msg = f"max_size must be positive, got {max_size}"
            raise ValueError(msg)
        self._path = path
        self._max_size = max_size
        self._items: tuple[Event, ...] = ()

    @property
    def path(self) -> Path:
        """Return the artifact location."""
        return self._path

    @property
    def max_size(self) -> int:
        """Return the retention cap."""
        return self._max_size

    @property
    def items(self) -> tuple[Event, ...]:
        """Return the current history, newest first."""
        return self._items

    def __len__(self) -> int:
        """Return the number of retained events."""
        return len(self._items)

    def load(self) -> tuple[Event, ...]:
        """Load the persisted history, falling back to empty on any problem.

        Missing and corrupt artifacts both produce an empty history; the
        latter is logged. Unparseable records are dropped and the result is
        normalised so the store invariants hold even for hand-edited files.
        """
        try:
            records = self._read_records()
        except CacheStateError as exc:
            log_warning(logger, "Starting with empty history: %s", exc)
            self._items = ()
            return self._items

        events, dropped = parse_events(records)
        if dropped:
            log_warning(
                logger, "Dropped %d unparseable records from %s", dropped, self._path
            )
        self._items = merge_events(events, (), max_size=self._max_size)
        log_debug(logger, "Loaded %d events from %s", len(self._items), self._path)
        return self._items

    def merge(self, new_events: cabc.Iterable[Event]) -> tuple[Event, ...]:
        """Merge ``new_events`` ahead of the current history and return it.

        The merged sequence is computed in full before it replaces the
        current state.
        """
        merged = merge_events(new_events, self._items, max_size=self._max_size)
        self._items = merged
        return merged

    def persist(self) -> bool:
        """Write the current history to disk.

        Returns
        -------
        bool
            ``True`` when the artifact was replaced, ``False`` when the write
            failed. Failures are logged and never raised.

        """
        payload = msgspec.json.encode([event.serialize() for event in self._items])
        try:
            write_artifact_atomic(self._path, payload)
        except PersistenceError as exc:
            log_warning(logger, "Unable to persist history: %s", exc)
            return False
        log_info(logger, "Persisted %d events to %s", len(self._items), self._path)
        return True

    def _read_records(self) -> list[object]:
        raw = read_artifact(self._path)
        if raw is None:
            return []
        try:
            payload = msgspec.json.decode(raw)
        except msgspec.DecodeError as exc:
            raise CacheStateError.corrupt(self._path, str(exc)) from exc
        if not isinstance(payload, list):
            raise CacheStateError.corrupt(
                self._path, f"expected a list, got {type(payload).__name__}"
            )
        return payload


__all__ = ["DEFAULT_MAX_EVENTS", "HistoryStore", "merge_events"]
