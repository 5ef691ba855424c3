"""Local persistence for the event history and freshness token."""

from __future__ import annotations

from .errors import CacheStateError, PersistenceError
from .freshness import FreshnessTokenStore
from .history import DEFAULT_MAX_EVENTS, HistoryStore, merge_events

__all__ = [
    "DEFAULT_MAX_EVENTS",
    "CacheStateError",
    "FreshnessTokenStore",
    "HistoryStore",
    "PersistenceError",
    "merge_events",
]
