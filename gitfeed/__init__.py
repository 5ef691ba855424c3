"""Poll a repository activity feed into a bounded, persisted history."""

from __future__ import annotations

from gitfeed.config import GitFeedConfig
from gitfeed.feed import Event, FeedClientConfig, FeedFetcher
from gitfeed.poll import PollController, PollState, RefreshOutcome, RefreshStatus
from gitfeed.storage import FreshnessTokenStore, HistoryStore

__all__ = [
    "Event",
    "FeedClientConfig",
    "FeedFetcher",
    "FreshnessTokenStore",
    "GitFeedConfig",
    "HistoryStore",
    "PollController",
    "PollState",
    "RefreshOutcome",
    "RefreshStatus",
]
