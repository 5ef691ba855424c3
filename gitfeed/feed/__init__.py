"""Activity feed client and event models."""

from __future__ import annotations

from .client import FeedClientConfig, FeedFetcher, FeedSource
from .errors import EventParseError, FeedConfigError, FeedNetworkError
from .models import (
    Event,
    Failed,
    FetchResult,
    Fresh,
    NoChange,
    NotModified,
    parse_events,
)

__all__ = [
    "Event",
    "EventParseError",
    "Failed",
    "FeedClientConfig",
    "FeedConfigError",
    "FeedFetcher",
    "FeedNetworkError",
    "FeedSource",
    "FetchResult",
    "Fresh",
    "NoChange",
    "NotModified",
    "parse_events",
]
