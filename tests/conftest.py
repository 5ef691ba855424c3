"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

_GITFEED_ENV = (
    "GITFEED_RESOURCE",
    "GITFEED_ENDPOINT",
    "GITFEED_CACHE_DIR",
    "GITFEED_TIMEOUT_S",
    "GITFEED_POLL_INTERVAL_S",
    "GITFEED_MAX_EVENTS",
    "GITFEED_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_gitfeed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer GITFEED_* settings out of every test."""
    for name in _GITFEED_ENV:
        monkeypatch.delenv(name, raising=False)
