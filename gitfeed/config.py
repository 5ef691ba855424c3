"""Configuration for the feed poller.

Usage
-----
Create a configuration with defaults:

>>> config = GitFeedConfig()
>>> config.resource
'ReactiveX/RxSwift'

Or load from environment variables:

>>> import os
>>> os.environ["GITFEED_RESOURCE"] = "octo/reef"
>>> GitFeedConfig.from_env().resource
'octo/reef'

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from gitfeed.common.slug import normalize_resource_slug
from gitfeed.feed.client import FeedClientConfig
from gitfeed.storage.history import DEFAULT_MAX_EVENTS

HISTORY_FILE_NAME = "events.json"
TOKEN_FILE_NAME = "modifier.txt"


def _default_cache_dir() -> Path:
    xdg_cache = os.environ.get("XDG_CACHE_HOME", "").strip()
    base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
    return base / "gitfeed"


@dc.dataclass(frozen=True, slots=True)
class GitFeedConfig:
    """Runtime settings for polling one resource.

    Attributes
    ----------
    resource
        Repository slug whose events are polled, in ``owner/name`` format.
    endpoint
        Base URL; requests go to ``{endpoint}/{resource}/events``.
    cache_dir
        Directory holding the history and freshness token artifacts.
    timeout_s
        Per-request network timeout in seconds.
    poll_interval_s
        Delay between cycles when polling continuously.
    max_events
        Number of events retained in the history.
    log_level
        femtologging level name.

    """

    resource: str = "ReactiveX/RxSwift"
    endpoint: str = "https://api.github.com/repos"
    cache_dir: Path = dc.field(default_factory=_default_cache_dir)
    timeout_s: float = 20.0
    poll_interval_s: float = 60.0
    max_events: int = DEFAULT_MAX_EVENTS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate the resource slug and client settings eagerly."""
        object.__setattr__(self, "resource", normalize_resource_slug(self.resource))
        self.client_config()

    @property
    def history_path(self) -> Path:
        """Return the location of the history artifact."""
        return self.cache_dir / HISTORY_FILE_NAME

    @property
    def token_path(self) -> Path:
        """Return the location of the freshness token artifact."""
        return self.cache_dir / TOKEN_FILE_NAME

    def client_config(self) -> FeedClientConfig:
        """Return the HTTP client settings derived from this configuration."""
        return FeedClientConfig(endpoint=self.endpoint, timeout_s=self.timeout_s)

    @staticmethod
    def _parse_positive(env_var: str, default: float, *, cast: type) -> float:
        """Read a positive number env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = cast(raw.strip())
        except ValueError as exc:
            msg = f"{env_var} must be a number, got: {raw!r}"
            raise ValueError(msg) from exc
        if value <= 0:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> GitFeedConfig:
        """Create configuration from environment variables.

        Reads ``GITFEED_RESOURCE``, ``GITFEED_ENDPOINT``, ``GITFEED_CACHE_DIR``,
        ``GITFEED_TIMEOUT_S``, ``GITFEED_POLL_INTERVAL_S``,
        ``GITFEED_MAX_EVENTS`` and ``GITFEED_LOG_LEVEL``. Unset or blank
        variables keep their defaults.

        Raises
        ------
        ValueError
            If a numeric variable is not a positive number, the resource is
            not an ``owner/name`` slug or the endpoint is not an http(s) URL.

        """
        defaults = cls()
        cache_dir_raw = os.environ.get("GITFEED_CACHE_DIR", "").strip()
        return cls(
            resource=os.environ.get("GITFEED_RESOURCE", "").strip()
            or defaults.resource,
            endpoint=os.environ.get("GITFEED_ENDPOINT", "").strip()
            or defaults.endpoint,
            cache_dir=Path(cache_dir_raw).expanduser()
            if cache_dir_raw
            else defaults.cache_dir,
            timeout_s=cls._parse_positive(
                "GITFEED_TIMEOUT_S", defaults.timeout_s, cast=float
            ),
            poll_interval_s=cls._parse_positive(
                "GITFEED_POLL_INTERVAL_S", defaults.poll_interval_s, cast=float
            ),
            max_events=int(
                cls._parse_positive(
                    "GITFEED_MAX_EVENTS", defaults.max_events, cast=int
                )
            ),
            log_level=os.environ.get("GITFEED_LOG_LEVEL", "").strip()
            or defaults.log_level,
        )


__all__ = ["HISTORY_FILE_NAME", "TOKEN_FILE_NAME", "GitFeedConfig"]
