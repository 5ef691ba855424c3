"""Unit tests for GitFeedConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitfeed.config import GitFeedConfig
from gitfeed.feed.errors import FeedConfigError


class TestGitFeedConfig:
    """Tests for configuration defaults and derived paths."""

    def test_defaults(self) -> None:
        """Defaults poll RxSwift every minute and keep 50 events."""
        config = GitFeedConfig()

        assert config.resource == "ReactiveX/RxSwift"
        assert config.endpoint == "https://api.github.com/repos"
        assert config.timeout_s == 20.0
        assert config.poll_interval_s == 60.0
        assert config.max_events == 50
        assert config.log_level == "INFO"

    def test_default_cache_dir_honours_xdg(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """XDG_CACHE_HOME relocates the cache directory."""
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))

        assert GitFeedConfig().cache_dir == tmp_path / "gitfeed"

    def test_artifact_paths(self, tmp_path: Path) -> None:
        """Both artifacts live in the cache directory."""
        config = GitFeedConfig(cache_dir=tmp_path)

        assert config.history_path == tmp_path / "events.json"
        assert config.token_path == tmp_path / "modifier.txt"

    def test_resource_is_validated(self) -> None:
        """Malformed slugs are rejected at construction."""
        with pytest.raises(ValueError, match="owner/name"):
            GitFeedConfig(resource="octo")

    def test_endpoint_is_validated(self) -> None:
        """Non-http endpoints are rejected at construction."""
        with pytest.raises(FeedConfigError, match=r"http\(s\)"):
            GitFeedConfig(endpoint="ftp://example.test")

    def test_resource_is_stripped(self) -> None:
        """Whitespace around the slug is ignored."""
        assert GitFeedConfig(resource=" octo/reef ").resource == "octo/reef"

    def test_client_config_carries_endpoint_and_timeout(self) -> None:
        """HTTP settings flow into the feed client configuration."""
        config = GitFeedConfig(endpoint="https://example.test/repos", timeout_s=5)

        client_config = config.client_config()

        assert client_config.endpoint == "https://example.test/repos"
        assert client_config.timeout_s == 5


class TestFromEnv:
    """Tests for GitFeedConfig.from_env."""

    def test_reads_all_variables(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Every documented variable is honoured."""
        monkeypatch.setenv("GITFEED_RESOURCE", "octo/reef")
        monkeypatch.setenv("GITFEED_ENDPOINT", "https://example.test/repos")
        monkeypatch.setenv("GITFEED_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("GITFEED_TIMEOUT_S", "2.5")
        monkeypatch.setenv("GITFEED_POLL_INTERVAL_S", "15")
        monkeypatch.setenv("GITFEED_MAX_EVENTS", "10")
        monkeypatch.setenv("GITFEED_LOG_LEVEL", "debug")

        config = GitFeedConfig.from_env()

        assert config == GitFeedConfig(
            resource="octo/reef",
            endpoint="https://example.test/repos",
            cache_dir=tmp_path,
            timeout_s=2.5,
            poll_interval_s=15.0,
            max_events=10,
            log_level="debug",
        )

    def test_blank_values_keep_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Blank variables behave as if unset."""
        monkeypatch.setenv("GITFEED_RESOURCE", "  ")
        monkeypatch.setenv("GITFEED_TIMEOUT_S", "")

        config = GitFeedConfig.from_env()

        assert config.resource == "ReactiveX/RxSwift"
        assert config.timeout_s == 20.0

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("GITFEED_TIMEOUT_S", "soon"),
            ("GITFEED_TIMEOUT_S", "0"),
            ("GITFEED_POLL_INTERVAL_S", "-1"),
            ("GITFEED_MAX_EVENTS", "2.5"),
            ("GITFEED_MAX_EVENTS", "0"),
        ],
    )
    def test_invalid_numbers_raise(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        """Invalid numbers raise ValueError naming the variable."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            GitFeedConfig.from_env()

    def test_cache_dir_expands_user(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A leading ~ in the cache directory is expanded."""
        monkeypatch.setenv("GITFEED_CACHE_DIR", "~/feeds")

        assert GitFeedConfig.from_env().cache_dir == Path("~/feeds").expanduser()
