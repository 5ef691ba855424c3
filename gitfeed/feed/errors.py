"""Feed fetching and parsing errors."""

from __future__ import annotations


class EventParseError(ValueError):
    """Raised when a feed record cannot be turned into an :class:`Event`."""

    def __init__(self, message: str, *, field: str) -> None:
        """Initialise with a message and the offending field name."""
        self.field = field
        super().__init__(message)

    @classmethod
    def missing(cls, field: str) -> EventParseError:
        """Return an error for a required field that is absent or unusable."""
        return cls(f"feed record missing usable field: {field}", field=field)

    @classmethod
    def not_a_mapping(cls, value: object) -> EventParseError:
        """Return an error for a record that is not a JSON object."""
        return cls(
            f"feed record must be an object, got {type(value).__name__}",
            field="record",
        )


class FeedNetworkError(RuntimeError):
    """Raised when the feed endpoint cannot produce a usable response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> FeedNetworkError:
        """Return an error for responses outside the 2xx and 3xx buckets."""
        return cls(f"feed HTTP {status_code}", status_code=status_code)

    @classmethod
    def timeout(cls, url: str) -> FeedNetworkError:
        """Return an error for a request that exceeded its timeout."""
        return cls(f"feed request timed out: {url}")

    @classmethod
    def transport(cls, url: str, exc: BaseException) -> FeedNetworkError:
        """Return an error for connection-level failures."""
        return cls(f"feed request failed: {url}: {exc}")

    @classmethod
    def malformed_body(cls, detail: str, *, status_code: int) -> FeedNetworkError:
        """Return an error for a successful status carrying an unusable body."""
        return cls(f"feed body malformed: {detail}", status_code=status_code)


class FeedConfigError(ValueError):
    """Raised when feed client configuration is invalid."""

    @classmethod
    def invalid_timeout(cls, value: float) -> FeedConfigError:
        """Return an error for a non-positive request timeout."""
        return cls(f"feed timeout must be positive, got {value}")

    @classmethod
    def invalid_endpoint(cls, endpoint: str) -> FeedConfigError:
        """Return an error for an endpoint that is not an absolute HTTP URL."""
        return cls(f"feed endpoint must be an absolute http(s) URL, got {endpoint!r}")
