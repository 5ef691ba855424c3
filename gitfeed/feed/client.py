"""HTTP client that polls the activity feed and classifies the outcome."""

from __future__ import annotations

import dataclasses
import typing as typ
from urllib.parse import urlsplit

import httpx
import msgspec

from gitfeed.common.slug import normalize_resource_slug
from gitfeed.logging import get_logger, log_debug

from .errors import FeedConfigError, FeedNetworkError
from .models import Failed, FetchResult, Fresh, NoChange, NotModified, parse_events

logger = get_logger(__name__)

_SUCCESS_STATUSES = range(200, 300)
_REDIRECT_STATUSES = range(300, 400)


class FeedSource(typ.Protocol):
    """Interface the poll controller uses to fetch one batch of events."""

    async def fetch(self, resource: str, token: str | None) -> FetchResult:
        """Fetch events for ``resource`` using ``token`` as the freshness hint."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class FeedClientConfig:
    """Configuration for :class:`FeedFetcher`.

    ``request_token_header`` carries the stored token on the way out and
    ``response_token_header`` is read back from every 2xx or 3xx response.
    The defaults pair ``If-Modified-Since`` with ``Last-Modified``; use
    ``If-None-Match`` with ``ETag`` for entity-tag validation instead.
    """

    endpoint: str = "https://api.github.com/repos"
    timeout_s: float = 20.0
    user_agent: str = "gitfeed/0.1"
    accept: str = "application/vnd.github+json"
    request_token_header: str = "If-Modified-Since"
    response_token_header: str = "Last-Modified"

    def __post_init__(self) -> None:
        """Reject configurations that could never produce a request."""
        if self.timeout_s <= 0:
            raise FeedConfigError.invalid_timeout(self.timeout_s)
        parts = urlsplit(self.endpoint)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise FeedConfigError.invalid_endpoint(self.endpoint)

    def events_url(self, resource: str) -> str:
        """Return the events URL for ``resource``."""
        slug = normalize_resource_slug(resource)
        return f"{self.endpoint.rstrip('/')}/{slug}/events"


def _decode_records(response: httpx.Response) -> list[object]:
    """Return the JSON records in ``response``; an empty body yields none."""
    if not response.content.strip():
        return []
    try:
        payload = msgspec.json.decode(response.content)
    except msgspec.DecodeError as exc:
        raise FeedNetworkError.malformed_body(
            f"invalid JSON: {exc}", status_code=response.status_code
        ) from exc
    if not isinstance(payload, list):
        raise FeedNetworkError.malformed_body(
            f"expected a list of records, got {type(payload).__name__}",
            status_code=response.status_code,
        )
    return payload


class FeedFetcher:
    """Issue exactly one feed request per :meth:`fetch` call.

    The fetcher never retries; a failed poll is reported as :class:`Failed`
    and the caller decides whether and when to try again.
    """

    def __init__(
        self,
        config: FeedClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the fetcher, creating an HTTP client unless one is given."""
        self._config = config or FeedClientConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._config.timeout_s,
            headers={
                "User-Agent": self._config.user_agent,
                "Accept": self._config.accept,
            },
        )

    @property
    def config(self) -> FeedClientConfig:
        """Return the active configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, resource: str, token: str | None) -> FetchResult:
        """Fetch and classify the events for ``resource``.

        Parameters
        ----------
        resource
            Repository slug in ``owner/name`` format.
        token
            Last freshness token seen for the resource, if any.

        Returns
        -------
        FetchResult
            :class:`Fresh` when at least one record parsed, :class:`NotModified`
            or :class:`NoChange` when there was nothing new, and
            :class:`Failed` for network errors, timeouts, unexpected statuses
            and malformed bodies.

        """
        try:
            url = self._config.events_url(resource)
        except ValueError as exc:
            return Failed(reason=str(exc), error=exc)

        headers: dict[str, str] = {}
        if token:
            headers[self._config.request_token_header] = token

        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TimeoutException:
            error = FeedNetworkError.timeout(url)
            return Failed(reason=str(error), error=error)
        except httpx.HTTPError as exc:
            error = FeedNetworkError.transport(url, exc)
            return Failed(reason=str(error), error=error)

        return self._classify(response)

    def _classify(self, response: httpx.Response) -> FetchResult:
        status = response.status_code
        if status not in _SUCCESS_STATUSES and status not in _REDIRECT_STATUSES:
            error = FeedNetworkError.http_error(status)
            return Failed(reason=str(error), error=error)

        new_token = self._response_token(response)
        if status in _SUCCESS_STATUSES:
            # The token is dropped with an unreadable body; adopting it would
            # make the server skip the events we failed to read.
            try:
                records = _decode_records(response)
            except FeedNetworkError as exc:
                return Failed(reason=str(exc), error=exc)
            events, dropped = parse_events(records)
            if dropped:
                log_debug(
                    logger,
                    "Dropped %d unparseable feed records from %s",
                    dropped,
                    response.request.url,
                )
            if events:
                return Fresh(events=tuple(events), new_token=new_token)

        if new_token is not None:
            return NotModified(new_token=new_token)
        return NoChange()

    def _response_token(self, response: httpx.Response) -> str | None:
        value = response.headers.get(self._config.response_token_header)
        if value is None or not value.strip():
            return None
        return value.strip()


__all__ = ["FeedClientConfig", "FeedFetcher", "FeedSource"]
