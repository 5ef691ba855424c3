"""Poll controller: runs fetch, merge and persist cycles for one resource.

The controller is the only writer of the history and freshness token. Its
state machine (``IDLE -> FETCHING -> MERGING -> IDLE``) doubles as the
mutual-exclusion mechanism: a refresh requested while a cycle is in flight is
dropped, so at most one request is ever outstanding. All transitions happen on
the event loop; disk writes are pushed to a worker thread while the controller
sits in ``MERGING``.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import datetime as dt
import typing as typ

from gitfeed.common.slug import normalize_resource_slug
from gitfeed.feed.models import Failed, Fresh, NoChange, NotModified
from gitfeed.logging import get_logger, log_exception

from .models import PollState, RefreshOutcome, RefreshStatus
from .observability import PollEventLogger, PollRunContext

if typ.TYPE_CHECKING:
    from gitfeed.feed.client import FeedSource
    from gitfeed.feed.models import Event, FetchResult
    from gitfeed.storage.freshness import FreshnessTokenStore
    from gitfeed.storage.history import HistoryStore

logger = get_logger(__name__)

type HistoryListener = cabc.Callable[[tuple[Event, ...]], None]
type CompletionListener = cabc.Callable[[RefreshOutcome], None]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class PollController:
    """Orchestrate poll cycles and notify the display layer.

    Parameters
    ----------
    resource
        Repository slug in ``owner/name`` format.
    source
        Feed source used for each fetch.
    history
        History store owned by this controller.
    tokens
        Freshness token store owned by this controller.
    event_logger
        Structured event logger; a default instance is created when omitted.

    """

    def __init__(
        self,
        resource: str,
        source: FeedSource,
        history: HistoryStore,
        tokens: FreshnessTokenStore,
        *,
        event_logger: PollEventLogger | None = None,
    ) -> None:
        """Bind the controller to its collaborators; nothing is read yet."""
        self._resource = normalize_resource_slug(resource)
        self._source = source
        self._history = history
        self._tokens = tokens
        self._event_logger = event_logger or PollEventLogger()
        self._state = PollState.IDLE
        self._inflight: asyncio.Task[RefreshOutcome] | None = None
        self._history_listeners: list[HistoryListener] = []
        self._completion_listeners: list[CompletionListener] = []

    @property
    def resource(self) -> str:
        """Return the polled resource slug."""
        return self._resource

    @property
    def state(self) -> PollState:
        """Return the current state machine phase."""
        return self._state

    @property
    def items(self) -> tuple[Event, ...]:
        """Return a read-only view of the current history."""
        return self._history.items

    @property
    def token(self) -> str | None:
        """Return the freshness token sent with the next request."""
        return self._tokens.value

    def start(self) -> tuple[Event, ...]:
        """Load persisted history and token; problems mean a cold start."""
        self._tokens.load()
        return self._history.load()

    def add_history_listener(self, listener: HistoryListener) -> None:
        """Register a callback for "history changed" notifications."""
        self._history_listeners.append(listener)

    def add_completion_listener(self, listener: CompletionListener) -> None:
        """Register a callback for "refresh completed" notifications."""
        self._completion_listeners.append(listener)

    def refresh(self) -> bool:
        """Start a poll cycle in the background and return immediately.

        Must be called from a running event loop. Returns ``False`` when a
        cycle is already in flight; the request is dropped, not queued.
        Without a running loop ``RuntimeError`` is raised and the state is
        left untouched.
        """
        loop = asyncio.get_running_loop()
        if not self._claim():
            return False
        task = loop.create_task(self._run_cycle())
        self._inflight = task
        task.add_done_callback(self._forget_task)
        return True

    async def poll_once(self) -> RefreshOutcome:
        """Run one poll cycle inline and return its outcome.

        Returns a ``BUSY`` outcome without touching the network when another
        cycle is already in flight.
        """
        if not self._claim():
            return RefreshOutcome(
                status=RefreshStatus.BUSY,
                message="a poll cycle is already in flight",
            )
        return await self._run_cycle()

    async def wait_idle(self) -> RefreshOutcome | None:
        """Wait for the background cycle started by :meth:`refresh`, if any."""
        task = self._inflight
        if task is None:
            return None
        return await task

    async def run(self, poll_interval: float) -> None:
        """Poll forever, sleeping ``poll_interval`` seconds between cycles."""
        while True:
            await self.poll_once()
            await asyncio.sleep(poll_interval)

    def _claim(self) -> bool:
        if self._state is not PollState.IDLE:
            self._event_logger.log_refresh_dropped(self._resource, self._state)
            return False
        self._state = PollState.FETCHING
        return True

    def _forget_task(self, task: asyncio.Task[RefreshOutcome]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _run_cycle(self) -> RefreshOutcome:
        context = PollRunContext(resource=self._resource, started_at=_utcnow())
        self._event_logger.log_cycle_started(context)
        try:
            result = await self._fetch()
            try:
                outcome = await self._apply(result)
            except Exception as exc:  # noqa: BLE001 - always signal completion
                reason = f"applying feed result failed: {exc}"
                result = Failed(reason=reason, error=exc)
                outcome = RefreshOutcome(
                    status=RefreshStatus.FAILED, message=result.reason
                )
        finally:
            self._state = PollState.IDLE

        duration = _utcnow() - context.started_at
        if isinstance(result, Failed):
            self._event_logger.log_cycle_failed(
                context, result.reason, result.error, duration
            )
        else:
            self._event_logger.log_cycle_completed(
                context, outcome, duration, history_size=len(self._history)
            )
        self._emit(self._completion_listeners, outcome)
        return outcome

    async def _fetch(self) -> FetchResult:
        try:
            return await self._source.fetch(self._resource, self._tokens.value)
        except Exception as exc:  # noqa: BLE001 - a poll must never crash the caller
            return Failed(reason=f"feed source raised: {exc}", error=exc)

    async def _apply(self, result: FetchResult) -> RefreshOutcome:
        match result:
            case Fresh(events=events, new_token=new_token):
                self._state = PollState.MERGING
                merged = self._history.merge(events)
                await asyncio.to_thread(self._history.persist)
                await self._adopt_token(new_token)
                self._emit(self._history_listeners, merged)
                return RefreshOutcome(
                    status=RefreshStatus.FRESH,
                    history_changed=True,
                    new_events=len(events),
                )
            case NotModified(new_token=new_token):
                await self._adopt_token(new_token)
                return RefreshOutcome(status=RefreshStatus.NOT_MODIFIED)
            case NoChange():
                return RefreshOutcome(status=RefreshStatus.NO_CHANGE)
            case Failed(reason=reason):
                return RefreshOutcome(status=RefreshStatus.FAILED, message=reason)
            case _:
                typ.assert_never(result)

    async def _adopt_token(self, new_token: str | None) -> None:
        if self._tokens.update(new_token):
            await asyncio.to_thread(self._tokens.persist)

    def _emit[T](self, listeners: list[cabc.Callable[[T], None]], payload: T) -> None:
        for listener in tuple(listeners):
            try:
                listener(payload)
            except Exception as exc:  # noqa: BLE001 - listeners cannot break a cycle
                log_exception(logger, "Poll listener raised", exc)


__all__ = ["CompletionListener", "HistoryListener", "PollController"]
