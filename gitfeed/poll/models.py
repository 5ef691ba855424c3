"""Value types exchanged between the poll controller and its listeners."""

from __future__ import annotations

import dataclasses
import enum


class PollState(enum.StrEnum):
    """Phases of a poll cycle; every cycle starts and ends in ``IDLE``."""

    IDLE = "idle"
    FETCHING = "fetching"
    MERGING = "merging"


class RefreshStatus(enum.StrEnum):
    """How a refresh request was resolved."""

    FRESH = "fresh"
    NOT_MODIFIED = "not_modified"
    NO_CHANGE = "no_change"
    FAILED = "failed"
    BUSY = "busy"


@dataclasses.dataclass(frozen=True, slots=True)
class RefreshOutcome:
    """Result delivered with the "refresh completed" signal.

    Attributes
    ----------
    status
        Classification of the cycle.
    history_changed
        Whether the history was replaced by this cycle.
    new_events
        Number of events the feed delivered in a fresh batch.
    message
        Diagnostic text for failed or dropped refreshes.

    """

    status: RefreshStatus
    history_changed: bool = False
    new_events: int = 0
    message: str | None = None

    @property
    def failed(self) -> bool:
        """Return whether the cycle failed."""
        return self.status is RefreshStatus.FAILED
