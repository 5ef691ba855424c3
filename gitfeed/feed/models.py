"""Typed domain models for the activity feed."""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses
import typing as typ
from urllib.parse import urlsplit

import msgspec

from .errors import EventParseError

_AVATAR_SCHEMES = frozenset({"http", "https"})


def _coerce_id(value: object) -> str | None:
    # bool is an int subclass and never a usable identifier
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_mapping(value: object) -> cabc.Mapping[str, typ.Any]:
    return value if isinstance(value, cabc.Mapping) else {}


def _string_field(record: cabc.Mapping[str, typ.Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _avatar_url(actor: cabc.Mapping[str, typ.Any]) -> str | None:
    value = actor.get("avatar_url")
    if not isinstance(value, str):
        return None
    parts = urlsplit(value.strip())
    if parts.scheme not in _AVATAR_SCHEMES or not parts.netloc:
        return None
    return value.strip()


class Event(msgspec.Struct, kw_only=True, frozen=True):
    """One entry of the activity feed.

    Attributes
    ----------
    id : str
        Stable identifier assigned by the feed; history deduplicates on it.
    name : str
        Display label taken from the acting account.
    repo : str
        Name of the repository the activity happened in.
    action : str
        Event kind as reported by the feed, e.g. ``PushEvent``.
    image_url : str | None
        Absolute avatar URL for the acting account, when one is supplied.
    raw_fields : dict[str, Any]
        The complete source record. It is what gets persisted, so fields the
        model does not interpret survive a restart.

    """

    id: str
    name: str
    repo: str
    action: str
    image_url: str | None = None
    raw_fields: dict[str, typ.Any] = msgspec.field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: object) -> Event:
        """Build an event from a feed record, raising on unusable input.

        Raises
        ------
        EventParseError
            If the record is not a mapping or lacks a usable ``id`` or
            ``type``.

        """
        if not isinstance(raw, cabc.Mapping):
            raise EventParseError.not_a_mapping(raw)

        event_id = _coerce_id(raw.get("id"))
        if event_id is None:
            raise EventParseError.missing("id")

        action = raw.get("type")
        if not isinstance(action, str) or not action.strip():
            raise EventParseError.missing("type")

        actor = _as_mapping(raw.get("actor"))
        repo = _as_mapping(raw.get("repo"))
        return cls(
            id=event_id,
            name=_string_field(actor, "display_login", "login"),
            repo=_string_field(repo, "name"),
            action=action.strip(),
            image_url=_avatar_url(actor),
            raw_fields=copy.deepcopy(dict(raw)),
        )

    @classmethod
    def parse(cls, raw: object) -> Event | None:
        """Build an event from a feed record, or return ``None`` if unusable."""
        try:
            return cls.from_raw(raw)
        except EventParseError:
            return None

    def serialize(self) -> dict[str, typ.Any]:
        """Return the record to persist; :meth:`parse` restores an equal event."""
        return copy.deepcopy(self.raw_fields)

    @property
    def action_label(self) -> str:
        """Return the human form of the action (``PushEvent`` -> ``push``)."""
        return self.action.replace("Event", "").lower()

    def describe(self) -> str:
        """Return a single console line for the event."""
        return f"{self.name}: {self.repo}, {self.action_label}"


@dataclasses.dataclass(frozen=True, slots=True)
class Fresh:
    """The feed returned at least one usable new event."""

    events: tuple[Event, ...]
    new_token: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class NotModified:
    """Nothing new, but the server supplied a freshness token."""

    new_token: str


@dataclasses.dataclass(frozen=True, slots=True)
class NoChange:
    """Nothing new and no freshness token in the response."""


@dataclasses.dataclass(frozen=True, slots=True)
class Failed:
    """The poll made no progress."""

    reason: str
    error: BaseException | None = None


type FetchResult = Fresh | NotModified | NoChange | Failed


def parse_events(records: cabc.Iterable[object]) -> tuple[list[Event], int]:
    """Parse a batch of records, dropping unusable ones.

    Returns
    -------
    tuple[list[Event], int]
        The parsed events in input order and the number of dropped records.

    """
    events: list[Event] = []
    dropped = 0
    for record in records:
        event = Event.parse(record)
        if event is None:
            dropped += 1
        else:
            events.append(event)
    return events, dropped
