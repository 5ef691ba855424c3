"""Unit tests for the bounded history store."""

from __future__ import annotations

import json
import typing as typ

import pytest

from gitfeed.feed.models import Event
from gitfeed.storage.history import HistoryStore, merge_events
from tests.helpers.feed_events import RecordSpec, make_events, make_record, make_records

if typ.TYPE_CHECKING:
    from pathlib import Path


def _ids(events: typ.Iterable[Event]) -> list[str]:
    return [event.id for event in events]


class TestMergeEvents:
    """Tests for the pure merge function."""

    def test_new_events_are_prepended_in_order(self) -> None:
        """Incoming events precede existing ones in received order."""
        merged = merge_events(make_events("5", "4"), make_events("3", "2"), max_size=50)

        assert _ids(merged) == ["5", "4", "3", "2"]

    def test_incoming_copy_wins_on_duplicate_id(self) -> None:
        """An id present in both keeps exactly one copy, the incoming one."""
        existing = make_events("2", "1")
        incoming = (
            Event.from_raw(
                make_record(RecordSpec(event_id="2", event_type="ForkEvent"))
            ),
        )

        merged = merge_events(incoming, existing, max_size=50)

        assert _ids(merged) == ["2", "1"]
        assert merged[0].action == "ForkEvent"

    def test_duplicates_within_incoming_batch_keep_first(self) -> None:
        """Repeated ids inside one batch collapse to the first occurrence."""
        merged = merge_events(make_events("3", "3", "2"), (), max_size=50)

        assert _ids(merged) == ["3", "2"]

    def test_overflow_drops_oldest(self) -> None:
        """Entries beyond the cap are trimmed from the tail."""
        merged = merge_events(make_events("c", "b"), make_events("a", "z"), max_size=3)

        assert _ids(merged) == ["c", "b", "a"]

    def test_untouched_order_is_preserved(self) -> None:
        """Existing entries keep their relative order when one is replaced."""
        existing = make_events("4", "3", "2", "1")

        merged = merge_events(make_events("3"), existing, max_size=50)

        assert _ids(merged) == ["3", "4", "2", "1"]


class TestHistoryStore:
    """Tests for HistoryStore load, merge and persist."""

    @pytest.fixture
    def path(self, tmp_path: Path) -> Path:
        """Return the history artifact path inside a temp cache dir."""
        return tmp_path / "cache" / "events.json"

    @pytest.fixture
    def store(self, path: Path) -> HistoryStore:
        """Return an empty store bound to the temp path."""
        return HistoryStore(path)

    def test_load_missing_file_is_empty(self, store: HistoryStore) -> None:
        """A cold start yields an empty history."""
        assert store.load() == ()
        assert len(store) == 0

    @pytest.mark.parametrize(
        "content",
        [b"", b"{not json", b'{"id": "1"}', b"\xff\xfe\x00"],
    )
    def test_load_corrupt_file_is_empty(
        self, store: HistoryStore, path: Path, content: bytes
    ) -> None:
        """Corrupt artifacts are treated as a cold start."""
        path.parent.mkdir(parents=True)
        path.write_bytes(content)

        assert store.load() == ()

    def test_load_drops_bad_records(self, store: HistoryStore, path: Path) -> None:
        """Unparseable records in the artifact are skipped."""
        path.parent.mkdir(parents=True)
        records: list[object] = [*make_records("2"), {"nope": 1}, *make_records("1")]
        path.write_text(json.dumps(records), encoding="utf-8")

        assert _ids(store.load()) == ["2", "1"]

    def test_load_normalises_duplicates_and_size(self, path: Path) -> None:
        """Hand-edited artifacts are brought back within the invariants."""
        path.parent.mkdir(parents=True)
        path.write_text(
            json.dumps(make_records("3", "3", "2", "1")), encoding="utf-8"
        )
        store = HistoryStore(path, max_size=2)

        assert _ids(store.load()) == ["3", "2"]

    def test_merge_replaces_current_state(self, store: HistoryStore) -> None:
        """merge returns the new history and makes it current."""
        store.merge(make_events("1"))

        merged = store.merge(make_events("2"))

        assert _ids(merged) == ["2", "1"]
        assert store.items == merged

    def test_merge_empty_is_idempotent(self, store: HistoryStore, path: Path) -> None:
        """Merging nothing leaves state and artifact byte-for-byte unchanged."""
        store.merge(make_events("2", "1"))
        store.persist()
        before_items = store.items
        before_bytes = path.read_bytes()

        store.merge(())
        store.persist()

        assert store.items == before_items
        assert path.read_bytes() == before_bytes

    def test_merge_caps_at_fifty(self, store: HistoryStore) -> None:
        """The default store never holds more than 50 events."""
        store.merge(make_events(*(str(n) for n in range(48, 0, -1))))

        merged = store.merge(make_events("53", "52", "51", "50", "49"))

        assert len(merged) == 50
        assert _ids(merged)[:5] == ["53", "52", "51", "50", "49"]
        assert _ids(merged)[-1] == "4"
        assert not {"3", "2", "1"} & set(_ids(merged))

    def test_persist_then_load_round_trips(
        self, store: HistoryStore, path: Path
    ) -> None:
        """A fresh store reads back exactly what was persisted."""
        store.merge(make_events("3", "2", "1"))

        assert store.persist() is True

        reloaded = HistoryStore(path)
        assert reloaded.load() == store.items

    def test_persist_writes_raw_records(self, store: HistoryStore, path: Path) -> None:
        """The artifact is a JSON array of the original records."""
        store.merge(make_events("1"))
        store.persist()

        assert json.loads(path.read_text(encoding="utf-8")) == make_records("1")

    def test_persist_failure_is_reported_not_raised(self, tmp_path: Path) -> None:
        """A write failure returns False and keeps in-memory state."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = HistoryStore(blocker / "events.json")
        store.merge(make_events("1"))

        assert store.persist() is False
        assert _ids(store.items) == ["1"]

    def test_rejects_non_positive_max_size(self, path: Path) -> None:
        """A zero cap is a configuration error."""
        with pytest.raises(ValueError, match="max_size"):
            HistoryStore(path, max_size=0)
