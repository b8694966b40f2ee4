"""Unit tests for TTLRecord and Debouncer."""

import asyncio
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from pydantic import BaseModel

from interlock.core.debounce import Debouncer
from interlock.core.storage import InMemoryKeyValueStore
from interlock.core.ttl_record import TTLRecord, WritePolicy

HOUR_MS = 60 * 60 * 1000


class Note(BaseModel):
    text: str
    timestamp: int


def _record(store: InMemoryKeyValueStore, clock: Any, **kwargs: Any) -> TTLRecord[Note]:
    kwargs.setdefault("max_age_ms", HOUR_MS)
    return TTLRecord(store, "note", Note, clock=clock, **kwargs)


class TestLoad:
    """Tests for TTLRecord.load."""

    def test_absent_key_loads_none(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a missing key loads as None."""
        assert _record(store, clock).load() is None

    def test_saved_record_loads_back(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a saved record round-trips."""
        record = _record(store, clock)
        note = Note(text="hello", timestamp=clock())

        record.save(note)

        assert record.load() == note

    def test_record_expires_at_max_age(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a record is present just before max age and absent at it."""
        record = _record(store, clock)
        record.save(Note(text="hello", timestamp=clock()))

        clock.advance(HOUR_MS - 1)
        assert record.load() is not None

        clock.advance(1)
        assert record.load() is None

    def test_load_never_deletes(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that loading a stale record leaves the stored value alone."""
        record = _record(store, clock)
        record.save(Note(text="hello", timestamp=clock()))
        clock.advance(2 * HOUR_MS)

        assert record.load() is None
        assert store.get("note") is not None

    def test_unparsable_record_loads_none(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that corrupt JSON and wrong shapes read as absence."""
        record = _record(store, clock)

        store.set("note", "{broken")
        assert record.load() is None

        store.set("note", '{"text": "missing timestamp"}')
        assert record.load() is None

    def test_predicate_rejects_record(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that the validity predicate hides a record."""
        record = _record(store, clock, is_valid=lambda n: n.text != "done")
        record.save(Note(text="done", timestamp=clock()))

        assert record.load() is None

    def test_no_expiry_without_max_age(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a record without max age never expires."""
        record = _record(store, clock, max_age_ms=None)
        record.save(Note(text="hello", timestamp=clock()))
        clock.advance(10_000 * HOUR_MS)

        assert record.load() is not None

    def test_expiring_record_requires_timestamp_field(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that an expiring record without a timestamp field is rejected."""
        with pytest.raises(ValueError):
            _record(store, clock, timestamp_field=None)


class TestWritePolicy:
    """Tests for immediate and debounced writes."""

    def test_clear_removes_record(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that clear deletes the stored value."""
        record = _record(store, clock)
        record.save(Note(text="hello", timestamp=clock()))

        record.clear()

        assert store.get("note") is None

    def test_debounced_without_loop_writes_immediately(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a debounced save outside an event loop is written at once."""
        record = _record(store, clock, write_policy=WritePolicy.DEBOUNCED, debounce_seconds=10)

        record.save(Note(text="hello", timestamp=clock()))

        assert record.pending is False
        assert record.load() is not None

    @pytest.mark.asyncio
    async def test_debounced_saves_coalesce(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a burst of saves produces one write of the last value."""
        record = _record(store, clock, write_policy=WritePolicy.DEBOUNCED, debounce_seconds=0.05)

        with patch.object(store, "set", wraps=store.set) as spy:
            for text in ("a", "ab", "abc"):
                record.save(Note(text=text, timestamp=clock()))
            assert record.pending is True
            assert store.get("note") is None

            await asyncio.sleep(0.15)

        assert spy.call_count == 1
        loaded = record.load()
        assert loaded is not None
        assert loaded.text == "abc"

    @pytest.mark.asyncio
    async def test_clear_cancels_pending_write(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a pending write cannot resurrect a cleared record."""
        record = _record(store, clock, write_policy=WritePolicy.DEBOUNCED, debounce_seconds=0.05)

        record.save(Note(text="hello", timestamp=clock()))
        record.clear()
        await asyncio.sleep(0.15)

        assert store.get("note") is None

    @pytest.mark.asyncio
    async def test_flush_writes_pending_now(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that flush performs the pending write immediately."""
        record = _record(store, clock, write_policy=WritePolicy.DEBOUNCED, debounce_seconds=10)
        record.save(Note(text="hello", timestamp=clock()))

        assert record.flush() is True
        assert record.pending is False
        assert record.load() is not None

    @pytest.mark.asyncio
    async def test_close_drops_pending_write(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that closing cancels the pending write."""
        record = _record(store, clock, write_policy=WritePolicy.DEBOUNCED, debounce_seconds=0.05)
        record.save(Note(text="hello", timestamp=clock()))

        record.close()
        await asyncio.sleep(0.15)

        assert store.get("note") is None


class TestDebouncer:
    """Tests for the Debouncer primitive."""

    def test_flush_without_pending_is_noop(self) -> None:
        """Test that flushing with nothing pending does not call the action."""
        action = MagicMock()

        assert Debouncer(action, 1.0).flush() is False
        action.assert_not_called()

    def test_zero_delay_delivers_immediately(self) -> None:
        """Test that a zero window delivers on submit."""
        action = MagicMock()

        Debouncer(action, 0).submit("x")

        action.assert_called_once_with("x")

    @pytest.mark.asyncio
    async def test_cancel_reports_pending(self) -> None:
        """Test that cancel drops the value and reports it was pending."""
        action = MagicMock()
        debouncer: Debouncer[str] = Debouncer(action, 10)
        debouncer.submit("x")

        assert debouncer.cancel() is True
        assert debouncer.cancel() is False
        action.assert_not_called()
