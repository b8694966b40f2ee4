"""Generic persisted record with an expiry policy."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from interlock.core.clock import Clock, now_ms
from interlock.core.debounce import Debouncer
from interlock.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class WritePolicy(str, Enum):
    """How ``TTLRecord.save`` reaches the medium."""

    IMMEDIATE = "immediate"
    DEBOUNCED = "debounced"


class TTLRecord(Generic[RecordT]):
    """A pydantic model persisted as JSON under one key, valid for a bounded age.

    A record is absent to callers when the key is missing, the JSON does not
    parse into ``model``, its age has reached ``max_age_ms``, or the optional
    ``is_valid`` predicate rejects it. ``load`` never deletes anything.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        model: type[RecordT],
        *,
        max_age_ms: int | None,
        timestamp_field: str | None = "timestamp",
        is_valid: Callable[[RecordT], bool] | None = None,
        write_policy: WritePolicy = WritePolicy.IMMEDIATE,
        debounce_seconds: float = 0.0,
        clock: Clock = now_ms,
    ) -> None:
        """Bind a record to its medium and expiry policy.

        Args:
            store: Medium the record lives in.
            key: Storage key.
            model: Pydantic model the JSON is parsed into.
            max_age_ms: Age at which the record expires, or None for never.
            timestamp_field: Model attribute holding the write/creation time in ms.
            is_valid: Extra business condition a loaded record must satisfy.
            write_policy: Immediate or debounced writes.
            debounce_seconds: Window for debounced writes.
            clock: Millisecond clock.
        """
        if max_age_ms is not None and timestamp_field is None:
            raise ValueError("an expiring record needs a timestamp field")

        self.store = store
        self.key = key
        self.model = model
        self.max_age_ms = max_age_ms
        self.timestamp_field = timestamp_field
        self.is_valid = is_valid
        self.write_policy = write_policy
        self.clock = clock
        self._debouncer: Debouncer[RecordT] | None = None
        if write_policy is WritePolicy.DEBOUNCED:
            self._debouncer = Debouncer(self._write, debounce_seconds)

    @property
    def pending(self) -> bool:
        """Whether a debounced write is waiting."""
        return self._debouncer is not None and self._debouncer.pending

    def load(self) -> RecordT | None:
        """Read the record if present and still valid."""
        raw = self.store.get(self.key)
        if raw is None:
            return None

        try:
            record = self.model.model_validate_json(raw)
        except ValidationError as e:
            logger.info("Discarding unreadable record %s (%d errors)", self.key, e.error_count())
            return None

        if self.is_expired(record):
            logger.debug("Record %s has expired", self.key)
            return None

        if self.is_valid is not None and not self.is_valid(record):
            logger.debug("Record %s failed its validity check", self.key)
            return None

        return record

    def is_expired(self, record: RecordT) -> bool:
        """Check the record's age against ``max_age_ms``."""
        if self.max_age_ms is None or self.timestamp_field is None:
            return False
        written_at = getattr(record, self.timestamp_field)
        return self.clock() - written_at >= self.max_age_ms

    def save(self, record: RecordT) -> None:
        """Persist ``record`` according to the write policy."""
        if self._debouncer is not None:
            self._debouncer.submit(record)
        else:
            self._write(record)

    def flush(self) -> bool:
        """Write any pending debounced record now."""
        return self._debouncer.flush() if self._debouncer is not None else False

    def cancel_pending(self) -> bool:
        """Drop any pending debounced record."""
        return self._debouncer.cancel() if self._debouncer is not None else False

    def clear(self) -> None:
        """Cancel pending writes, then delete the stored record."""
        self.cancel_pending()
        if not self.store.remove(self.key):
            logger.debug("Record %s could not be removed, treating as cleared", self.key)

    def close(self) -> None:
        """Teardown: drop pending writes so nothing lands after the owner is gone."""
        if self.cancel_pending():
            logger.debug("Cancelled pending write for %s on close", self.key)

    def _write(self, record: RecordT) -> None:
        payload = record.model_dump_json(by_alias=True, exclude_none=True)
        if not self.store.set(self.key, payload):
            logger.warning("Record %s was not persisted", self.key)
