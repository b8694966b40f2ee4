"""Checkout progress persistence with debounced writes."""

import logging

from interlock.core.clock import Clock, now_ms
from interlock.core.config import MS_PER_HOUR
from interlock.core.storage import KeyValueStore
from interlock.core.ttl_record import TTLRecord, WritePolicy
from interlock.schemas.checkout import CheckoutProgress, GuestInfo

logger = logging.getLogger(__name__)

CHECKOUT_PROGRESS_STORAGE_KEY = "interlock_checkout_progress"
DEFAULT_PROGRESS_TTL_MS = 24 * MS_PER_HOUR
DEFAULT_DEBOUNCE_SECONDS = 1.0


class ProgressPersistence:
    """Saves the guest-checkout fields while the user types.

    Independent of the draft session: its own key, its own 24h clock measured
    from the last write. Rapid edits coalesce; only the last edit in a
    debounce window is written.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_PROGRESS_TTL_MS,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Clock = now_ms,
    ) -> None:
        self.clock = clock
        self._record: TTLRecord[CheckoutProgress] = TTLRecord(
            store,
            CHECKOUT_PROGRESS_STORAGE_KEY,
            CheckoutProgress,
            max_age_ms=ttl_ms,
            timestamp_field="timestamp",
            write_policy=WritePolicy.DEBOUNCED,
            debounce_seconds=debounce_seconds,
            clock=clock,
        )

    @property
    def pending(self) -> bool:
        """Whether an edit is waiting for the debounce window to close."""
        return self._record.pending

    def load(self) -> CheckoutProgress | None:
        """Return saved progress younger than the TTL."""
        return self._record.load()

    def save(self, step: int, data: GuestInfo) -> CheckoutProgress:
        """Record an edit; the write happens when the window closes.

        Returns:
            The progress record that will be written.
        """
        progress = CheckoutProgress(step=step, timestamp=self.clock(), data=data)
        self._record.save(progress)
        return progress

    def flush(self) -> bool:
        """Write the pending edit immediately."""
        return self._record.flush()

    def clear(self) -> None:
        """Forget progress after order submission or an explicit fresh start."""
        self._record.clear()
        logger.debug("Cleared checkout progress")

    def close(self) -> None:
        """Teardown: cancel the pending edit so nothing is written afterwards."""
        self._record.close()
