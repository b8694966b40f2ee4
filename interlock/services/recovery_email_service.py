"""Reminder address left on the abandoned-cart banner."""

import logging

from interlock.core.clock import Clock, now_ms
from interlock.core.storage import KeyValueStore
from interlock.core.ttl_record import TTLRecord
from interlock.schemas.recovery import RecoveryEmail

logger = logging.getLogger(__name__)

RECOVERY_EMAIL_STORAGE_KEY = "interlock_recovery_email"


class RecoveryEmailService:
    """Keeps one reminder address per device. Never expires.

    The address is personal data: it is stored but never logged.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = now_ms) -> None:
        self.clock = clock
        self._record: TTLRecord[RecoveryEmail] = TTLRecord(
            store,
            RECOVERY_EMAIL_STORAGE_KEY,
            RecoveryEmail,
            max_age_ms=None,
            timestamp_field=None,
            clock=clock,
        )

    def load(self) -> RecoveryEmail | None:
        return self._record.load()

    def save(self, email: str) -> RecoveryEmail:
        """Store ``email``, replacing any earlier address.

        Raises:
            pydantic.ValidationError: If ``email`` is not of the form local@domain.
        """
        record = RecoveryEmail(email=email, captured_at=self.clock())
        self._record.save(record)
        logger.info("Captured recovery email")
        return record

    def clear(self) -> None:
        self._record.clear()
        logger.debug("Cleared recovery email")
