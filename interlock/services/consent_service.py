"""Cookie consent persistence."""

import logging

from interlock.core.clock import Clock, now_ms
from interlock.core.config import MS_PER_DAY
from interlock.core.storage import KeyValueStore
from interlock.core.ttl_record import TTLRecord
from interlock.schemas.consent import CONSENT_VERSION, CookiePreferences, StoredConsent

logger = logging.getLogger(__name__)

CONSENT_STORAGE_KEY = "interlock_cookie_consent"
DEFAULT_CONSENT_TTL_MS = 365 * MS_PER_DAY


class ConsentService:
    """Read and record the visitor's cookie consent decision.

    A decision older than the TTL counts as never made, so the banner is
    shown again.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_CONSENT_TTL_MS,
        clock: Clock = now_ms,
    ) -> None:
        self.clock = clock
        self._record: TTLRecord[StoredConsent] = TTLRecord(
            store,
            CONSENT_STORAGE_KEY,
            StoredConsent,
            max_age_ms=ttl_ms,
            timestamp_field="timestamp",
            clock=clock,
        )

    def get(self) -> StoredConsent | None:
        return self._record.load()

    def save(self, preferences: CookiePreferences) -> StoredConsent:
        consent = StoredConsent(preferences=preferences, timestamp=self.clock(), version=CONSENT_VERSION)
        self._record.save(consent)
        logger.info(
            "Recorded cookie consent analytics=%s marketing=%s preferences=%s",
            preferences.analytics,
            preferences.marketing,
            preferences.preferences,
        )
        return consent

    def accept_all(self) -> StoredConsent:
        return self.save(CookiePreferences(analytics=True, marketing=True, preferences=True))

    def decline_all(self) -> StoredConsent:
        return self.save(CookiePreferences())

    def clear(self) -> None:
        self._record.clear()
