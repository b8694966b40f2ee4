"""Long-lived visitor personalization record."""

import logging

from interlock.core.clock import Clock, now_ms
from interlock.core.storage import KeyValueStore
from interlock.core.ttl_record import TTLRecord
from interlock.schemas.personalization import UserPreferences

logger = logging.getLogger(__name__)

PERSONALIZATION_STORAGE_KEY = "interlock_user_prefs"


class PersonalizationService:
    """Visit counts, viewed items and abandonment markers. Never expires."""

    def __init__(self, store: KeyValueStore, clock: Clock = now_ms) -> None:
        self.clock = clock
        self._record: TTLRecord[UserPreferences] = TTLRecord(
            store,
            PERSONALIZATION_STORAGE_KEY,
            UserPreferences,
            max_age_ms=None,
            timestamp_field=None,
            clock=clock,
        )

    def load(self) -> UserPreferences:
        """Stored preferences, or defaults for a first-time visitor."""
        return self._record.load() or UserPreferences()

    def record_visit(self) -> UserPreferences:
        """Count a new visit."""
        prefs = self.load()
        now = self.clock()
        return self._save(
            prefs.model_copy(
                update={
                    "visit_count": prefs.visit_count + 1,
                    "first_visit_at": prefs.first_visit_at or now,
                    "last_visit_at": now,
                }
            )
        )

    def track_tier_view(self, tier: str) -> UserPreferences:
        prefs = self.load()
        viewed = prefs.viewed_tiers if tier in prefs.viewed_tiers else [*prefs.viewed_tiers, tier]
        return self._save(prefs.model_copy(update={"viewed_tiers": viewed, "preferred_tier": tier}))

    def track_shape_view(self, shape_id: str) -> UserPreferences:
        prefs = self.load()
        viewed = prefs.viewed_shapes if shape_id in prefs.viewed_shapes else [*prefs.viewed_shapes, shape_id]
        return self._save(prefs.model_copy(update={"viewed_shapes": viewed, "preferred_shape": shape_id}))

    def track_cart_abandonment(self, tier: str, step: str) -> UserPreferences:
        """Mark the current draft as abandoned at ``step``."""
        prefs = self.load()
        return self._save(
            prefs.model_copy(
                update={
                    "cart_abandoned": True,
                    "abandoned_at": self.clock(),
                    "abandoned_tier": tier,
                    "abandoned_step": step,
                }
            )
        )

    def clear_cart_abandonment(self) -> UserPreferences:
        prefs = self.load()
        return self._save(
            prefs.model_copy(
                update={
                    "cart_abandoned": False,
                    "abandoned_at": None,
                    "abandoned_tier": None,
                    "abandoned_step": None,
                }
            )
        )

    def track_conversion(self) -> UserPreferences:
        """Record a completed order; clears any abandonment marker."""
        prefs = self.load()
        return self._save(
            prefs.model_copy(
                update={
                    "has_converted": True,
                    "conversion_at": self.clock(),
                    "order_count": prefs.order_count + 1,
                    "cart_abandoned": False,
                    "abandoned_at": None,
                    "abandoned_tier": None,
                    "abandoned_step": None,
                }
            )
        )

    def _save(self, prefs: UserPreferences) -> UserPreferences:
        self._record.save(prefs)
        return prefs
