"""Persistence of the primary draft session."""

import logging

from interlock.core.clock import Clock, now_ms
from interlock.core.config import MS_PER_HOUR
from interlock.core.storage import KeyValueStore
from interlock.core.ttl_record import TTLRecord
from interlock.schemas.session import PuzzleSession

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "interlock_puzzle_session"
DEFAULT_SESSION_TTL_MS = 24 * MS_PER_HOUR


def _is_resumable(session: PuzzleSession) -> bool:
    return not session.order_complete


class SessionRepository:
    """Save, load and clear the one draft session on this device.

    Absent key, corrupt JSON, age past the TTL and a completed order all load
    as None; callers cannot tell them apart. Storage failures are logged and
    swallowed.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_SESSION_TTL_MS,
        clock: Clock = now_ms,
    ) -> None:
        """Initialize the repository.

        Args:
            store: Persistent medium.
            ttl_ms: Maximum age measured from the session's createdAt.
            clock: Millisecond clock.
        """
        self._record: TTLRecord[PuzzleSession] = TTLRecord(
            store,
            SESSION_STORAGE_KEY,
            PuzzleSession,
            max_age_ms=ttl_ms,
            timestamp_field="created_at",
            is_valid=_is_resumable,
            clock=clock,
        )

    def save(self, session: PuzzleSession) -> None:
        """Write the session through to the medium."""
        self._record.save(session)
        logger.debug("Saved session %s", session.id)

    def load(self) -> PuzzleSession | None:
        """Load the session if it exists, parses, is fresh and is not completed."""
        return self._record.load()

    def clear(self) -> None:
        """Delete the stored session; failures count as already cleared."""
        self._record.clear()
        logger.debug("Cleared stored session")
