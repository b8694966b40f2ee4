"""Unit tests for SessionRepository."""

from typing import Any

from interlock.core.storage import InMemoryKeyValueStore
from interlock.schemas.session import PuzzleSession
from interlock.services.session_repository import SESSION_STORAGE_KEY, SessionRepository

HOUR_MS = 60 * 60 * 1000


def _session(created_at: int, **overrides: Any) -> PuzzleSession:
    data: dict[str, Any] = {
        "id": "session-1",
        "tier": "classic",
        "selected_shapes": ["heart", "star"],
        "created_at": created_at,
        "updated_at": created_at,
    }
    data.update(overrides)
    return PuzzleSession(**data)


class TestSaveAndLoad:
    """Tests for save/load round trips."""

    def test_idempotent_save(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that saving twice in a row loads the second save's input."""
        repository = SessionRepository(store, clock=clock)
        first = _session(clock())
        second = _session(clock(), selected_shapes=["heart", "star", "moon"], updated_at=clock() + 5)

        repository.save(first)
        repository.save(second)

        assert repository.load() == second

    def test_stored_with_camel_case_keys(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that the persisted JSON uses camelCase field names and integer ms."""
        SessionRepository(store, clock=clock).save(_session(clock()))

        raw = store.get(SESSION_STORAGE_KEY)
        assert raw is not None
        assert '"selectedShapes"' in raw
        assert f'"createdAt":{clock()}' in raw

    def test_load_absent_returns_none(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that an empty medium loads as None."""
        assert SessionRepository(store, clock=clock).load() is None

    def test_corrupt_record_returns_none(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that malformed JSON loads as absence instead of raising."""
        store.set(SESSION_STORAGE_KEY, '{"id": "x", "selectedShapes": 3')

        assert SessionRepository(store, clock=clock).load() is None

    def test_inconsistent_record_returns_none(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a record no wizard action could produce loads as absence."""
        store.set(
            SESSION_STORAGE_KEY,
            '{"id": "x", "tier": "essential", "selectedShapes": ["a","b","c","d","e","f"],'
            f' "createdAt": {clock()}, "updatedAt": {clock()}}}',
        )

        assert SessionRepository(store, clock=clock).load() is None


class TestExpiry:
    """Tests for the 24 hour lifetime."""

    def test_session_older_than_ttl_is_absent(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a session created 25h ago loads as absent."""
        repository = SessionRepository(store, clock=clock)
        repository.save(_session(clock() - 25 * HOUR_MS))

        assert repository.load() is None

    def test_session_younger_than_ttl_is_present(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a session created 23h ago loads."""
        repository = SessionRepository(store, clock=clock)
        repository.save(_session(clock() - 23 * HOUR_MS))

        assert repository.load() is not None

    def test_ttl_measured_from_creation(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a recent update does not extend the lifetime."""
        repository = SessionRepository(store, clock=clock)
        repository.save(_session(clock() - 25 * HOUR_MS, updated_at=clock()))

        assert repository.load() is None


class TestCompletion:
    """Tests for completed orders."""

    def test_completed_session_is_absent(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that a saved session with orderComplete loads as absent."""
        repository = SessionRepository(store, clock=clock)
        repository.save(_session(clock(), order_complete=True))

        assert repository.load() is None

    def test_clear_removes_session(self, store: InMemoryKeyValueStore, clock: Any) -> None:
        """Test that clear deletes the record."""
        repository = SessionRepository(store, clock=clock)
        repository.save(_session(clock()))

        repository.clear()

        assert store.get(SESSION_STORAGE_KEY) is None
        assert repository.load() is None

    def test_save_on_full_medium_does_not_raise(self, clock: Any) -> None:
        """Test that a quota failure is swallowed."""
        store = InMemoryKeyValueStore(quota_chars=10)
        repository = SessionRepository(store, clock=clock)

        repository.save(_session(clock()))

        assert repository.load() is None
