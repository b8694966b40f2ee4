"""Unit tests for recovery banner selection."""

from typing import Any
from unittest.mock import patch

import pytest

from interlock.core.storage import InMemoryKeyValueStore
from interlock.models.wizard import Step
from interlock.schemas.checkout import CheckoutProgress, GuestInfo
from interlock.schemas.recovery import ExitOffer, RecoverySurface
from interlock.schemas.session import PuzzleSession, ShippingInfo
from interlock.services.personalization_service import PersonalizationService
from interlock.services.progress_persistence import ProgressPersistence
from interlock.services.recovery_email_service import RecoveryEmailService
from interlock.services.recovery_presenter import RecoveryPresenter, select_exit_offer, select_recovery_surface
from interlock.services.session_repository import SessionRepository

NOW = 1_700_000_000_000

SHIPPING = ShippingInfo(
    full_name="Sam Rivera",
    email="sam@example.com",
    address="1 Main St",
    city="Portland",
    state="OR",
    zip_code="97201",
)


def _session(**overrides: Any) -> PuzzleSession:
    data: dict[str, Any] = {"id": "s", "created_at": NOW, "updated_at": NOW}
    data.update(overrides)
    return PuzzleSession(**data)


def _progress(**data: Any) -> CheckoutProgress:
    return CheckoutProgress(step=0, timestamp=NOW, data=GuestInfo(**data))


class TestSelectRecoverySurface:
    """Tests for the pure priority function."""

    def test_abandoned_cart_beats_everything(self) -> None:
        """Test that a draft with shapes and no shipping is an abandoned cart."""
        surface = select_recovery_surface(_session(selected_shapes=["heart"]), _progress(email="a@b.c"), 5)

        assert surface is RecoverySurface.ABANDONED_CART

    def test_draft_with_shipping_is_not_abandoned(self) -> None:
        """Test that reaching checkout takes the draft out of cart recovery."""
        session = _session(selected_shapes=["heart"], shipping_info=SHIPPING)

        assert select_recovery_surface(session, None, 3) is RecoverySurface.RETURNING_VISITOR

    def test_checkout_progress_before_returning_visitor(self) -> None:
        """Test that saved guest fields take priority over a welcome back."""
        surface = select_recovery_surface(None, _progress(first_name="Sam"), 3)

        assert surface is RecoverySurface.CHECKOUT_PROGRESS

    def test_empty_checkout_progress_is_ignored(self) -> None:
        """Test that progress without any guest data does not count."""
        assert select_recovery_surface(None, _progress(email=""), 1) is RecoverySurface.NONE

    @pytest.mark.parametrize(
        ("visit_count", "expected"),
        [(0, RecoverySurface.NONE), (1, RecoverySurface.NONE), (2, RecoverySurface.RETURNING_VISITOR)],
    )
    def test_visit_count(self, visit_count: int, expected: RecoverySurface) -> None:
        """Test that only a second or later visit is a returning visitor."""
        assert select_recovery_surface(_session(), None, visit_count) is expected


class TestSelectExitOffer:
    """Tests for the exit popup variant."""

    @pytest.mark.parametrize(
        ("has_cart_items", "current_step", "is_first_time_visitor", "expected"),
        [
            (True, Step.SHAPES, True, ExitOffer.CART_REMINDER),
            (True, Step.HOME, True, ExitOffer.DISCOUNT),
            (False, Step.HOME, True, ExitOffer.DISCOUNT),
            (False, Step.HOME, False, ExitOffer.FEEDBACK),
            (False, Step.TIER, False, ExitOffer.DISCOUNT),
        ],
    )
    def test_offer(
        self, has_cart_items: bool, current_step: Step, is_first_time_visitor: bool, expected: ExitOffer
    ) -> None:
        """Test the popup variant for each visitor situation."""
        assert select_exit_offer(has_cart_items, current_step, is_first_time_visitor) is expected


class TestRecoveryPresenter:
    """Tests for gathering inputs from the stores."""

    @pytest.fixture
    def presenter(self, store: InMemoryKeyValueStore, clock: Any) -> RecoveryPresenter:
        """Create a presenter over the test medium."""
        return RecoveryPresenter(
            SessionRepository(store, clock=clock),
            ProgressPersistence(store, debounce_seconds=0, clock=clock),
            PersonalizationService(store, clock=clock),
            RecoveryEmailService(store, clock=clock),
        )

    def test_nothing_stored(self, presenter: RecoveryPresenter) -> None:
        """Test that a first-time visitor with nothing saved gets no banner."""
        decision = presenter.decide()

        assert decision.surface is RecoverySurface.NONE
        assert decision.resume_step is None
        assert decision.visit_count == 0
        assert decision.has_recovery_email is False

    def test_abandoned_cart_carries_resume_step(self, presenter: RecoveryPresenter, clock: Any) -> None:
        """Test that the decision says where the draft would resume."""
        session = PuzzleSession(
            id="s",
            tier="essential",
            selected_shapes=["heart", "star", "moon", "key", "leaf"],
            created_at=clock(),
            updated_at=clock() + 10,
        )
        presenter.repository.save(session)

        decision = presenter.decide()

        assert decision.surface is RecoverySurface.ABANDONED_CART
        assert decision.resume_step is Step.IMAGE
        assert decision.last_saved_at == clock() + 10

    def test_checkout_progress_carries_timestamp(self, presenter: RecoveryPresenter, clock: Any) -> None:
        """Test that the decision reports when checkout fields were saved."""
        presenter.progress.save(1, GuestInfo(email="sam@example.com"))

        decision = presenter.decide()

        assert decision.surface is RecoverySurface.CHECKOUT_PROGRESS
        assert decision.last_saved_at == clock()

    def test_reports_stored_recovery_email(self, presenter: RecoveryPresenter, clock: Any) -> None:
        """Test that the banner is told a reminder address already exists."""
        presenter.repository.save(_session(selected_shapes=["heart"], created_at=clock(), updated_at=clock()))
        presenter.recovery_email.save("sam@example.com")

        decision = presenter.decide()

        assert decision.surface is RecoverySurface.ABANDONED_CART
        assert decision.has_recovery_email is True

    def test_returning_visitor(self, presenter: RecoveryPresenter) -> None:
        """Test that the visit count comes from the personalization record."""
        presenter.personalization.record_visit()
        presenter.personalization.record_visit()

        assert presenter.decide().surface is RecoverySurface.RETURNING_VISITOR

    def test_decide_is_idempotent_and_read_only(
        self, presenter: RecoveryPresenter, store: InMemoryKeyValueStore, clock: Any
    ) -> None:
        """Test that deciding twice gives the same answer and writes nothing."""
        presenter.repository.save(_session(selected_shapes=["heart"], created_at=clock(), updated_at=clock()))
        presenter.personalization.record_visit()

        with patch.object(store, "set", wraps=store.set) as set_spy, patch.object(
            store, "remove", wraps=store.remove
        ) as remove_spy:
            first = presenter.decide()
            second = presenter.decide()

        assert first == second
        set_spy.assert_not_called()
        remove_spy.assert_not_called()
