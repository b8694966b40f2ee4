"""Choose which recovery banner, if any, to request on mount.

Pure selection logic: nothing here renders, and nothing here writes to any
store, so evaluating a decision twice yields the same answer.
"""

import logging

from interlock.models.wizard import Step
from interlock.schemas.checkout import CheckoutProgress
from interlock.schemas.recovery import ExitOffer, RecoveryDecision, RecoverySurface
from interlock.schemas.session import PuzzleSession
from interlock.services.personalization_service import PersonalizationService
from interlock.services.progress_persistence import ProgressPersistence
from interlock.services.recovery_email_service import RecoveryEmailService
from interlock.services.resumption_planner import is_resumable, plan
from interlock.services.session_repository import SessionRepository

logger = logging.getLogger(__name__)


def select_recovery_surface(
    session: PuzzleSession | None,
    checkout_progress: CheckoutProgress | None,
    visit_count: int,
) -> RecoverySurface:
    """Pick the banner for a valid session, checkout progress and visit count.

    Priority: abandoned cart, then saved checkout fields, then returning
    visitor, then nothing.
    """
    if session is not None and session.shipping_info is None and session.selected_shapes:
        return RecoverySurface.ABANDONED_CART
    if checkout_progress is not None and not checkout_progress.data.is_empty:
        return RecoverySurface.CHECKOUT_PROGRESS
    if visit_count > 1:
        return RecoverySurface.RETURNING_VISITOR
    return RecoverySurface.NONE


def select_exit_offer(has_cart_items: bool, current_step: Step, is_first_time_visitor: bool) -> ExitOffer:
    """Pick the exit-intent popup variant."""
    if has_cart_items and current_step is not Step.HOME:
        return ExitOffer.CART_REMINDER
    if not is_first_time_visitor and current_step is Step.HOME:
        return ExitOffer.FEEDBACK
    return ExitOffer.DISCOUNT


class RecoveryPresenter:
    """Gathers recovery inputs from the stores and decides."""

    def __init__(
        self,
        repository: SessionRepository,
        progress: ProgressPersistence,
        personalization: PersonalizationService,
        recovery_email: RecoveryEmailService,
    ) -> None:
        self.repository = repository
        self.progress = progress
        self.personalization = personalization
        self.recovery_email = recovery_email

    def decide(self) -> RecoveryDecision:
        session = self.repository.load()
        checkout_progress = self.progress.load()
        visit_count = self.personalization.load().visit_count

        surface = select_recovery_surface(session, checkout_progress, visit_count)

        resume_step: Step | None = None
        last_saved_at: int | None = None
        if surface is RecoverySurface.ABANDONED_CART and session is not None:
            resume_step = plan(session) if is_resumable(session) else None
            last_saved_at = session.updated_at
        elif surface is RecoverySurface.CHECKOUT_PROGRESS and checkout_progress is not None:
            last_saved_at = checkout_progress.timestamp

        logger.debug("Recovery surface: %s", surface.value)
        return RecoveryDecision(
            surface=surface,
            resume_step=resume_step,
            last_saved_at=last_saved_at,
            visit_count=visit_count,
            has_recovery_email=self.recovery_email.load() is not None,
        )
