"""Recovery banner and exit-intent API routes.

The rendering layer forwards raw pointer and visibility events here; the
detector decides whether they amount to a likely exit.
"""

from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, status

from interlock.api.deps import Detector, Presenter, RecoveryEmailStore
from interlock.schemas.recovery import (
    ExitIntentStatus,
    ExitOfferRequest,
    ExitOfferResponse,
    PointerLeaveSignal,
    RecoveryDecision,
    RecoveryEmailCapture,
    RecoveryEmailStatus,
    VisibilitySignal,
)
from interlock.services.exit_intent import (
    ExitIntentDetector,
    ExitSignal,
    PointerExitTrigger,
    VisibilityExitTrigger,
)
from interlock.services.recovery_presenter import select_exit_offer

router = APIRouter(prefix="/recovery", tags=["recovery"])


def _status(detector: ExitIntentDetector, fired: list[ExitSignal]) -> ExitIntentStatus:
    return ExitIntentStatus(
        has_triggered=detector.has_triggered,
        fired=bool(fired),
        signal=fired[0].value if fired else None,
        suppressed_for_session=detector.suppressed_for_session,
    )


@contextmanager
def _capture(detector: ExitIntentDetector) -> Iterator[list[ExitSignal]]:
    fired: list[ExitSignal] = []
    remove = detector.on_likely_exit(fired.append)
    try:
        yield fired
    finally:
        remove()


@router.get(
    "",
    response_model=RecoveryDecision,
    summary="Choose a recovery banner",
    description="Decides which recovery banner to request on mount. Reads only; calling it twice gives the same answer.",
)
async def get_recovery_decision(presenter: Presenter) -> RecoveryDecision:
    return presenter.decide()


@router.post(
    "/exit-offer",
    response_model=ExitOfferResponse,
    summary="Choose an exit-intent popup",
)
async def choose_exit_offer(data: ExitOfferRequest) -> ExitOfferResponse:
    return ExitOfferResponse(
        offer=select_exit_offer(data.has_cart_items, data.current_step, data.is_first_time_visitor)
    )


@router.post(
    "/signals/pointer-leave",
    response_model=ExitIntentStatus,
    summary="Report the pointer leaving the page",
)
async def pointer_leave(data: PointerLeaveSignal, detector: Detector) -> ExitIntentStatus:
    """Forward a pointer-leave event to the desktop trigger.

    Args:
        data: Pointer position and whether it left the window.
        detector: Exit-intent detector.

    Returns:
        ExitIntentStatus: Whether this event fired exit intent.
    """
    trigger = detector.trigger_of(PointerExitTrigger)
    with _capture(detector) as fired:
        if isinstance(trigger, PointerExitTrigger):
            trigger.pointer_leave(data.client_y, data.left_window)
    return _status(detector, fired)


@router.post(
    "/signals/pointer-enter",
    response_model=ExitIntentStatus,
    summary="Report the pointer re-entering the page",
)
async def pointer_enter(detector: Detector) -> ExitIntentStatus:
    trigger = detector.trigger_of(PointerExitTrigger)
    if isinstance(trigger, PointerExitTrigger):
        trigger.pointer_enter()
    return _status(detector, [])


@router.post(
    "/signals/visibility",
    response_model=ExitIntentStatus,
    summary="Report a page-visibility change",
)
async def visibility_changed(data: VisibilitySignal, detector: Detector) -> ExitIntentStatus:
    trigger = detector.trigger_of(VisibilityExitTrigger)
    with _capture(detector) as fired:
        if isinstance(trigger, VisibilityExitTrigger):
            trigger.visibility_changed(data.state)
    return _status(detector, fired)


@router.post(
    "/page",
    response_model=ExitIntentStatus,
    summary="Start a new page life",
    description="Re-arms exit intent for a new page load. The browsing-session suppression flag is kept.",
)
async def new_page(detector: Detector) -> ExitIntentStatus:
    detector.reset()
    return _status(detector, [])


@router.get(
    "/email",
    response_model=RecoveryEmailStatus,
    summary="Check for a reminder address",
    description="Tells the abandoned-cart banner whether to skip its email prompt. The address is not returned.",
)
async def get_recovery_email(recovery_email: RecoveryEmailStore) -> RecoveryEmailStatus:
    record = recovery_email.load()
    return RecoveryEmailStatus(
        has_recovery_email=record is not None,
        captured_at=record.captured_at if record is not None else None,
    )


@router.put(
    "/email",
    response_model=RecoveryEmailStatus,
    summary="Save a reminder address",
    description="Stores the email entered on the abandoned-cart banner, replacing any earlier one.",
)
async def save_recovery_email(data: RecoveryEmailCapture, recovery_email: RecoveryEmailStore) -> RecoveryEmailStatus:
    """Store the visitor's reminder address.

    Args:
        data: The address entered on the banner.
        recovery_email: Reminder address store.

    Returns:
        RecoveryEmailStatus: Confirmation without the address itself.
    """
    record = recovery_email.save(data.email)
    return RecoveryEmailStatus(has_recovery_email=True, captured_at=record.captured_at)


@router.delete(
    "/email",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Forget the reminder address",
)
async def clear_recovery_email(recovery_email: RecoveryEmailStore) -> None:
    recovery_email.clear()
