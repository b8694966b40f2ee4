"""Cookie consent API routes."""

from fastapi import APIRouter, status

from interlock.api.deps import Consent
from interlock.api.middleware.error_handler import NotFoundError, ValidationError
from interlock.schemas.consent import ConsentUpdate, StoredConsent

router = APIRouter(prefix="/consent", tags=["consent"])


@router.get(
    "",
    response_model=StoredConsent,
    summary="Get cookie consent",
    description="Returns the visitor's consent decision. 404 means the banner should be shown.",
    responses={404: {"description": "No decision recorded, or the decision has expired"}},
)
async def get_consent(consent: Consent) -> StoredConsent:
    """Get the stored consent decision.

    Args:
        consent: Consent service.

    Returns:
        StoredConsent: The decision, if younger than the consent TTL.

    Raises:
        NotFoundError: If no valid decision is stored.
    """
    stored = consent.get()
    if stored is None:
        raise NotFoundError("No cookie consent recorded")
    return stored


@router.put(
    "",
    response_model=StoredConsent,
    summary="Record cookie consent",
)
async def save_consent(data: ConsentUpdate, consent: Consent) -> StoredConsent:
    """Record a consent decision.

    Args:
        data: Explicit preferences or an accept/decline shortcut.
        consent: Consent service.

    Returns:
        StoredConsent: The recorded decision.

    Raises:
        ValidationError: If the request is empty or contradictory.
    """
    if data.accept_all and data.decline_all:
        raise ValidationError("accept_all and decline_all are mutually exclusive")
    if data.accept_all:
        return consent.accept_all()
    if data.decline_all:
        return consent.decline_all()
    if data.preferences is None:
        raise ValidationError("preferences, accept_all or decline_all is required")
    return consent.save(data.preferences)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="Forget cookie consent")
async def clear_consent(consent: Consent) -> None:
    consent.clear()
