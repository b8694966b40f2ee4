"""Checkout progress API routes."""

import logging

from fastapi import APIRouter, status

from interlock.api.deps import Progress
from interlock.schemas.checkout import CheckoutProgressResponse, CheckoutProgressUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.get(
    "/progress",
    response_model=CheckoutProgressResponse,
    summary="Get checkout progress",
    description="Returns saved guest-checkout fields younger than the progress TTL.",
)
async def get_progress(progress: Progress) -> CheckoutProgressResponse:
    """Get saved checkout progress.

    A record that is missing, unreadable or expired is reported as null.

    Args:
        progress: Checkout progress persistence.

    Returns:
        CheckoutProgressResponse: Saved progress and whether an edit is still pending.
    """
    return CheckoutProgressResponse(progress=progress.load(), pending_write=progress.pending)


@router.put(
    "/progress",
    response_model=CheckoutProgressResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Save checkout progress",
    description="Records an edit. Rapid edits are coalesced and only the last one is written.",
)
async def save_progress(data: CheckoutProgressUpdate, progress: Progress) -> CheckoutProgressResponse:
    """Record a checkout edit.

    Args:
        data: Current sub-step and guest fields.
        progress: Checkout progress persistence.

    Returns:
        CheckoutProgressResponse: The record that will be written.
    """
    record = progress.save(data.step, data.data)
    return CheckoutProgressResponse(progress=record, pending_write=progress.pending)


@router.post(
    "/progress/flush",
    response_model=CheckoutProgressResponse,
    summary="Flush checkout progress",
    description="Writes a pending edit now instead of waiting for the debounce window.",
)
async def flush_progress(progress: Progress) -> CheckoutProgressResponse:
    if progress.flush():
        logger.debug("Flushed pending checkout progress")
    return CheckoutProgressResponse(progress=progress.load(), pending_write=progress.pending)


@router.delete(
    "/progress",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear checkout progress",
)
async def clear_progress(progress: Progress) -> None:
    progress.clear()
