"""Wizard API routes.

Every endpoint returns the resulting step and draft snapshot. A request the
controller ignores because a guard did not hold still returns 200, with
``accepted`` set to False.
"""

from fastapi import APIRouter

from interlock.api.deps import Controller, Personalization
from interlock.schemas.wizard import (
    ColorChoice,
    HintCardsUpdate,
    InvitationCreate,
    PackagingUpdate,
    PhotoChoice,
    ShapeMeaningUpdate,
    ShapeSelection,
    ShapeToggle,
    ShippingUpdate,
    TierSelection,
    WizardStateResponse,
)
from interlock.services.wizard_controller import WizardController

router = APIRouter(prefix="/wizard", tags=["wizard"])


def _state(controller: WizardController, accepted: bool = True) -> WizardStateResponse:
    return WizardStateResponse(
        step=controller.step,
        session=controller.session,
        accepted=accepted,
        order_number=controller.order_number,
    )


@router.get(
    "",
    response_model=WizardStateResponse,
    summary="Get wizard state",
    description="Returns the current step and draft session snapshot.",
)
async def get_wizard_state(controller: Controller) -> WizardStateResponse:
    """Get the current step and session snapshot.

    Args:
        controller: Wizard controller.

    Returns:
        WizardStateResponse: Current state.
    """
    return _state(controller)


@router.post(
    "/start",
    response_model=WizardStateResponse,
    summary="Start a new draft",
    description="Moves from home to tier selection with a fresh draft session.",
)
async def start(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.start())


@router.post("/tier", response_model=WizardStateResponse, summary="Select a tier")
async def select_tier(
    data: TierSelection,
    controller: Controller,
    personalization: Personalization,
) -> WizardStateResponse:
    """Select a tier, trimming shapes and hint cards to its quotas.

    Args:
        data: Tier to select.
        controller: Wizard controller.
        personalization: Visitor preferences, updated with the viewed tier.

    Returns:
        WizardStateResponse: Resulting state.
    """
    accepted = controller.select_tier(data.tier)
    if accepted:
        personalization.track_tier_view(data.tier)
    return _state(controller, accepted)


@router.post("/tier/continue", response_model=WizardStateResponse, summary="Continue to shapes")
async def continue_to_shapes(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.continue_to_shapes())


@router.post("/shapes", response_model=WizardStateResponse, summary="Replace the shape selection")
async def set_shapes(data: ShapeSelection, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.set_shapes(data.shapes, data.meanings))


@router.post("/shapes/toggle", response_model=WizardStateResponse, summary="Toggle one shape")
async def toggle_shape(
    data: ShapeToggle,
    controller: Controller,
    personalization: Personalization,
) -> WizardStateResponse:
    accepted = controller.toggle_shape(data.shape_id)
    if accepted:
        personalization.track_shape_view(data.shape_id)
    return _state(controller, accepted)


@router.post("/shapes/meaning", response_model=WizardStateResponse, summary="Annotate a shape")
async def set_shape_meaning(data: ShapeMeaningUpdate, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.set_shape_meaning(data.shape_id, data.meaning))


@router.post(
    "/shapes/finalize",
    response_model=WizardStateResponse,
    summary="Finalize shapes",
    description="Moves to the partner step once the tier's shape quota is filled.",
)
async def finalize_shapes(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.finalize_shapes())


@router.post("/partner/invite", response_model=WizardStateResponse, summary="Record a partner invitation")
async def create_invitation(data: InvitationCreate, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.create_invitation(data.invitation))


@router.post("/partner/skip", response_model=WizardStateResponse, summary="Skip the partner step")
async def skip_partner(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.skip_partner())


@router.post("/image/photo", response_model=WizardStateResponse, summary="Use an uploaded photo")
async def choose_photo(data: PhotoChoice, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.choose_photo(data.photo_url))


@router.post("/image/colors", response_model=WizardStateResponse, summary="Use comfy colours")
async def choose_colors(data: ColorChoice, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.choose_colors(data.color_assignments))


@router.post(
    "/image/continue",
    response_model=WizardStateResponse,
    summary="Continue to hints",
    description="Moves to the hints step once the chosen image option carries its data.",
)
async def continue_to_hints(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.continue_to_hints())


@router.post("/hints", response_model=WizardStateResponse, summary="Replace the hint cards")
async def set_hint_cards(data: HintCardsUpdate, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.set_hint_cards(data.hint_cards))


@router.post("/hints/continue", response_model=WizardStateResponse, summary="Continue to packaging")
async def continue_to_packaging(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.continue_to_packaging())


@router.post("/packaging", response_model=WizardStateResponse, summary="Set packaging options")
async def set_packaging(data: PackagingUpdate, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.set_packaging(data.packaging))


@router.post("/packaging/continue", response_model=WizardStateResponse, summary="Continue to checkout")
async def continue_to_checkout(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.continue_to_checkout())


@router.post("/shipping", response_model=WizardStateResponse, summary="Set shipping information")
async def set_shipping_info(data: ShippingUpdate, controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.set_shipping_info(data.shipping_info))


@router.post(
    "/complete",
    response_model=WizardStateResponse,
    summary="Complete the order",
    description="Marks the order complete after a successful submission and clears the stored draft.",
)
async def complete_order(controller: Controller, personalization: Personalization) -> WizardStateResponse:
    """Complete the order.

    Args:
        controller: Wizard controller.
        personalization: Visitor preferences, updated with the conversion.

    Returns:
        WizardStateResponse: Confirmation state with the order number, or the
            unchanged state if shipping information is missing.
    """
    order_number = controller.complete_order()
    if order_number is not None:
        personalization.track_conversion()
    return _state(controller, order_number is not None)


@router.post("/back", response_model=WizardStateResponse, summary="Go back one step")
async def back(controller: Controller) -> WizardStateResponse:
    return _state(controller, controller.back())


@router.post(
    "/start-over",
    response_model=WizardStateResponse,
    summary="Start over",
    description="Returns home from any step, discarding the draft and checkout progress.",
)
async def start_over(controller: Controller, personalization: Personalization) -> WizardStateResponse:
    accepted = controller.start_over()
    personalization.clear_cart_abandonment()
    return _state(controller, accepted)
