"""Wizard API request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interlock.models.tier import PuzzleTier
from interlock.models.wizard import Step
from interlock.schemas.session import HintCard, PackagingOptions, PartnerInvitation, PuzzleSession, ShippingInfo


class _WizardModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WizardStateResponse(_WizardModel):
    """Current step and draft snapshot, returned by every wizard endpoint.

    ``accepted`` is False when the controller ignored the request because a
    guard did not hold; the state is returned unchanged in that case.
    """

    step: Step = Field(description="Current wizard step")
    session: PuzzleSession | None = Field(default=None, description="Draft snapshot")
    accepted: bool = Field(default=True, description="Whether the request changed anything")
    order_number: str | None = Field(default=None, description="Set once the order is complete")


class TierSelection(_WizardModel):
    """Schema for POST /wizard/tier."""

    tier: PuzzleTier = Field(description="Tier to select")


class ShapeToggle(_WizardModel):
    """Schema for POST /wizard/shapes/toggle."""

    shape_id: str = Field(min_length=1, description="Shape to add or remove")


class ShapeSelection(_WizardModel):
    """Schema for POST /wizard/shapes."""

    shapes: list[str] = Field(description="Ordered shape ids, replacing the current selection")
    meanings: dict[str, str] | None = Field(default=None, description="Optional notes per shape")


class ShapeMeaningUpdate(_WizardModel):
    """Schema for POST /wizard/shapes/meaning."""

    shape_id: str = Field(min_length=1, description="Selected shape to annotate")
    meaning: str = Field(default="", max_length=200, description="Note; blank removes it")


class InvitationCreate(_WizardModel):
    """Schema for POST /wizard/partner/invite."""

    invitation: PartnerInvitation = Field(description="Invitation that was sent")


class PhotoChoice(_WizardModel):
    """Schema for POST /wizard/image/photo."""

    photo_url: str = Field(min_length=1, description="Uploaded photo location")


class ColorChoice(_WizardModel):
    """Schema for POST /wizard/image/colors."""

    color_assignments: dict[str, str] = Field(description="Colour per selected shape")


class HintCardsUpdate(_WizardModel):
    """Schema for POST /wizard/hints."""

    hint_cards: list[HintCard] = Field(default_factory=list, description="Hint cards, replacing the current set")


class PackagingUpdate(_WizardModel):
    """Schema for POST /wizard/packaging."""

    packaging: PackagingOptions = Field(description="Packaging choices")


class ShippingUpdate(_WizardModel):
    """Schema for POST /wizard/shipping."""

    shipping_info: ShippingInfo = Field(description="Shipping address")
