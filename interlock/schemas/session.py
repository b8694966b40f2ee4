"""Puzzle draft session Pydantic schemas.

These models are both the persisted record format (camelCase JSON, integer
millisecond timestamps) and the snapshot handed to rendering components.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from interlock.models.tier import DEFAULT_TIER, PuzzleTier, get_tier_config

ImageChoice = Literal["photo", "comfy-colors"]

BoxType = Literal["standard", "premium"]
WaxSealColor = Literal["gold", "burgundy", "forest", "navy"]
BoxPattern = Literal["solid", "constellation", "botanical", "geometric"]

HintPromptType = Literal["fill-in-blank", "memory", "emotion", "location"]

InvitationStatus = Literal["pending", "accepted", "completed", "expired"]


class HintPrompt(BaseModel):
    """A single fill-in prompt on a hint card."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(description="Prompt identifier")
    type: HintPromptType = Field(description="Prompt style")
    template: str = Field(description="Prompt template, e.g. 'The place where we ____'")
    user_input: str = Field(default="", description="The user's answer")
    character_limit: int = Field(default=100, gt=0, description="Maximum answer length")


class HintCard(BaseModel):
    """A hint card shipped in the box."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(description="Card identifier")
    title: str = Field(description="Card title")
    prompts: list[HintPrompt] = Field(default_factory=list, description="Prompts on the card")
    shapes_referenced: list[str] | None = Field(default=None, description="Shapes the card alludes to")


class PartnerInvitation(BaseModel):
    """Out-of-band invite asking a partner to contribute shapes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(description="Invitation identifier")
    share_link: str = Field(description="Link sent to the partner")
    partner_name: str = Field(min_length=1, description="Partner display name")
    partner_email: str | None = Field(default=None, description="Partner email, if given")
    status: InvitationStatus = Field(default="pending", description="Invitation state")
    sent_at: int = Field(description="Send time in ms since epoch")
    expires_at: int = Field(description="Expiry time in ms since epoch")
    person_a_shapes: list[str] = Field(default_factory=list, description="Shapes picked by the inviter")
    person_b_shapes: list[str] = Field(default_factory=list, description="Shapes picked by the partner")


class PackagingOptions(BaseModel):
    """Box, seal and pattern choices."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    box: BoxType = Field(default="standard", description="Box type")
    wax_seal: bool = Field(default=False, description="Whether a wax seal is applied")
    wax_color: WaxSealColor | None = Field(default=None, description="Wax seal colour")
    pattern: BoxPattern = Field(default="solid", description="Box pattern")


class ShippingInfo(BaseModel):
    """Shipping address collected at checkout."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    full_name: str = Field(min_length=1, description="Recipient name")
    email: str = Field(min_length=3, description="Contact email")
    address: str = Field(min_length=1, description="Street address")
    city: str = Field(min_length=1, description="City")
    state: str = Field(min_length=1, description="State or region")
    zip_code: str = Field(min_length=1, description="Postal code")


class PuzzleSession(BaseModel):
    """The in-progress product configuration.

    One per device. Only the wizard controller creates modified copies; every
    other reader treats an instance as an immutable snapshot.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1, description="Opaque session identifier")
    tier: PuzzleTier = Field(default=DEFAULT_TIER, description="Product tier")
    selected_shapes: list[str] = Field(default_factory=list, description="Ordered shape ids")
    shape_meanings: dict[str, str] = Field(default_factory=dict, description="Notes keyed by annotated shape")
    partner_invitation: PartnerInvitation | None = Field(default=None, description="Partner invite; absent means skipped")
    image_choice: ImageChoice = Field(default="photo", description="Image discriminator")
    photo_url: str | None = Field(default=None, description="Uploaded photo, when image_choice is photo")
    color_assignments: dict[str, str] | None = Field(
        default=None,
        description="Colour per shape, when image_choice is comfy-colors",
    )
    hint_cards: list[HintCard] = Field(default_factory=list, description="Hint cards")
    packaging: PackagingOptions = Field(default_factory=PackagingOptions, description="Packaging choices")
    shipping_info: ShippingInfo | None = Field(default=None, description="Present once checkout is reached")
    order_complete: bool = Field(default=False, description="Set once the order is submitted")
    created_at: int = Field(ge=0, description="Creation time in ms since epoch")
    updated_at: int = Field(ge=0, description="Last mutation time in ms since epoch")

    @model_validator(mode="after")
    def check_consistency(self) -> "PuzzleSession":
        """Reject records that no sequence of wizard actions could produce."""
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt precedes createdAt")

        tier = get_tier_config(self.tier)
        if len(self.selected_shapes) > tier["shape_quota"]:
            raise ValueError(f"{self.tier} tier allows at most {tier['shape_quota']} shapes")
        if len(self.hint_cards) > tier["hint_card_quota"]:
            raise ValueError(f"{self.tier} tier allows at most {tier['hint_card_quota']} hint cards")

        if self.image_choice == "photo" and self.color_assignments is not None:
            raise ValueError("colorAssignments set while imageChoice is photo")
        if self.image_choice == "comfy-colors" and self.photo_url is not None:
            raise ValueError("photoUrl set while imageChoice is comfy-colors")

        return self

    @property
    def has_image(self) -> bool:
        """Whether the chosen image option carries its data."""
        if self.image_choice == "photo":
            return bool(self.photo_url)
        return bool(self.color_assignments)


def create_default_session(session_id: str, now: int) -> PuzzleSession:
    """Build a fresh draft with default tier and packaging."""
    return PuzzleSession(id=session_id, created_at=now, updated_at=now)
