"""Recovery surface selection schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from interlock.models.wizard import Step


class RecoverySurface(str, Enum):
    """Banner the rendering layer is asked to show on mount."""

    ABANDONED_CART = "abandoned_cart"
    CHECKOUT_PROGRESS = "checkout_progress"
    RETURNING_VISITOR = "returning_visitor"
    NONE = "none"


class ExitOffer(str, Enum):
    """Content variant for the exit-intent popup."""

    CART_REMINDER = "cart_reminder"
    DISCOUNT = "discount"
    FEEDBACK = "feedback"


class RecoveryDecision(BaseModel):
    """Schema for GET /recovery."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    surface: RecoverySurface = Field(description="Banner to request")
    resume_step: Step | None = Field(default=None, description="Step a saved draft would resume at")
    last_saved_at: int | None = Field(default=None, description="Last write of the record behind the banner, ms")
    visit_count: int = Field(default=0, ge=0, description="Recorded visits")
    has_recovery_email: bool = Field(default=False, description="Whether a reminder address is already stored")


class ExitOfferRequest(BaseModel):
    """Schema for POST /recovery/exit-offer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_cart_items: bool = Field(default=False, description="Whether the draft holds any selection")
    current_step: Step = Field(default=Step.HOME, description="Step the visitor is leaving from")
    is_first_time_visitor: bool = Field(default=True, description="Whether this is the first visit")


class ExitOfferResponse(BaseModel):
    """Schema for the exit-offer decision."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    offer: ExitOffer = Field(description="Popup variant to render")


class PointerLeaveSignal(BaseModel):
    """Schema for POST /recovery/signals/pointer-leave."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    client_y: float = Field(description="Pointer y position relative to the viewport")
    left_window: bool = Field(default=True, description="False when the pointer moved onto another element")


class VisibilitySignal(BaseModel):
    """Schema for POST /recovery/signals/visibility."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    state: str = Field(description="Document visibility state, 'hidden' or 'visible'")


class ExitIntentStatus(BaseModel):
    """Schema for exit-intent signal responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_triggered: bool = Field(description="Whether exit intent fired during this page life")
    fired: bool = Field(default=False, description="Whether this signal caused the firing")
    signal: str | None = Field(default=None, description="Signal that fired, if any")
    suppressed_for_session: bool = Field(default=False, description="Whether the browsing session already saw it")


def _valid_email(value: str) -> str:
    value = value.strip()
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain:
        raise ValueError("Please enter a valid email address")
    return value


class RecoveryEmail(BaseModel):
    """Email left on the abandoned-cart banner for a reminder. Never expires."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = Field(min_length=3, max_length=255, description="Address to send the reminder to")
    captured_at: int = Field(ge=0, description="Capture time in ms since epoch")

    check_email = field_validator("email")(_valid_email)


class RecoveryEmailCapture(BaseModel):
    """Schema for PUT /recovery/email."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = Field(min_length=3, max_length=255, description="Address to send the reminder to")

    check_email = field_validator("email")(_valid_email)


class RecoveryEmailStatus(BaseModel):
    """Schema for recovery email responses. The address itself is not echoed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_recovery_email: bool = Field(description="Whether a reminder address is stored")
    captured_at: int | None = Field(default=None, description="Capture time in ms since epoch")
