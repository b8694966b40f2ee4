"""Checkout sub-flow Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GuestInfo(BaseModel):
    """Partially filled guest-contact fields.

    Every field is optional: the record is saved while the user is still typing.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str | None = Field(default=None, description="Guest email")
    first_name: str | None = Field(default=None, description="Guest first name")
    last_name: str | None = Field(default=None, description="Guest last name")
    marketing_opt_in: bool | None = Field(default=None, description="Marketing consent checkbox")

    @property
    def is_empty(self) -> bool:
        return not any(value not in (None, "") for value in self.model_dump().values())


class CheckoutProgress(BaseModel):
    """Persisted checkout progress, last write wins."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    step: int = Field(ge=0, description="Sub-step within checkout")
    timestamp: int = Field(ge=0, description="Write time in ms since epoch")
    data: GuestInfo = Field(default_factory=GuestInfo, description="Guest fields entered so far")


class CheckoutProgressUpdate(BaseModel):
    """Schema for saving checkout progress via PUT /checkout/progress."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    step: int = Field(ge=0, description="Sub-step within checkout")
    data: GuestInfo = Field(default_factory=GuestInfo, description="Guest fields entered so far")


class CheckoutProgressResponse(BaseModel):
    """Schema for GET /checkout/progress."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    progress: CheckoutProgress | None = Field(default=None, description="Saved progress, if any")
    pending_write: bool = Field(default=False, description="Whether a debounced write is still waiting")
