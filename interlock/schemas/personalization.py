"""Long-lived visitor personalization record."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserPreferences(BaseModel):
    """Visit history and abandonment markers. Never expires."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    visit_count: int = Field(default=0, ge=0, description="Number of recorded visits")
    first_visit_at: int | None = Field(default=None, description="First visit in ms since epoch")
    last_visit_at: int | None = Field(default=None, description="Latest visit in ms since epoch")
    viewed_tiers: list[str] = Field(default_factory=list, description="Tiers looked at, first view order")
    preferred_tier: str | None = Field(default=None, description="Most recently viewed tier")
    viewed_shapes: list[str] = Field(default_factory=list, description="Shapes looked at, first view order")
    preferred_shape: str | None = Field(default=None, description="Most recently viewed shape")
    cart_abandoned: bool = Field(default=False, description="Whether a draft was left unfinished")
    abandoned_at: int | None = Field(default=None, description="Abandonment time in ms since epoch")
    abandoned_tier: str | None = Field(default=None, description="Tier of the abandoned draft")
    abandoned_step: str | None = Field(default=None, description="Step the draft was abandoned at")
    has_converted: bool = Field(default=False, description="Whether an order was ever completed")
    conversion_at: int | None = Field(default=None, description="Latest conversion in ms since epoch")
    order_count: int = Field(default=0, ge=0, description="Completed orders")

    @property
    def is_returning_visitor(self) -> bool:
        return self.visit_count > 1
