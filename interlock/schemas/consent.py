"""Cookie consent Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CONSENT_VERSION = "1.0"


class CookiePreferences(BaseModel):
    """Per-category cookie consent. Necessary cookies cannot be refused."""

    model_config = ConfigDict(from_attributes=True)

    necessary: bool = Field(default=True, description="Always true")
    analytics: bool = Field(default=False, description="Analytics cookies")
    marketing: bool = Field(default=False, description="Marketing cookies")
    preferences: bool = Field(default=False, description="Preference cookies")

    @field_validator("necessary")
    @classmethod
    def force_necessary(cls, value: bool) -> bool:
        return True


class StoredConsent(BaseModel):
    """Persisted consent decision."""

    model_config = ConfigDict(from_attributes=True)

    preferences: CookiePreferences = Field(description="Consent per category")
    timestamp: int = Field(ge=0, description="Decision time in ms since epoch")
    version: str = Field(default=CONSENT_VERSION, description="Consent text version")


class ConsentUpdate(BaseModel):
    """Schema for PUT /consent.

    Either ``preferences`` or one of the shortcut flags must be given.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    preferences: CookiePreferences | None = Field(default=None, description="Explicit per-category choice")
    accept_all: bool = Field(default=False, description="Accept every category")
    decline_all: bool = Field(default=False, description="Decline every optional category")
