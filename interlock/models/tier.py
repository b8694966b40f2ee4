"""Product tier configuration.

Static lookup consumed by the wizard for shape and hint-card quotas; pricing
and piece counts are carried for the rendering layer only.
"""

from typing import Literal

from typing_extensions import TypedDict

PuzzleTier = Literal["essential", "classic", "grand", "heirloom"]

DEFAULT_TIER: PuzzleTier = "classic"


class TierConfig(TypedDict):
    """Quotas and display data for one product tier."""

    id: PuzzleTier
    name: str
    pieces: int
    shape_quota: int
    hint_card_quota: int
    price: int
    description: str


PUZZLE_TIERS: dict[PuzzleTier, TierConfig] = {
    "essential": {
        "id": "essential",
        "name": "Essential",
        "pieces": 50,
        "shape_quota": 5,
        "hint_card_quota": 3,
        "price": 45,
        "description": "Perfect for a meaningful gesture",
    },
    "classic": {
        "id": "classic",
        "name": "Classic",
        "pieces": 100,
        "shape_quota": 7,
        "hint_card_quota": 4,
        "price": 69,
        "description": "Our most popular size",
    },
    "grand": {
        "id": "grand",
        "name": "Grand",
        "pieces": 150,
        "shape_quota": 10,
        "hint_card_quota": 5,
        "price": 99,
        "description": "For stories that deserve more space",
    },
    "heirloom": {
        "id": "heirloom",
        "name": "Heirloom",
        "pieces": 250,
        "shape_quota": 15,
        "hint_card_quota": 6,
        "price": 159,
        "description": "A legacy piece to treasure forever",
    },
}


def get_tier_config(tier: str) -> TierConfig:
    """Look up a tier, falling back to the default tier for unknown ids."""
    return PUZZLE_TIERS.get(tier, PUZZLE_TIERS[DEFAULT_TIER])  # type: ignore[call-overload]
