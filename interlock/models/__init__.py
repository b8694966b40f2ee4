"""Static model definitions."""

from interlock.models.tier import DEFAULT_TIER, PUZZLE_TIERS, PuzzleTier, TierConfig, get_tier_config
from interlock.models.wizard import BACK_EDGES, FORWARD_EDGES, SESSIONLESS_STEPS, Step

__all__ = [
    "DEFAULT_TIER",
    "PUZZLE_TIERS",
    "PuzzleTier",
    "TierConfig",
    "get_tier_config",
    "BACK_EDGES",
    "FORWARD_EDGES",
    "SESSIONLESS_STEPS",
    "Step",
]
