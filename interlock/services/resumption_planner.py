"""Pick the wizard step a saved draft resumes at.

The draft has no stored step counter. Completion of each step is inferred
from the presence of its data, checked from the most advanced step down, so
the first match is the first step still incomplete. A draft with later-step
data but gaps earlier resumes at the most advanced inferable step.
"""

from typing import Callable

from interlock.models.tier import TierConfig, get_tier_config
from interlock.models.wizard import Step
from interlock.schemas.session import PuzzleSession

TierLookup = Callable[[str], TierConfig]


def is_resumable(session: PuzzleSession | None) -> bool:
    """Whether a loaded draft is worth resuming at all.

    A draft abandoned before any shape was picked starts over from home.
    """
    return session is not None and len(session.selected_shapes) > 0


def plan(session: PuzzleSession, tier_lookup: TierLookup = get_tier_config) -> Step:
    """Return the step ``session`` should resume at."""
    if session.order_complete:
        return Step.CONFIRMATION
    if session.shipping_info is not None:
        return Step.CHECKOUT
    if session.hint_cards:
        return Step.PACKAGING
    if session.image_choice and (session.photo_url or session.color_assignments):
        return Step.HINTS
    if len(session.selected_shapes) >= tier_lookup(session.tier)["shape_quota"]:
        return Step.IMAGE
    if session.tier:
        return Step.SHAPES
    return Step.TIER
