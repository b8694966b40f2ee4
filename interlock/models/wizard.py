"""Wizard step definitions."""

from enum import Enum


class Step(str, Enum):
    """Screens of the configuration wizard, in happy-path order."""

    HOME = "home"
    TIER = "tier"
    SHAPES = "shapes"
    PARTNER = "partner"
    IMAGE = "image"
    HINTS = "hints"
    PACKAGING = "packaging"
    CHECKOUT = "checkout"
    CONFIRMATION = "confirmation"


# Steps that can be entered without a draft session.
SESSIONLESS_STEPS = frozenset({Step.HOME, Step.CONFIRMATION})

FORWARD_EDGES: dict[Step, Step] = {
    Step.HOME: Step.TIER,
    Step.TIER: Step.SHAPES,
    Step.SHAPES: Step.PARTNER,
    Step.PARTNER: Step.IMAGE,
    Step.IMAGE: Step.HINTS,
    Step.HINTS: Step.PACKAGING,
    Step.PACKAGING: Step.CHECKOUT,
    Step.CHECKOUT: Step.CONFIRMATION,
}

BACK_EDGES: dict[Step, Step] = {
    Step.SHAPES: Step.TIER,
    Step.IMAGE: Step.SHAPES,
    Step.HINTS: Step.IMAGE,
    Step.PACKAGING: Step.HINTS,
    Step.CHECKOUT: Step.PACKAGING,
}
