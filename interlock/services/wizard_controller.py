"""Finite-state controller for the configuration wizard.

The controller is the only writer of the draft session. Each accepted
transition or field mutation produces a new immutable ``PuzzleSession``,
writes it through the ``SessionRepository`` and then notifies subscribers.
Requests that fail a guard (wrong step, no session, unmet precondition) are
ignored and reported as ``False``; they arise from ordinary UI races and are
not errors.
"""

import logging
import secrets
from typing import Any, Callable

from pydantic import ValidationError

from interlock.core.clock import Clock, now_ms
from interlock.models.tier import PUZZLE_TIERS, get_tier_config
from interlock.models.wizard import BACK_EDGES, FORWARD_EDGES, SESSIONLESS_STEPS, Step
from interlock.schemas.session import (
    HintCard,
    PackagingOptions,
    PartnerInvitation,
    PuzzleSession,
    ShippingInfo,
    create_default_session,
)
from interlock.services.progress_persistence import ProgressPersistence
from interlock.services.resumption_planner import TierLookup, is_resumable, plan
from interlock.services.session_repository import SessionRepository

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 16
ORDER_NUMBER_PREFIX = "PZ-"

Listener = Callable[[Step, PuzzleSession | None], None]


class SelectionError(ValueError):
    """An input that no tier or image rule allows."""


def generate_session_id() -> str:
    """Generate a collision-resistant opaque session id."""
    return secrets.token_hex(SESSION_ID_BYTES)


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def generate_order_number(now: int) -> str:
    """Order number shown on the confirmation screen."""
    return ORDER_NUMBER_PREFIX + _to_base36(now).upper()


class WizardController:
    """State machine over ``Step`` owning the draft session."""

    def __init__(
        self,
        repository: SessionRepository,
        progress: ProgressPersistence | None = None,
        *,
        tier_lookup: TierLookup = get_tier_config,
        id_factory: Callable[[], str] = generate_session_id,
        clock: Clock = now_ms,
    ) -> None:
        """Initialize the controller at ``home`` with no session.

        Args:
            repository: Draft session persistence.
            progress: Checkout progress persistence, cleared on completion
                and on start-over.
            tier_lookup: Tier quota lookup.
            id_factory: Session id generator.
            clock: Millisecond clock.
        """
        self._repository = repository
        self._progress = progress
        self._tier_lookup = tier_lookup
        self._id_factory = id_factory
        self._clock = clock
        self._step = Step.HOME
        self._session: PuzzleSession | None = None
        self._order_number: str | None = None
        self._listeners: list[Listener] = []

    @property
    def step(self) -> Step:
        return self._step

    @property
    def session(self) -> PuzzleSession | None:
        """Current draft snapshot. Instances are frozen; never mutate them."""
        return self._session

    @property
    def order_number(self) -> str | None:
        return self._order_number

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every accepted change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def restore(self) -> Step:
        """Load any saved draft and pick the initial step.

        Returns:
            The step the wizard starts at.
        """
        session = self._repository.load()
        if session is not None and is_resumable(session):
            self._session = session
            self._step = plan(session, self._tier_lookup)
            logger.info("Resuming session %s at step %s", session.id, self._step.value)
        else:
            self._session = None
            self._step = Step.HOME
            logger.info("No resumable session, starting at home")
        self._notify()
        return self._step

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """home -> tier, creating a fresh draft."""
        if self._step is not Step.HOME or self._session is not None:
            return self._refuse("start")
        now = self._clock()
        session = create_default_session(self._id_factory(), now)
        self._order_number = None
        logger.info("Created session %s", session.id)
        return self._transition(Step.TIER, session)

    def continue_to_shapes(self) -> bool:
        return self._advance(Step.TIER)

    def finalize_shapes(self) -> bool:
        """shapes -> partner once the tier's shape quota is filled."""
        return self._advance(
            Step.SHAPES,
            guard=lambda s: len(s.selected_shapes) >= self._shape_quota(s),
        )

    def create_invitation(self, invitation: PartnerInvitation) -> bool:
        """partner -> image, recording the invite."""
        if self._step is not Step.PARTNER or self._session is None:
            return self._refuse("create_invitation")
        updated = self._mutated(partner_invitation=invitation)
        return self._transition(Step.IMAGE, updated)

    def skip_partner(self) -> bool:
        """partner -> image without an invite."""
        return self._advance(Step.PARTNER)

    def continue_to_hints(self) -> bool:
        return self._advance(Step.IMAGE, guard=lambda s: s.has_image)

    def continue_to_packaging(self) -> bool:
        return self._advance(Step.HINTS)

    def continue_to_checkout(self) -> bool:
        return self._advance(Step.PACKAGING)

    def complete_order(self) -> str | None:
        """checkout -> confirmation after a successful submission.

        Marks the order complete, then clears the stored draft and checkout
        progress; the completed snapshot stays in memory for the
        confirmation screen.

        Returns:
            The order number, or None if the guard refused.
        """
        session = self._session
        if self._step is not Step.CHECKOUT or session is None or session.shipping_info is None:
            self._refuse("complete_order")
            return None

        completed = self._mutated(order_complete=True)
        self._order_number = generate_order_number(completed.updated_at)
        self._session = completed
        self._step = Step.CONFIRMATION
        self._repository.clear()
        if self._progress is not None:
            self._progress.clear()
        logger.info("Completed order %s for session %s", self._order_number, completed.id)
        self._notify()
        return self._order_number

    def back(self) -> bool:
        """Follow the back-edge from the current step, if there is one."""
        target = BACK_EDGES.get(self._step)
        if target is None:
            return self._refuse("back")
        return self._transition(target, self._session)

    def start_over(self) -> bool:
        """Return home from anywhere, discarding the draft entirely."""
        self._repository.clear()
        if self._progress is not None:
            self._progress.clear()
        dropped = self._session.id if self._session is not None else None
        self._session = None
        self._order_number = None
        self._step = Step.HOME
        logger.info("Started over, dropped session %s", dropped)
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Field mutations
    # ------------------------------------------------------------------

    def select_tier(self, tier: str) -> bool:
        """Pick a tier, trimming selections to the new quotas."""
        if tier not in PUZZLE_TIERS:
            raise SelectionError(f"Unknown tier: {tier}")
        if not self._can_mutate(Step.TIER):
            return self._refuse("select_tier")

        config = self._tier_lookup(tier)
        session = self._require_session()
        changes = self._shape_changes(session, session.selected_shapes[: config["shape_quota"]])
        changes["tier"] = tier
        changes["hint_cards"] = session.hint_cards[: config["hint_card_quota"]]
        return self._commit_mutation(**changes)

    def toggle_shape(self, shape_id: str) -> bool:
        """Add ``shape_id`` if absent, otherwise remove it."""
        if not self._can_mutate(Step.SHAPES):
            return self._refuse("toggle_shape")

        session = self._require_session()
        shapes = list(session.selected_shapes)
        if shape_id in shapes:
            shapes.remove(shape_id)
        else:
            if len(shapes) >= self._shape_quota(session):
                raise SelectionError(f"{session.tier} tier allows {self._shape_quota(session)} shapes")
            shapes.append(shape_id)
        return self._commit_mutation(**self._shape_changes(session, shapes))

    def set_shapes(self, shapes: list[str], meanings: dict[str, str] | None = None) -> bool:
        """Replace the shape selection, and optionally the meanings."""
        if len(set(shapes)) != len(shapes):
            raise SelectionError("Shapes must be unique")
        if not self._can_mutate(Step.SHAPES):
            return self._refuse("set_shapes")

        session = self._require_session()
        if len(shapes) > self._shape_quota(session):
            raise SelectionError(f"{session.tier} tier allows {self._shape_quota(session)} shapes")

        changes = self._shape_changes(session, shapes)
        if meanings is not None:
            unknown = set(meanings) - set(shapes)
            if unknown:
                raise SelectionError(f"Meanings given for unselected shapes: {sorted(unknown)}")
            changes["shape_meanings"] = {k: v for k, v in meanings.items() if v.strip()}
        return self._commit_mutation(**changes)

    def set_shape_meaning(self, shape_id: str, meaning: str) -> bool:
        """Annotate a selected shape; a blank meaning removes the note."""
        if not self._can_mutate(Step.SHAPES):
            return self._refuse("set_shape_meaning")

        session = self._require_session()
        if shape_id not in session.selected_shapes:
            raise SelectionError(f"Shape {shape_id} is not selected")
        meanings = dict(session.shape_meanings)
        if meaning.strip():
            meanings[shape_id] = meaning
        else:
            meanings.pop(shape_id, None)
        return self._commit_mutation(shape_meanings=meanings)

    def choose_photo(self, photo_url: str) -> bool:
        if not photo_url:
            raise SelectionError("A photo is required")
        if not self._can_mutate(Step.IMAGE):
            return self._refuse("choose_photo")
        return self._commit_mutation(image_choice="photo", photo_url=photo_url, color_assignments=None)

    def choose_colors(self, color_assignments: dict[str, str]) -> bool:
        if not color_assignments:
            raise SelectionError("At least one colour assignment is required")
        if not self._can_mutate(Step.IMAGE):
            return self._refuse("choose_colors")

        session = self._require_session()
        unknown = set(color_assignments) - set(session.selected_shapes)
        if unknown:
            raise SelectionError(f"Colours given for unselected shapes: {sorted(unknown)}")
        return self._commit_mutation(
            image_choice="comfy-colors",
            photo_url=None,
            color_assignments=dict(color_assignments),
        )

    def set_hint_cards(self, hint_cards: list[HintCard]) -> bool:
        if not self._can_mutate(Step.HINTS):
            return self._refuse("set_hint_cards")

        session = self._require_session()
        quota = self._tier_lookup(session.tier)["hint_card_quota"]
        if len(hint_cards) > quota:
            raise SelectionError(f"{session.tier} tier allows {quota} hint cards")
        return self._commit_mutation(hint_cards=list(hint_cards))

    def set_packaging(self, packaging: PackagingOptions) -> bool:
        if not self._can_mutate(Step.PACKAGING):
            return self._refuse("set_packaging")
        if not packaging.wax_seal and packaging.wax_color is not None:
            packaging = packaging.model_copy(update={"wax_color": None})
        return self._commit_mutation(packaging=packaging)

    def set_shipping_info(self, shipping_info: ShippingInfo) -> bool:
        if not self._can_mutate(Step.CHECKOUT):
            return self._refuse("set_shipping_info")
        return self._commit_mutation(shipping_info=shipping_info)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _shape_quota(self, session: PuzzleSession) -> int:
        return self._tier_lookup(session.tier)["shape_quota"]

    def _shape_changes(self, session: PuzzleSession, shapes: list[str]) -> dict[str, Any]:
        changes: dict[str, Any] = {
            "selected_shapes": shapes,
            "shape_meanings": {k: v for k, v in session.shape_meanings.items() if k in shapes},
        }
        if session.color_assignments is not None:
            changes["color_assignments"] = {
                k: v for k, v in session.color_assignments.items() if k in shapes
            } or None
            if changes["color_assignments"] is None:
                changes["image_choice"] = "photo"
        return changes

    def _can_mutate(self, step: Step) -> bool:
        return self._session is not None and self._step is step

    def _require_session(self) -> PuzzleSession:
        if self._session is None:
            raise RuntimeError("No active session")
        return self._session

    def _mutated(self, **changes: Any) -> PuzzleSession:
        session = self._require_session()
        data = {**dict(session), **changes}
        data["updated_at"] = max(self._clock(), session.created_at)
        try:
            return PuzzleSession.model_validate(data)
        except ValidationError as e:
            raise SelectionError(str(e)) from e

    def _commit_mutation(self, **changes: Any) -> bool:
        return self._commit(self._step, self._mutated(**changes))

    def _advance(self, from_step: Step, guard: Callable[[PuzzleSession], bool] | None = None) -> bool:
        if self._step is not from_step or self._session is None:
            return self._refuse(f"advance from {from_step.value}")
        if guard is not None and not guard(self._session):
            return self._refuse(f"advance from {from_step.value}")
        return self._transition(FORWARD_EDGES[from_step], self._session)

    def _transition(self, target: Step, session: PuzzleSession | None) -> bool:
        allowed = (
            target is Step.HOME
            or FORWARD_EDGES.get(self._step) is target
            or BACK_EDGES.get(self._step) is target
        )
        if not allowed:
            return self._refuse(f"transition {self._step.value} -> {target.value}")
        if target not in SESSIONLESS_STEPS and session is None:
            return self._refuse(f"transition to {target.value} without a session")

        previous = self._step
        self._commit(target, session)
        logger.info("Wizard moved %s -> %s", previous.value, target.value)
        return True

    def _commit(self, step: Step, session: PuzzleSession | None) -> bool:
        self._session = session
        self._step = step
        if session is not None:
            self._repository.save(session)
        self._notify()
        return True

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._step, self._session)

    def _refuse(self, action: str) -> bool:
        logger.debug("Ignoring %s at step %s", action, self._step.value)
        return False
