"""Exit-intent detection.

Environment-specific ``RecoveryTrigger`` implementations turn raw pointer or
visibility signals into a "likely exit" callback. ``ExitIntentDetector``
combines them behind the same interface and allows one firing per page life,
and none at all once the current browsing session has already been
interrupted.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable

from interlock.core.config import Settings
from interlock.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

EXIT_INTENT_SESSION_KEY = "interlock_exit_dismissed"


class ExitSignal(str, Enum):
    """Which heuristic predicted the exit."""

    POINTER = "pointer"
    VISIBILITY = "visibility"


ExitCallback = Callable[[ExitSignal], None]


class RecoveryTrigger(ABC):
    """Source of "the user is probably about to leave" notifications."""

    @abstractmethod
    def on_likely_exit(self, callback: ExitCallback) -> Callable[[], None]:
        """Register ``callback`` to run when an exit is predicted.

        Returns:
            A callable that removes the callback.
        """

    def close(self) -> None:
        """Release timers and callbacks. Safe to call more than once."""


class _CallbackTrigger(RecoveryTrigger):
    def __init__(self) -> None:
        self._callbacks: list[ExitCallback] = []
        self._closed = False

    def on_likely_exit(self, callback: ExitCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def close(self) -> None:
        self._closed = True
        self._callbacks.clear()

    def _fire(self, signal: ExitSignal) -> None:
        if self._closed:
            return
        for callback in list(self._callbacks):
            callback(signal)


class PointerExitTrigger(_CallbackTrigger):
    """Desktop heuristic: the pointer leaves the window through the top edge.

    With an arming delay the exit only counts if the pointer stays out for
    the whole delay; re-entering or closing cancels the pending timer.
    """

    def __init__(self, threshold_px: int = 5, arm_delay_seconds: float = 0.0) -> None:
        super().__init__()
        self.threshold_px = threshold_px
        self.arm_delay_seconds = arm_delay_seconds
        self._timer: asyncio.TimerHandle | None = None

    @property
    def arming(self) -> bool:
        return self._timer is not None

    def pointer_leave(self, client_y: float, left_window: bool = True) -> bool:
        """Handle the pointer leaving the document.

        Args:
            client_y: Vertical pointer position relative to the viewport.
            left_window: False when the pointer moved onto another element
                rather than out of the window.

        Returns:
            True if the signal fired or started arming.
        """
        if self._closed or not left_window or client_y > self.threshold_px:
            return False

        if self.arm_delay_seconds <= 0:
            self._fire(ExitSignal.POINTER)
            return True

        if self._timer is not None:
            return True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, firing pointer exit without arming delay")
            self._fire(ExitSignal.POINTER)
            return True

        self._timer = loop.call_later(self.arm_delay_seconds, self._armed)
        return True

    def pointer_enter(self) -> None:
        """The pointer came back; drop any pending arm timer."""
        if self._timer is not None:
            logger.debug("Pointer re-entered, cancelling exit-intent arming")
        self._cancel_timer()

    def close(self) -> None:
        self._cancel_timer()
        super().close()

    def _armed(self) -> None:
        self._timer = None
        self._fire(ExitSignal.POINTER)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class VisibilityExitTrigger(_CallbackTrigger):
    """Mobile and tab-switch fallback: the page became hidden."""

    def visibility_changed(self, state: str) -> bool:
        """Handle a page-visibility change.

        Returns:
            True if the signal fired.
        """
        if state != "hidden" or self._closed:
            return False
        self._fire(ExitSignal.VISIBILITY)
        return True


class ExitIntentDetector(_CallbackTrigger):
    """Fires at most once per page life, and not again in the same browsing session.

    ``session_store`` is the per-browser-session medium; the flag written
    there outlives a page reload but not the browsing session.
    """

    def __init__(
        self,
        triggers: Iterable[RecoveryTrigger],
        session_store: KeyValueStore,
        flag_key: str = EXIT_INTENT_SESSION_KEY,
    ) -> None:
        super().__init__()
        self.triggers = list(triggers)
        self.session_store = session_store
        self.flag_key = flag_key
        self._has_triggered = False
        for trigger in self.triggers:
            trigger.on_likely_exit(self._handle_exit)

    @property
    def has_triggered(self) -> bool:
        return self._has_triggered

    @property
    def suppressed_for_session(self) -> bool:
        return self.session_store.get(self.flag_key) == "true"

    def trigger_of(self, kind: type[RecoveryTrigger]) -> RecoveryTrigger | None:
        """First composed trigger of the given class."""
        return next((t for t in self.triggers if isinstance(t, kind)), None)

    def reset(self) -> None:
        """Start a new page life. The browsing-session flag is kept."""
        self._has_triggered = False

    def close(self) -> None:
        for trigger in self.triggers:
            trigger.close()
        super().close()

    def _handle_exit(self, signal: ExitSignal) -> None:
        if self._closed or self._has_triggered:
            return

        self._has_triggered = True
        if self.suppressed_for_session:
            logger.debug("Exit intent (%s) suppressed for this browsing session", signal.value)
            return

        self.session_store.set(self.flag_key, "true")
        logger.info("Exit intent detected via %s", signal.value)
        self._fire(signal)


def build_exit_intent_detector(settings: Settings, session_store: KeyValueStore) -> ExitIntentDetector:
    """Detector wired with the desktop and mobile triggers."""
    pointer = PointerExitTrigger(
        threshold_px=settings.exit_intent_threshold_px,
        arm_delay_seconds=settings.exit_intent_arm_delay_ms / 1000,
    )
    return ExitIntentDetector([pointer, VisibilityExitTrigger()], session_store)
