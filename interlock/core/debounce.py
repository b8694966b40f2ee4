"""Trailing-edge debounce on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Coalesce bursts of values into a single delayed call.

    Each ``submit`` replaces the pending value and restarts the window; only
    the last value submitted within the window reaches ``action``. Without a
    running event loop the value is delivered immediately.
    """

    def __init__(self, action: Callable[[T], None], delay_seconds: float) -> None:
        self._action = action
        self.delay_seconds = delay_seconds
        self._handle: asyncio.TimerHandle | None = None
        self._pending: T | None = None
        self._has_pending = False

    @property
    def pending(self) -> bool:
        """Whether a value is waiting for the window to close."""
        return self._has_pending

    def submit(self, value: T) -> None:
        """Schedule ``value``, replacing whatever was pending."""
        self._cancel_timer()
        self._pending = value
        self._has_pending = True

        if self.delay_seconds <= 0:
            self.flush()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, delivering debounced value immediately")
            self.flush()
            return

        self._handle = loop.call_later(self.delay_seconds, self.flush)

    def flush(self) -> bool:
        """Deliver the pending value now.

        Returns:
            True if a value was delivered.
        """
        self._cancel_timer()
        if not self._has_pending:
            return False
        value = self._pending
        self._pending = None
        self._has_pending = False
        self._action(value)  # type: ignore[arg-type]
        return True

    def cancel(self) -> bool:
        """Drop the pending value without delivering it.

        Returns:
            True if something was pending.
        """
        self._cancel_timer()
        had_pending = self._has_pending
        self._pending = None
        self._has_pending = False
        return had_pending

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
