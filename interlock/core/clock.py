"""Wall-clock helpers.

Persisted records carry integer milliseconds since the epoch, so every
component takes a ``Clock`` callable instead of reading the time directly.
"""

import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)
