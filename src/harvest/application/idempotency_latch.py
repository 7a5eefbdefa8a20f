"""Short-lived guard against applying one external event twice."""

from __future__ import annotations

import time
from typing import Callable

DEFAULT_RESET_AFTER = 3.0


class IdempotencyLatch:
    """Held from a successful ``try_acquire()`` until ``reset_after`` seconds pass.

    The reset is computed from the injected clock rather than a timer
    thread, so tests advance time instead of sleeping.
    """

    def __init__(
        self,
        reset_after: float = DEFAULT_RESET_AFTER,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._reset_after = reset_after
        self._clock = clock
        self._held_until: float | None = None

    @property
    def is_held(self) -> bool:
        return self._held_until is not None and self._clock() < self._held_until

    def try_acquire(self) -> bool:
        if self.is_held:
            return False
        self._held_until = self._clock() + self._reset_after
        return True
