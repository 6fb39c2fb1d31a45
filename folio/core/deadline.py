"""Request deadlines, checked between the steps of a coordinator operation.

A deadline never interrupts a store call that is already running; it only
stops the next step from starting. Writes that already happened stay.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import DeadlineExceededError


@dataclass(frozen=True)
class Deadline:
    """Absolute expiry on the monotonic clock."""

    expires_at: float
    clock: Callable[[], float] = time.monotonic

    @classmethod
    def after(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> "Deadline":
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        return self.expires_at - self.clock()

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, step: str) -> None:
        """Raise DeadlineExceededError if the deadline passed before *step*."""
        if self.expired():
            raise DeadlineExceededError(step)


def check_deadline(deadline: Optional[Deadline], step: str) -> None:
    if deadline is not None:
        deadline.check(step)
