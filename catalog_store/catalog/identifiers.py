"""Surrogate key generation for new products and variants."""

import random
import time
from collections.abc import Callable
from typing import Protocol


class IdGenerator(Protocol):
    """Produces ids for entities saved with the unassigned id (0)."""

    def new_id(self) -> int:
        """Return a new non-zero id."""
        ...


class TimestampIdGenerator:
    """Wall-clock milliseconds plus a random offset in 0..999.

    Ids trend upward over time but are not strictly monotonic, and two
    calls within the same millisecond can collide. Catalog writes are
    rare enough for that to be acceptable.
    """

    MAX_OFFSET = 999

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            clock: Returns the current time in seconds since the epoch.
            rng: Random source for the offset.
        """
        self._clock = clock
        self._rng = rng or random.Random()

    def new_id(self) -> int:
        """Return a new id, never 0."""
        millis = int(self._clock() * 1000)
        return max(millis + self._rng.randint(0, self.MAX_OFFSET), 1)


class SequenceIdGenerator:
    """Deterministic generator counting up from a start value."""

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError("start must be positive")
        self._next = start

    def new_id(self) -> int:
        value = self._next
        self._next += 1
        return value
