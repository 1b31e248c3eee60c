"""Randomized outcome decisions used to inject faults and latency.

Stateless apart from the random source, so a single instance can be shared by
every request handler and the lifecycle engine.
"""

import random
from typing import NamedTuple, Optional, Tuple


class SimulatedError(NamedTuple):
    status_code: int
    message: str


UPLOAD_ERRORS: Tuple[SimulatedError, ...] = (
    SimulatedError(500, "Internal server error"),
    SimulatedError(503, "Service temporarily unavailable"),
)


class OutcomeRandomizer:
    """Bernoulli draws and error picks for failure simulation."""

    def __init__(
        self,
        slow_response_rate: float = 0.2,
        slow_response_range: Tuple[float, float] = (1.0, 3.0),
        rng: Optional[random.Random] = None,
    ):
        self._rng = rng or random.Random()
        self._slow_response_rate = slow_response_rate
        self._slow_min, self._slow_max = slow_response_range

    @property
    def rng(self) -> random.Random:
        return self._rng

    def _chance(self, p: float) -> bool:
        if p <= 0:
            return False
        if p >= 1:
            return True
        return self._rng.random() < p

    def should_fail(self, p: float) -> bool:
        return self._chance(p)

    def should_timeout(self, p: float) -> bool:
        """Caller stalls for the configured timeout delay, then answers 504."""
        return self._chance(p)

    def should_slow_down(self) -> bool:
        return self._chance(self._slow_response_rate)

    def slow_down_seconds(self) -> float:
        return self._rng.uniform(self._slow_min, self._slow_max)

    def pick_error(self) -> SimulatedError:
        return self._rng.choice(UPLOAD_ERRORS)
