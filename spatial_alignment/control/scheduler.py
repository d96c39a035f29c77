"""Throttled recompute policy for per-tick drivers."""

from __future__ import annotations

import math
from typing import Optional


def validate_frequency(frequency: float) -> float:
    frequency = float(frequency)
    # `not >=` also rejects NaN.
    if not frequency >= 0.0:
        raise ValueError(f"update frequency must be >= 0 seconds, got {frequency}")
    return frequency


def should_recompute(last_update_time: Optional[float], now: float, frequency: float) -> bool:
    """Whether a strategy is due for a recompute at time `now`.

    frequency == 0 makes every tick eligible; a strategy that never updated is
    always due.
    """
    if last_update_time is None or frequency == 0.0:
        return True
    return (now - last_update_time) >= frequency


class RecomputeThrottle:
    """Debounce for one strategy. No queueing or batching across strategies."""

    def __init__(self, frequency: float = 0.0):
        self._frequency = validate_frequency(frequency)
        self.last_update_time: Optional[float] = None

    @property
    def frequency(self) -> float:
        return self._frequency

    @frequency.setter
    def frequency(self, value: float) -> None:
        self._frequency = validate_frequency(value)

    def try_acquire(self, now: float) -> bool:
        """Return True and record `now` as the new baseline when due.

        The baseline moves whether or not the following recompute succeeds, so
        failing strategies retry at the throttled rate as well.
        """
        if not math.isfinite(now):
            raise ValueError(f"tick time must be finite, got {now}")
        if not should_recompute(self.last_update_time, now, self._frequency):
            return False
        self.last_update_time = now
        return True

    def reset(self) -> None:
        self.last_update_time = None
