"""Default viewpoint providers.

A viewpoint is the pose alignment measures from when a strategy has no explicit
reference frame, typically the user's head or the device camera.
"""

from __future__ import annotations

import time
from typing import Callable

import numpy as np

from .pose import Pose


class ViewpointProvider:
    """Base interface for the default viewpoint."""

    def get_pose(self) -> Pose | None:
        """Return the current viewpoint pose, or None when unavailable."""
        raise NotImplementedError


class FixedViewpointProvider(ViewpointProvider):
    """Returns a settable pose; None models a lost camera."""

    def __init__(self, pose: Pose | None = None):
        self.pose = pose

    def get_pose(self) -> Pose | None:
        return self.pose


class LinearPathViewpointProvider(ViewpointProvider):
    """Walks back and forth between two points, one leg per period."""

    def __init__(
        self,
        start: np.ndarray,
        end: np.ndarray,
        period_s: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if period_s <= 0.0:
            raise ValueError(f"period_s must be > 0, got {period_s}")
        self.start = np.asarray(start, dtype=np.float64).reshape(3)
        self.end = np.asarray(end, dtype=np.float64).reshape(3)
        self.period_s = float(period_s)
        self._clock = clock
        self._t0 = clock()

    def get_pose(self) -> Pose | None:
        phase = ((self._clock() - self._t0) / self.period_s) % 2.0
        # Triangle wave: 0 -> 1 on the way out, 1 -> 0 on the way back.
        s = phase if phase <= 1.0 else 2.0 - phase
        position = (1.0 - s) * self.start + s * self.end
        return Pose(position=position, rotation=np.array([1.0, 0.0, 0.0, 0.0]))
