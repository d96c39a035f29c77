"""Alignment strategy contract.

A strategy resolves the pose of a governed target from some source of truth
and publishes how well that worked:

- ``state``: AlignmentState of the most recent resolution attempt
- ``accuracy``: per-axis uncertainty of the published pose (inf = unknown)
- ``pose``: last resolved pose, None until the first success

Concrete strategies only implement ``resolve()``. Publishing, change
notification, the governed-target write and tick throttling live here.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .errors import AlignmentConfigurationError
from .observable import ChangeEvent, TrackedValue
from .pose import Pose, accuracy_equal, as_accuracy, infinite_accuracy
from .scheduler import RecomputeThrottle
from .state import AlignmentState
from .target import GovernedTarget

logger = logging.getLogger(__name__)


def _read_only_accuracy(value) -> np.ndarray:
    a = as_accuracy(value)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, slots=True)
class ResolveOutcome:
    """Result of one resolution attempt.

    pose/accuracy left as None mean "keep the current value".
    """

    state: AlignmentState
    pose: Optional[Pose] = None
    accuracy: Optional[np.ndarray] = None


class AlignmentStrategy:
    """Base class for alignment strategies.

    Subclasses must have their own fields in place before calling
    ``super().__init__`` since ``on_attach`` runs at the end of it.
    """

    def __init__(
        self,
        target: GovernedTarget,
        update_frequency: float = 0.0,
        name: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if target is None:
            raise AlignmentConfigurationError(
                f"{type(self).__name__} requires a governed target"
            )
        self.target = target
        self.name = name or type(self).__name__
        self.clock = clock
        self._accuracy = TrackedValue(
            "accuracy_changed", _read_only_accuracy(infinite_accuracy()), accuracy_equal
        )
        self._state = TrackedValue("state_changed", AlignmentState.UNRESOLVED)
        self._pose: Optional[Pose] = None
        self._throttle = RecomputeThrottle(update_frequency)
        self._enabled = True
        self._attached = True
        self.on_attach()

    # Published values

    @property
    def accuracy(self) -> np.ndarray:
        return self._accuracy.value

    @property
    def state(self) -> AlignmentState:
        return self._state.value

    @property
    def pose(self) -> Optional[Pose]:
        return self._pose

    @property
    def accuracy_changed(self) -> ChangeEvent:
        return self._accuracy.changed

    @property
    def state_changed(self) -> ChangeEvent:
        return self._state.changed

    def _publish(self, state: AlignmentState, accuracy=None) -> None:
        # Store both values before either event fires.
        accuracy_changed = False
        if accuracy is not None:
            accuracy_changed = self._accuracy.assign(_read_only_accuracy(accuracy))
        old_state = self._state.value
        state_changed = self._state.assign(state)
        if state_changed:
            logger.info("[ALIGN] %s: %s -> %s", self.name, old_state.value, state.value)
        if accuracy_changed:
            self._accuracy.changed.emit(self)
        if state_changed:
            self._state.changed.emit(self)

    # Lifecycle

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        value = bool(value)
        if value == self._enabled:
            return
        self._enabled = value
        if value:
            self._throttle.reset()
            self.on_enable()
        else:
            self.on_disable()

    def detach(self) -> None:
        """End the strategy's lifecycle; it ignores ticks afterwards."""
        if not self._attached:
            return
        self.enabled = False
        self._attached = False
        self.on_detach()

    def on_attach(self) -> None:
        pass

    def on_detach(self) -> None:
        pass

    def on_enable(self) -> None:
        pass

    def on_disable(self) -> None:
        pass

    def on_tick(self, now: float) -> None:
        pass

    # Recompute

    @property
    def update_frequency(self) -> float:
        """Seconds between tick-driven recomputes; 0 means every tick."""
        return self._throttle.frequency

    @update_frequency.setter
    def update_frequency(self, value: float) -> None:
        self._throttle.frequency = value

    @property
    def last_update_time(self) -> Optional[float]:
        return self._throttle.last_update_time

    def tick(self, now: float | None = None) -> bool:
        """Periodic entry point. Returns True when a recompute ran."""
        if not (self._attached and self._enabled):
            return False
        if now is None:
            now = self.clock()
        self.on_tick(now)
        if not self._throttle.try_acquire(now):
            return False
        self.update_transform()
        return True

    def resolve(self) -> ResolveOutcome:
        raise NotImplementedError

    def update_transform(self) -> ResolveOutcome:
        """Resolve now, publish the outcome and write the pose to the target."""
        outcome = self.resolve()
        if outcome.pose is not None:
            self._pose = outcome.pose
            self.target.set_pose(outcome.pose)
        self._publish(outcome.state, outcome.accuracy)
        return outcome
