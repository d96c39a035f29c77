"""Alignment driven by several candidate "parent" frames.

The strategy writes the world pose of its governed target directly, so any
scene-graph parent of the target has no influence unless it is also one of the
reference frames.
"""

from __future__ import annotations

import logging
import math
import time
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

import numpy as np

from ..control.errors import UnexpectedBranchError
from ..control.frame import ReferenceFrame
from ..control.pose import Pose, infinite_accuracy
from ..control.state import AlignmentState
from ..control.strategy import AlignmentStrategy, ResolveOutcome
from ..control.target import GovernedTarget
from ..control.viewpoint_provider import ViewpointProvider
from ..math3d.quaternion import q_angle_deg

logger = logging.getLogger(__name__)


class MultiParentAlignmentMode(Enum):
    NEAREST_NEIGHBOR = "nearest-neighbor"


def nearest_frame_index(frames: Sequence[ReferenceFrame], point: np.ndarray) -> int:
    """Index of the frame closest to point by squared distance.

    Ties resolve to the earliest frame in sequence order.
    """
    positions = np.stack([f.position for f in frames])
    d = positions - np.asarray(point, dtype=np.float64).reshape(1, 3)
    dist2 = np.einsum("ij,ij->i", d, d)
    return int(np.argmin(dist2))


class MultiParentAlignmentStrategy(AlignmentStrategy):
    """Aligns the target to one of several reference frames.

    NEAREST_NEIGHBOR copies the pose of the frame closest to the reference
    viewpoint: the explicit ``reference_frame`` when set, otherwise whatever
    the viewpoint provider reports (usually the camera).

    Replacing ``mode``, ``reference_frames`` or ``reference_frame`` recomputes
    immediately; ticks recompute at most once per ``update_frequency``.
    """

    strategy_type = "multi-parent"

    def __init__(
        self,
        target: GovernedTarget,
        reference_frames: Iterable[ReferenceFrame] = (),
        mode: MultiParentAlignmentMode = MultiParentAlignmentMode.NEAREST_NEIGHBOR,
        reference_frame: Optional[ReferenceFrame] = None,
        viewpoint_provider: Optional[ViewpointProvider] = None,
        update_frequency: float = 0.02,
        name: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._mode = self._validate_mode(mode)
        self._frames = self._validate_frames(reference_frames)
        self._reference_frame = reference_frame
        self.viewpoint_provider = viewpoint_provider
        self.selected_frame: Optional[ReferenceFrame] = None
        super().__init__(target, update_frequency=update_frequency, name=name, clock=clock)

    @staticmethod
    def _validate_mode(mode) -> MultiParentAlignmentMode:
        if mode is None:
            raise ValueError("mode must not be None")
        return mode

    @staticmethod
    def _validate_frames(frames) -> list[ReferenceFrame]:
        if frames is None:
            raise ValueError("reference_frames must not be None")
        frames = list(frames)
        if any(f is None for f in frames):
            raise ValueError("reference_frames must not contain None")
        return frames

    @property
    def mode(self) -> MultiParentAlignmentMode:
        return self._mode

    @mode.setter
    def mode(self, value: MultiParentAlignmentMode) -> None:
        value = self._validate_mode(value)
        if value != self._mode:
            self._mode = value
        self.update_transform()

    @property
    def reference_frames(self) -> tuple[ReferenceFrame, ...]:
        """Candidate frames. Replace the whole collection to change it."""
        return tuple(self._frames)

    @reference_frames.setter
    def reference_frames(self, value: Iterable[ReferenceFrame]) -> None:
        frames = self._validate_frames(value)
        if frames != self._frames:
            self._frames = frames
        self.update_transform()

    def add_reference_frame(self, frame: ReferenceFrame) -> None:
        self.reference_frames = [*self._frames, frame]

    def remove_reference_frame(self, frame: ReferenceFrame) -> None:
        self.reference_frames = [f for f in self._frames if f is not frame]

    @property
    def reference_frame(self) -> Optional[ReferenceFrame]:
        """Explicit measurement origin; None falls back to the viewpoint provider."""
        return self._reference_frame

    @reference_frame.setter
    def reference_frame(self, value: Optional[ReferenceFrame]) -> None:
        if value is not self._reference_frame:
            self._reference_frame = value
        self.update_transform()

    def get_reference_pose(self) -> Optional[Pose]:
        if self._reference_frame is not None:
            return self._reference_frame.pose
        if self.viewpoint_provider is not None:
            return self.viewpoint_provider.get_pose()
        return None

    def configuration(self) -> dict:
        """Serializable configuration: no poses, only frame ids and settings."""
        return {
            "type": self.strategy_type,
            "mode": self._mode.value,
            "reference_frames": [f.id for f in self._frames],
            "reference_frame": None if self._reference_frame is None else self._reference_frame.id,
            "update_frequency": self.update_frequency,
        }

    def resolve(self) -> ResolveOutcome:
        if not self._frames:
            self.selected_frame = None
            return ResolveOutcome(AlignmentState.UNRESOLVED, accuracy=infinite_accuracy())

        if self._mode is MultiParentAlignmentMode.NEAREST_NEIGHBOR:
            return self._align_nearest_neighbor()
        raise UnexpectedBranchError(f"unexpected multi-parent alignment mode: {self._mode!r}")

    def _align_nearest_neighbor(self) -> ResolveOutcome:
        reference = self.get_reference_pose()
        if reference is None:
            logger.debug("[ALIGN] %s: no reference viewpoint, inhibited", self.name)
            return ResolveOutcome(AlignmentState.INHIBITED)

        if len(self._frames) == 1:
            parent = self._frames[0]
        else:
            parent = self._frames[nearest_frame_index(self._frames, reference.position)]

        if parent is not self.selected_frame:
            self._log_parent_switch(parent)
            self.selected_frame = parent
        return ResolveOutcome(AlignmentState.TRACKING, pose=parent.pose, accuracy=parent.accuracy)

    def _log_parent_switch(self, parent: ReferenceFrame) -> None:
        previous = self.pose
        if previous is None:
            logger.info("[ALIGN] %s: parent=%s", self.name, parent.id)
            return
        jump_m = math.sqrt(previous.squared_distance_to(parent.pose.position))
        logger.info(
            "[ALIGN] %s: parent %s -> %s (jump %.3fm, %.1fdeg)",
            self.name,
            None if self.selected_frame is None else self.selected_frame.id,
            parent.id,
            jump_m,
            q_angle_deg(previous.rotation, parent.pose.rotation),
        )
