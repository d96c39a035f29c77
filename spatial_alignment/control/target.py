"""Governed targets: pose sinks that strategies write resolved poses into."""

from __future__ import annotations

from .frame import ReferenceFrame
from .pose import Pose


class GovernedTarget:
    """Base interface for anything whose pose an alignment strategy controls."""

    def set_pose(self, pose: Pose) -> None:
        raise NotImplementedError


class FrameTarget(GovernedTarget):
    """Writes resolved poses into a ReferenceFrame.

    An aligned frame can then serve as a candidate or reference elsewhere.
    """

    def __init__(self, frame: ReferenceFrame):
        self.frame = frame

    def set_pose(self, pose: Pose) -> None:
        self.frame.set_pose(pose)


class RecordingTarget(GovernedTarget):
    """Keeps every pose written to it, latest last."""

    def __init__(self):
        self.poses: list[Pose] = []

    @property
    def pose(self) -> Pose | None:
        return self.poses[-1] if self.poses else None

    def set_pose(self, pose: Pose) -> None:
        self.poses.append(pose)
