"""Reference frames: identified, pose-bearing candidates for alignment."""

from __future__ import annotations

import numpy as np

from .pose import Pose, as_accuracy, exact_accuracy, identity_pose


class ReferenceFrame:
    """A named source-of-truth pose.

    The pose is replaced (never mutated) when the frame moves, for example when
    a cloud anchor is re-located. accuracy describes how much the pose can be
    trusted; a hand-placed frame defaults to exact.
    """

    __slots__ = ("id", "_pose", "_accuracy")

    def __init__(self, id: str, pose: Pose | None = None, accuracy=None):
        if not isinstance(id, str) or not id.strip():
            raise ValueError(f"frame id must be a non-empty string, got {id!r}")
        self.id = id
        self._pose = pose if pose is not None else identity_pose()
        self._accuracy = exact_accuracy() if accuracy is None else as_accuracy(accuracy)

    @property
    def pose(self) -> Pose:
        return self._pose

    @property
    def position(self) -> np.ndarray:
        return self._pose.position

    @property
    def accuracy(self) -> np.ndarray:
        return self._accuracy

    def set_pose(self, pose: Pose, accuracy=None) -> None:
        if not isinstance(pose, Pose):
            raise ValueError(f"frame '{self.id}' expects a Pose, got {type(pose).__name__}")
        self._pose = pose
        if accuracy is not None:
            self._accuracy = as_accuracy(accuracy)

    def __repr__(self) -> str:
        return f"ReferenceFrame(id={self.id!r}, pose={self._pose!r})"
