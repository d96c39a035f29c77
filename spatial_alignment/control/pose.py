"""Pose and accuracy value types shared by every alignment strategy."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..math3d.quaternion import euler_yaw_pitch_roll_to_q, q_identity, q_normalize


def _frozen_vector(values, size: int, name: str) -> np.ndarray:
    v = np.array(values, dtype=np.float64).reshape(-1)
    if v.size != size:
        raise ValueError(f"{name} needs {size} components, got {v.size}")
    if not np.isfinite(v).all():
        raise ValueError(f"{name} must be finite, got {v.tolist()!r}")
    v.flags.writeable = False
    return v


@dataclass(frozen=True, slots=True, eq=False)
class Pose:
    """Rigid pose in world space.

    position:
      3D translation [x, y, z], meters.
    rotation:
      Orientation quaternion [w, x, y, z], normalized on construction.

    Both arrays are read-only; a new pose replaces an old one wholesale.
    """

    position: np.ndarray
    rotation: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _frozen_vector(self.position, 3, "position"))
        rotation = q_normalize(_frozen_vector(self.rotation, 4, "rotation"))
        rotation.flags.writeable = False
        object.__setattr__(self, "rotation", rotation)

    @classmethod
    def from_euler(
        cls,
        position,
        yaw_deg: float = 0.0,
        pitch_deg: float = 0.0,
        roll_deg: float = 0.0,
    ) -> Pose:
        return cls(position=position, rotation=euler_yaw_pitch_roll_to_q(yaw_deg, pitch_deg, roll_deg))

    def squared_distance_to(self, point: np.ndarray) -> float:
        d = self.position - np.asarray(point, dtype=np.float64).reshape(3)
        return float(np.dot(d, d))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pose):
            return NotImplemented
        return bool(
            np.array_equal(self.position, other.position)
            and np.array_equal(self.rotation, other.rotation)
        )

    def __hash__(self) -> int:
        return hash((self.position.tobytes(), self.rotation.tobytes()))

    def __repr__(self) -> str:
        p = self.position
        q = self.rotation
        return (
            f"Pose(position=[{p[0]:.3f}, {p[1]:.3f}, {p[2]:.3f}], "
            f"rotation=[{q[0]:.3f}, {q[1]:.3f}, {q[2]:.3f}, {q[3]:.3f}])"
        )


def identity_pose() -> Pose:
    return Pose(position=np.zeros(3, dtype=np.float64), rotation=q_identity())


# Accuracy is a per-axis uncertainty vector; lower is better, inf is unknown.


def infinite_accuracy() -> np.ndarray:
    return np.full(3, np.inf, dtype=np.float64)


def exact_accuracy() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


def as_accuracy(value) -> np.ndarray:
    """Coerce a scalar or 3-vector into an accuracy vector."""
    a = np.array(value, dtype=np.float64).reshape(-1)
    if a.size == 1:
        a = np.full(3, float(a[0]), dtype=np.float64)
    if a.size != 3:
        raise ValueError(f"accuracy needs 1 or 3 components, got {a.size}")
    if np.isnan(a).any() or (a < 0.0).any():
        raise ValueError(f"accuracy must be >= 0, got {a.tolist()!r}")
    return a


def accuracy_equal(a: np.ndarray, b: np.ndarray) -> bool:
    return bool(np.array_equal(a, b))


def is_accuracy_known(a: np.ndarray) -> bool:
    return bool(np.isfinite(a).all())
