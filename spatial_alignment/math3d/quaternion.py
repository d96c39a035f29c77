"""Quaternion helpers, [w, x, y, z] order, right-handed coordinates."""

from __future__ import annotations

import math

import numpy as np

_IDENTITY = (1.0, 0.0, 0.0, 0.0)


def q_identity() -> np.ndarray:
    return np.array(_IDENTITY, dtype=np.float64)


def q_normalize(q: np.ndarray) -> np.ndarray:
    """Return q scaled to unit length.

    Raises ValueError for a (near) zero quaternion; a rotation cannot be
    recovered from it.
    """
    q = np.asarray(q, dtype=np.float64).reshape(-1)
    if q.size != 4:
        raise ValueError(f"quaternion needs 4 components, got {q.size}")
    n = float(np.linalg.norm(q))
    if not math.isfinite(n) or n < 1e-12:
        raise ValueError(f"cannot normalize quaternion {q.tolist()!r}")
    return q / n


def q_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def axis_angle_to_q(axis: np.ndarray, angle_rad: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=np.float64).reshape(3)
    n = float(np.linalg.norm(axis))
    if n < 1e-12:
        return q_identity()
    half = 0.5 * float(angle_rad)
    s = math.sin(half) / n
    return np.array(
        [math.cos(half), axis[0] * s, axis[1] * s, axis[2] * s],
        dtype=np.float64,
    )


def euler_yaw_pitch_roll_to_q(
    yaw_deg: float, pitch_deg: float, roll_deg: float
) -> np.ndarray:
    """
    Axes: x right, y up, z forward.
    Yaw about +y, pitch about +x, roll about +z, composed q = yaw * pitch * roll.
    """
    q_yaw = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), math.radians(yaw_deg))
    q_pitch = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), math.radians(pitch_deg))
    q_roll = axis_angle_to_q(np.array([0.0, 0.0, 1.0]), math.radians(roll_deg))
    return q_normalize(q_mul(q_mul(q_yaw, q_pitch), q_roll))


def q_angle_deg(a: np.ndarray, b: np.ndarray) -> float:
    """Smallest rotation angle between two unit quaternions, in degrees."""
    d = abs(float(np.dot(a, b)))
    return math.degrees(2.0 * math.acos(min(1.0, d)))
