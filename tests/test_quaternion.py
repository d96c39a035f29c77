import numpy as np
import pytest

from spatial_alignment.math3d.quaternion import (
    axis_angle_to_q,
    euler_yaw_pitch_roll_to_q,
    q_angle_deg,
    q_identity,
    q_mul,
    q_normalize,
)


def test_q_normalize_zero_raises():
    with pytest.raises(ValueError, match="normalize"):
        q_normalize(np.zeros(4, dtype=np.float64))


def test_q_normalize_scales_to_unit_length():
    q = q_normalize(np.array([2.0, 0.0, 0.0, 0.0], dtype=np.float64))
    np.testing.assert_allclose(q, q_identity())


def test_yaw_90_matches_axis_angle_about_up():
    q = euler_yaw_pitch_roll_to_q(90.0, 0.0, 0.0)
    ref = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), np.pi / 2.0)
    np.testing.assert_allclose(q, ref, atol=1e-12)


def test_identity_is_neutral_for_q_mul():
    q = euler_yaw_pitch_roll_to_q(30.0, -10.0, 5.0)
    np.testing.assert_allclose(q_mul(q_identity(), q), q, atol=1e-12)


def test_q_angle_deg_ignores_double_cover_sign():
    q = euler_yaw_pitch_roll_to_q(45.0, 0.0, 0.0)
    assert q_angle_deg(q, -q) == pytest.approx(0.0, abs=1e-5)
    assert q_angle_deg(q_identity(), q) == pytest.approx(45.0, abs=1e-6)
