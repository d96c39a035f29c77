import numpy as np
import pytest

from spatial_alignment.control.anchor_registry import AnchorRegistry
from spatial_alignment.control.driver import AlignmentDriver
from spatial_alignment.control.frame import ReferenceFrame
from spatial_alignment.control.pose import Pose
from spatial_alignment.control.target import RecordingTarget
from spatial_alignment.control.viewpoint_provider import (
    FixedViewpointProvider,
    LinearPathViewpointProvider,
)
from spatial_alignment.strategies.multi_parent import MultiParentAlignmentStrategy


class _FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def sleep(self, dt: float) -> None:
        self.t += dt


def _pose(x: float) -> Pose:
    return Pose(position=[x, 0.0, 0.0], rotation=[1.0, 0.0, 0.0, 0.0])


def test_linear_path_viewpoint_walks_out_and_back():
    clock = _FakeClock()
    provider = LinearPathViewpointProvider(
        start=np.array([0.0, 0.0, 0.0]),
        end=np.array([4.0, 0.0, 0.0]),
        period_s=2.0,
        clock=clock,
    )
    positions = []
    for t in (0.0, 1.0, 2.0, 3.0, 4.0):
        clock.t = t
        positions.append(float(provider.get_pose().position[0]))
    assert positions == pytest.approx([0.0, 2.0, 4.0, 2.0, 0.0])


def test_linear_path_viewpoint_rejects_non_positive_period():
    with pytest.raises(ValueError, match="period_s"):
        LinearPathViewpointProvider(np.zeros(3), np.ones(3), period_s=0.0)


def test_driver_applies_anchor_reports_and_ticks_strategies():
    registry = AnchorRegistry()
    target = RecordingTarget()
    strategy = MultiParentAlignmentStrategy(
        target=target,
        viewpoint_provider=FixedViewpointProvider(_pose(0.0)),
        update_frequency=0.5,
    )
    registry.bind(strategy)
    driver = AlignmentDriver([strategy], anchor_registry=registry, status_hz=0.0)

    registry.report_located("a", _pose(2.0))
    assert driver.tick(0.0) == 1
    assert driver.tick(0.1) == 0
    assert driver.tick(0.6) == 1
    assert driver.tick_count == 3
    assert driver.recompute_count == 2
    np.testing.assert_allclose(target.pose.position, [2.0, 0.0, 0.0])


def test_driver_run_follows_moving_viewpoint_until_duration():
    clock = _FakeClock()
    near_start = ReferenceFrame("near-start", _pose(-1.0))
    near_end = ReferenceFrame("near-end", _pose(5.0))
    viewpoint = LinearPathViewpointProvider(
        start=np.array([-1.0, 0.0, 0.0]),
        end=np.array([5.0, 0.0, 0.0]),
        period_s=1.0,
        clock=clock,
    )
    target = RecordingTarget()
    strategy = MultiParentAlignmentStrategy(
        target=target,
        reference_frames=[near_start, near_end],
        viewpoint_provider=viewpoint,
        update_frequency=0.0,
        clock=clock,
    )
    driver = AlignmentDriver([strategy], clock=clock, status_hz=2.0)

    driver.run(tick_hz=10.0, duration_s=1.0, sleep=clock.sleep)

    assert driver.tick_count == pytest.approx(10, abs=1)
    assert target.poses[0] is near_start.pose
    assert target.poses[-1] is near_end.pose


def test_driver_remove_and_close_detach_strategies():
    a = MultiParentAlignmentStrategy(target=RecordingTarget())
    b = MultiParentAlignmentStrategy(target=RecordingTarget())
    driver = AlignmentDriver([a, b], status_hz=0.0)

    driver.remove(a)
    assert not a.attached
    assert driver.strategies == [b]

    driver.close()
    assert not b.attached


def test_driver_run_rejects_non_positive_tick_rate():
    with pytest.raises(ValueError, match="tick_hz"):
        AlignmentDriver().run(tick_hz=0.0, duration_s=1.0)


def test_status_line_reports_accuracy(caplog):
    frame = ReferenceFrame("a", _pose(1.0), accuracy=[0.02, 0.05, 0.01])
    strategy = MultiParentAlignmentStrategy(
        target=RecordingTarget(),
        reference_frames=[frame],
        viewpoint_provider=FixedViewpointProvider(_pose(0.0)),
        update_frequency=0.0,
        name="content",
    )
    driver = AlignmentDriver([strategy], status_hz=1.0)

    with caplog.at_level("INFO", logger="spatial_alignment.control.driver"):
        driver.tick(0.0)
        strategy.reference_frames = []
        driver.tick(1.0)

    lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("[DRIVER]")]
    assert "state=tracking accuracy=0.050m" in lines[0]
    assert "state=unresolved accuracy=unknown" in lines[1]
