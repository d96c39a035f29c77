"""
Spatial alignment demo:
- Load named spatial frames from a JSON document
- Align one target frame to the remaining frames (multi-parent, nearest neighbor)
- A simulated viewpoint walks between two points so the nearest parent changes
- The driver ticks the strategy at a throttled rate and logs state changes
- Optionally save the document back with the aligned pose and strategy config
"""

from __future__ import annotations

import logging

import numpy as np

from .config import AppConfig, parse_args
from .control.driver import AlignmentDriver
from .control.frame import ReferenceFrame
from .control.target import FrameTarget
from .control.viewpoint_provider import LinearPathViewpointProvider
from .persistence.json_store import JsonFrameStore, apply_strategy_configuration
from .strategies.multi_parent import MultiParentAlignmentMode, MultiParentAlignmentStrategy

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_strategy(
    cfg: AppConfig,
    store: JsonFrameStore,
    frames: dict[str, ReferenceFrame],
    viewpoint_provider,
) -> MultiParentAlignmentStrategy:
    target_frame = frames.get(cfg.target)
    if target_frame is None:
        raise SystemExit(f"--target {cfg.target!r} not found in {cfg.frames}")

    strategy = MultiParentAlignmentStrategy(
        target=FrameTarget(target_frame),
        mode=MultiParentAlignmentMode(cfg.mode),
        viewpoint_provider=viewpoint_provider,
        update_frequency=cfg.update_frequency,
        name=cfg.target,
    )

    saved = store.get(cfg.target).strategy
    if saved is not None:
        apply_strategy_configuration(strategy, saved, frames)
        logger.info("[SCENE] restored saved strategy config for %s", cfg.target)
    else:
        strategy.reference_frames = [f for fid, f in frames.items() if fid != cfg.target]

    logger.info(
        "[SCENE] target=%s mode=%s parents=%s update_frequency=%.3fs",
        cfg.target,
        strategy.mode.value,
        [f.id for f in strategy.reference_frames],
        strategy.update_frequency,
    )
    return strategy


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    try:
        store = JsonFrameStore.load(cfg.frames)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    frames = store.build_frames()

    viewpoint = LinearPathViewpointProvider(
        start=np.array(cfg.viewpoint_start, dtype=np.float64),
        end=np.array(cfg.viewpoint_end, dtype=np.float64),
        period_s=cfg.viewpoint_period_s,
    )
    strategy = build_strategy(cfg, store, frames, viewpoint)
    driver = AlignmentDriver([strategy], status_hz=cfg.status_hz)

    try:
        driver.run(tick_hz=cfg.tick_hz, duration_s=cfg.duration_s)
    except KeyboardInterrupt:
        logger.info("[DRIVER] interrupted")
    finally:
        driver.close()
        if cfg.save_frames:
            store.save_reference_frame(frames[cfg.target], strategy)
            store.save(cfg.save_frames)


if __name__ == "__main__":
    main()
