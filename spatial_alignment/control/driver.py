"""Per-tick driver for a set of alignment strategies."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from .anchor_registry import AnchorRegistry
from .pose import is_accuracy_known
from .strategy import AlignmentStrategy

logger = logging.getLogger(__name__)


class AlignmentDriver:
    def __init__(
        self,
        strategies: Iterable[AlignmentStrategy] = (),
        anchor_registry: Optional[AnchorRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
        status_hz: float = 1.0,
    ):
        self.strategies = list(strategies)
        self.anchor_registry = anchor_registry
        self.clock = clock
        self.status_interval = (1.0 / status_hz) if status_hz > 0.0 else 0.0
        self.last_status_t: Optional[float] = None
        self.tick_count = 0
        self.recompute_count = 0

    def add(self, strategy: AlignmentStrategy) -> None:
        self.strategies.append(strategy)

    def remove(self, strategy: AlignmentStrategy) -> None:
        self.strategies = [s for s in self.strategies if s is not strategy]
        strategy.detach()

    def tick(self, now: float | None = None) -> int:
        """Advance one frame. Returns how many strategies recomputed."""
        if now is None:
            now = self.clock()
        if self.anchor_registry is not None:
            self.anchor_registry.apply_pending()

        ran = 0
        for strategy in self.strategies:
            if strategy.tick(now):
                ran += 1
        self.tick_count += 1
        self.recompute_count += ran

        if self.status_interval > 0.0 and (
            self.last_status_t is None or (now - self.last_status_t) >= self.status_interval
        ):
            for strategy in self.strategies:
                accuracy = strategy.accuracy
                logger.info(
                    "[DRIVER] %s state=%s accuracy=%s pose=%r",
                    strategy.name,
                    strategy.state.value,
                    f"{float(accuracy.max()):.3f}m" if is_accuracy_known(accuracy) else "unknown",
                    strategy.pose,
                )
            self.last_status_t = now
        return ran

    def run(self, tick_hz: float, duration_s: float, sleep: Callable[[float], None] = time.sleep) -> None:
        """Tick at tick_hz until duration_s elapses (duration_s <= 0 runs forever)."""
        if tick_hz <= 0.0:
            raise ValueError(f"tick_hz must be > 0, got {tick_hz}")
        interval = 1.0 / tick_hz
        start = self.clock()
        while duration_s <= 0.0 or (self.clock() - start) < duration_s:
            t = self.clock()
            self.tick(t)
            remaining = interval - (self.clock() - t)
            if remaining > 0.0:
                sleep(remaining)
        logger.info(
            "[DRIVER] stopped after %d ticks, %d recomputes",
            self.tick_count,
            self.recompute_count,
        )

    def close(self) -> None:
        for strategy in self.strategies:
            strategy.detach()
