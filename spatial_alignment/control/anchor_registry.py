"""Located-anchor bookkeeping between a cloud anchor service and strategies.

Anchor services report results asynchronously, usually from their own worker
thread. Reports are queued under a lock and only applied on the tick thread by
``apply_pending()``, so strategies never see cross-thread mutation.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from .frame import ReferenceFrame
from .pose import Pose, as_accuracy

logger = logging.getLogger(__name__)


def _check_anchor_id(anchor_id) -> None:
    if not isinstance(anchor_id, str) or not anchor_id.strip():
        raise ValueError(f"anchor id must be a non-empty string, got {anchor_id!r}")


class AnchorRegistry:
    """Create-or-update table of anchor frames, keyed by anchor id."""

    def __init__(self, frames: Iterable[ReferenceFrame] = ()):
        self._lock = threading.Lock()
        self._pending: list[tuple[str, Optional[Pose], object]] = []
        self._frames: dict[str, ReferenceFrame] = {}
        self._strategies: list = []
        for frame in frames:
            self._frames[frame.id] = frame

    # Any thread

    def report_located(self, anchor_id: str, pose: Pose, accuracy=None) -> None:
        _check_anchor_id(anchor_id)
        if not isinstance(pose, Pose):
            raise ValueError(f"anchor '{anchor_id}' expects a Pose, got {type(pose).__name__}")
        if accuracy is not None:
            accuracy = as_accuracy(accuracy)
        with self._lock:
            self._pending.append((anchor_id, pose, accuracy))

    def report_removed(self, anchor_id: str) -> None:
        _check_anchor_id(anchor_id)
        with self._lock:
            self._pending.append((anchor_id, None, None))

    # Tick thread

    def bind(self, strategy) -> None:
        """Keep strategy.reference_frames in sync with the located anchors."""
        self._strategies.append(strategy)
        strategy.reference_frames = self.frames()

    def unbind(self, strategy) -> None:
        self._strategies = [s for s in self._strategies if s is not strategy]

    def frames(self) -> list[ReferenceFrame]:
        return list(self._frames.values())

    def get(self, anchor_id: str) -> Optional[ReferenceFrame]:
        return self._frames.get(anchor_id)

    def apply_pending(self) -> int:
        """Apply queued reports. Returns the number of reports applied."""
        with self._lock:
            pending, self._pending = self._pending, []
        if not pending:
            return 0

        membership_changed = False
        try:
            for anchor_id, pose, accuracy in pending:
                if pose is None:
                    if self._frames.pop(anchor_id, None) is not None:
                        membership_changed = True
                        logger.info("[ANCHOR] removed %s", anchor_id)
                    continue
                frame = self._frames.get(anchor_id)
                if frame is None:
                    self._frames[anchor_id] = ReferenceFrame(anchor_id, pose, accuracy)
                    membership_changed = True
                    logger.info("[ANCHOR] located %s at %r", anchor_id, pose)
                else:
                    frame.set_pose(pose, accuracy)
                    logger.debug("[ANCHOR] updated %s at %r", anchor_id, pose)
        finally:
            # Pose updates are picked up by the next throttled tick; only a
            # membership change needs the candidate sets replaced.
            if membership_changed:
                frames = self.frames()
                for strategy in self._strategies:
                    strategy.reference_frames = frames
        return len(pending)
