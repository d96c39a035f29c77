"""JSON document store for named spatial frames.

Document schema:
{
  "version": 1,
  "frames": [
    {
      "id": "anchor-a",
      "pose": {"position": [x, y, z], "rotation_wxyz": [w, x, y, z]},
      "accuracy": [ax, ay, az],          # optional, absent means exact;
                                         # null (or a null component) means unknown
      "strategy": {...}                  # optional, see configuration()
    }
  ]
}

Strategies are stored as configuration only (mode, frame ids, update
frequency). Poses of aligned frames are saved as last resolved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import numpy as np

from ..control.frame import ReferenceFrame
from ..control.pose import Pose, as_accuracy, exact_accuracy, infinite_accuracy
from ..strategies.multi_parent import MultiParentAlignmentMode, MultiParentAlignmentStrategy

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


@dataclass(slots=True)
class SpatialFrameRecord:
    id: str
    pose: Pose
    accuracy: Optional[np.ndarray] = None
    strategy: Optional[dict[str, Any]] = None


def pose_to_payload(pose: Pose) -> dict[str, list[float]]:
    return {
        "position": [float(v) for v in pose.position],
        "rotation_wxyz": [float(v) for v in pose.rotation],
    }


def _parse_pose_payload(payload: Any, frame_id: str) -> Pose:
    if not isinstance(payload, dict):
        raise ValueError(f"frame '{frame_id}': pose must be an object")
    position = payload.get("position")
    rotation = payload.get("rotation_wxyz", payload.get("rotation"))
    if position is None or rotation is None:
        raise ValueError(f"frame '{frame_id}': pose needs position and rotation_wxyz")
    try:
        return Pose(position=position, rotation=rotation)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"frame '{frame_id}': invalid pose: {exc}") from exc


def _parse_accuracy_payload(value: Any) -> np.ndarray:
    if value is None:
        return infinite_accuracy()
    if isinstance(value, list):
        value = [np.inf if v is None else v for v in value]
    return as_accuracy(value)


def _accuracy_to_payload(accuracy: np.ndarray) -> Optional[list[Optional[float]]]:
    # JSON has no inf; unknown components are written as null.
    if not np.isfinite(accuracy).any():
        return None
    return [float(v) if np.isfinite(v) else None for v in accuracy]


def _parse_record(payload: Any, index: int) -> SpatialFrameRecord:
    if not isinstance(payload, dict):
        raise ValueError(f"frames[{index}] must be an object")
    frame_id = payload.get("id")
    if not isinstance(frame_id, str) or not frame_id.strip():
        raise ValueError(f"frames[{index}]: id must be a non-empty string")

    pose = _parse_pose_payload(payload.get("pose"), frame_id)

    accuracy = None
    if "accuracy" in payload:
        try:
            accuracy = _parse_accuracy_payload(payload["accuracy"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"frame '{frame_id}': invalid accuracy: {exc}") from exc

    strategy = payload.get("strategy")
    if strategy is not None and not isinstance(strategy, dict):
        raise ValueError(f"frame '{frame_id}': strategy must be an object")
    return SpatialFrameRecord(id=frame_id, pose=pose, accuracy=accuracy, strategy=strategy)


def _record_to_payload(record: SpatialFrameRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {"id": record.id, "pose": pose_to_payload(record.pose)}
    if record.accuracy is not None:
        payload["accuracy"] = _accuracy_to_payload(record.accuracy)
    if record.strategy is not None:
        payload["strategy"] = dict(record.strategy)
    return payload


class JsonFrameStore:
    """In-memory set of frame records with JSON load/save."""

    def __init__(self, records: Iterable[SpatialFrameRecord] = ()):
        self._records: dict[str, SpatialFrameRecord] = {}
        for record in records:
            self.save_frame(record)

    def save_frame(self, record: SpatialFrameRecord) -> None:
        self._records[record.id] = record

    def save_reference_frame(
        self,
        frame: ReferenceFrame,
        strategy: Optional[MultiParentAlignmentStrategy] = None,
    ) -> None:
        self.save_frame(
            SpatialFrameRecord(
                id=frame.id,
                pose=frame.pose,
                accuracy=frame.accuracy,
                strategy=None if strategy is None else strategy.configuration(),
            )
        )

    def get(self, frame_id: str) -> Optional[SpatialFrameRecord]:
        return self._records.get(frame_id)

    def remove(self, frame_id: str) -> bool:
        return self._records.pop(frame_id, None) is not None

    def records(self) -> list[SpatialFrameRecord]:
        return list(self._records.values())

    def build_frames(self) -> dict[str, ReferenceFrame]:
        return {
            r.id: ReferenceFrame(r.id, r.pose, exact_accuracy() if r.accuracy is None else r.accuracy)
            for r in self._records.values()
        }

    def dumps(self) -> str:
        doc = {
            "version": DOCUMENT_VERSION,
            "frames": [_record_to_payload(r) for r in self._records.values()],
        }
        return json.dumps(doc, indent=2)

    @classmethod
    def loads(cls, text: str) -> JsonFrameStore:
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid frames JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise ValueError(f"frames document root must be an object, got {type(doc).__name__}")
        version = doc.get("version", DOCUMENT_VERSION)
        if version != DOCUMENT_VERSION:
            raise ValueError(f"unsupported frames document version: {version!r}")
        frames = doc.get("frames", [])
        if not isinstance(frames, list):
            raise ValueError("'frames' must be a list")

        store = cls()
        for index, payload in enumerate(frames):
            record = _parse_record(payload, index)
            if store.get(record.id) is not None:
                raise ValueError(f"duplicate frame id: {record.id!r}")
            store.save_frame(record)
        return store

    def save(self, path: str | os.PathLike[str], *, atomic_write: bool = True) -> None:
        path_obj = Path(os.fspath(path))
        text = self.dumps()
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        if atomic_write:
            tmp_path = path_obj.with_name(f".{path_obj.name}.tmp.{os.getpid()}")
            with tmp_path.open("w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path_obj)
        else:
            path_obj.write_text(text, encoding="utf-8")
        logger.info("[STORE] saved %d frames to %s", len(self._records), path_obj)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> JsonFrameStore:
        path_obj = Path(os.fspath(path))
        try:
            text = path_obj.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"failed to read frames document {path_obj}: {exc}") from exc
        store = cls.loads(text)
        logger.info("[STORE] loaded %d frames from %s", len(store._records), path_obj)
        return store


def apply_strategy_configuration(
    strategy: MultiParentAlignmentStrategy,
    config: Mapping[str, Any],
    frames_by_id: Mapping[str, ReferenceFrame],
) -> None:
    """Restore a saved configuration onto a live strategy.

    Frame ids are resolved against frames_by_id; unknown ids are rejected.
    """
    kind = config.get("type", MultiParentAlignmentStrategy.strategy_type)
    if kind != MultiParentAlignmentStrategy.strategy_type:
        raise ValueError(f"unsupported strategy type: {kind!r}")

    try:
        mode = MultiParentAlignmentMode(config.get("mode", MultiParentAlignmentMode.NEAREST_NEIGHBOR.value))
    except ValueError as exc:
        raise ValueError(f"unsupported multi-parent mode: {config.get('mode')!r}") from exc

    def lookup(frame_id: Any) -> ReferenceFrame:
        frame = frames_by_id.get(frame_id)
        if frame is None:
            raise ValueError(f"strategy references unknown frame id: {frame_id!r}")
        return frame

    ids = config.get("reference_frames", [])
    if not isinstance(ids, list):
        raise ValueError("strategy 'reference_frames' must be a list of frame ids")
    frames = [lookup(i) for i in ids]
    reference_id = config.get("reference_frame")
    reference = None if reference_id is None else lookup(reference_id)

    if "update_frequency" in config:
        strategy.update_frequency = float(config["update_frequency"])
    strategy.mode = mode
    strategy.reference_frame = reference
    strategy.reference_frames = frames
