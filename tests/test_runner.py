import json

import pytest

from spatial_alignment.runner import main


def _write_frames(path, frames):
    path.write_text(json.dumps({"version": 1, "frames": frames}), encoding="utf-8")


def _frame(frame_id, x, **extra):
    payload = {
        "id": frame_id,
        "pose": {"position": [x, 0.0, 0.0], "rotation_wxyz": [1.0, 0.0, 0.0, 0.0]},
    }
    payload.update(extra)
    return payload


def test_main_aligns_target_and_saves_document(tmp_path):
    frames_path = tmp_path / "frames.json"
    out_path = tmp_path / "out.json"
    _write_frames(
        frames_path,
        [_frame("left", -2.0), _frame("right", 2.0), _frame("content", 0.0)],
    )

    main(
        [
            "--frames", str(frames_path),
            "--target", "content",
            "--duration-s", "0.05",
            "--tick-hz", "200",
            "--viewpoint-start", "-2", "0", "0",
            "--viewpoint-end", "-1.5", "0", "0",
            "--save-frames", str(out_path),
            "--log-level", "warning",
        ]
    )

    doc = json.loads(out_path.read_text(encoding="utf-8"))
    content = next(f for f in doc["frames"] if f["id"] == "content")
    assert content["pose"]["position"] == [-2.0, 0.0, 0.0]
    assert content["strategy"]["reference_frames"] == ["left", "right"]


def test_main_uses_saved_strategy_config(tmp_path):
    frames_path = tmp_path / "frames.json"
    out_path = tmp_path / "out.json"
    _write_frames(
        frames_path,
        [
            _frame("left", -2.0),
            _frame("right", 2.0),
            _frame(
                "content",
                0.0,
                strategy={"type": "multi-parent", "reference_frames": ["right"], "update_frequency": 0.0},
            ),
        ],
    )

    main(
        [
            "--frames", str(frames_path),
            "--target", "content",
            "--duration-s", "0.02",
            "--viewpoint-start", "-2", "0", "0",
            "--viewpoint-end", "-2", "0", "0",
            "--save-frames", str(out_path),
        ]
    )

    doc = json.loads(out_path.read_text(encoding="utf-8"))
    content = next(f for f in doc["frames"] if f["id"] == "content")
    assert content["pose"]["position"] == [2.0, 0.0, 0.0]
    assert content["strategy"]["update_frequency"] == 0.0


def test_main_rejects_unknown_target(tmp_path):
    frames_path = tmp_path / "frames.json"
    _write_frames(frames_path, [_frame("left", -2.0)])
    with pytest.raises(SystemExit):
        main(["--frames", str(frames_path), "--target", "missing", "--duration-s", "0.01"])
