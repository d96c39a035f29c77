import pytest

from spatial_alignment.config import AppConfig, parse_args, validate_config


def test_validate_config_accepts_defaults():
    cfg = AppConfig(frames="frames.json", target="content")
    validate_config(cfg)


def test_validate_config_requires_frames_and_target():
    with pytest.raises(ValueError, match="--frames"):
        validate_config(AppConfig(frames="", target="content"))
    with pytest.raises(ValueError, match="--target"):
        validate_config(AppConfig(frames="frames.json", target=" "))


def test_validate_config_rejects_negative_update_frequency():
    cfg = AppConfig(frames="frames.json", target="content", update_frequency=-0.1)
    with pytest.raises(ValueError, match="--update-frequency"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_mode():
    cfg = AppConfig(frames="frames.json", target="content", mode="centroid")
    with pytest.raises(ValueError, match="--mode"):
        validate_config(cfg)


def test_validate_config_rejects_non_positive_tick_hz():
    cfg = AppConfig(frames="frames.json", target="content", tick_hz=0.0)
    with pytest.raises(ValueError, match="--tick-hz"):
        validate_config(cfg)


def test_validate_config_rejects_non_finite_viewpoint():
    cfg = AppConfig(frames="frames.json", target="content", viewpoint_end=(0.0, float("inf"), 0.0))
    with pytest.raises(ValueError, match="--viewpoint-end"):
        validate_config(cfg)


def test_parse_args_reads_yaml_config(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "frames: scenes/lobby.json",
                "target: content",
                "update-frequency: 0",
                "tick_hz: 30",
                "viewpoint_start: [0.0, 1.5, -1.0]",
                "viewpoint_end: '1, 1.5, 2'",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(["--config", str(cfg_path)])
    assert cfg.frames == "scenes/lobby.json"
    assert cfg.target == "content"
    assert cfg.update_frequency == 0.0
    assert cfg.tick_hz == 30.0
    assert cfg.viewpoint_start == (0.0, 1.5, -1.0)
    assert cfg.viewpoint_end == (1.0, 1.5, 2.0)


def test_parse_args_cli_overrides_yaml(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "frames: scenes/lobby.json",
                "target: content",
                "tick_hz: 30",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(
        [
            "--config",
            str(cfg_path),
            "--tick-hz",
            "90",
            "--viewpoint-start",
            "1",
            "2",
            "3",
        ]
    )
    assert cfg.tick_hz == 90.0
    assert cfg.viewpoint_start == (1.0, 2.0, 3.0)


def test_parse_args_accepts_negative_viewpoint_components():
    cfg = parse_args(
        [
            "--frames",
            "frames.json",
            "--target",
            "content",
            "--viewpoint-start",
            "-2",
            "1.6",
            "-0.5",
            "--viewpoint-end",
            "-1e-3",
            "0",
            "-4",
        ]
    )
    assert cfg.viewpoint_start == (-2.0, 1.6, -0.5)
    assert cfg.viewpoint_end == (-0.001, 0.0, -4.0)


def test_parse_args_rejects_short_viewpoint_vector():
    with pytest.raises(SystemExit):
        parse_args(["--frames", "f.json", "--target", "content", "--viewpoint-start", "1", "2"])


def test_parse_args_rejects_unknown_yaml_key(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("frames: a.json\nbad_key: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        parse_args(["--config", str(cfg_path), "--target", "content"])


def test_parse_args_requires_frames():
    with pytest.raises(SystemExit):
        parse_args(["--target", "content"])
