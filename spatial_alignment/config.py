"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from .strategies.multi_parent import MultiParentAlignmentMode

Vec3 = Tuple[float, float, float]

_MODE_CHOICES = [m.value for m in MultiParentAlignmentMode]


@dataclass(frozen=True)
class AppConfig:
    frames: str
    target: str
    mode: str = MultiParentAlignmentMode.NEAREST_NEIGHBOR.value
    update_frequency: float = 0.02
    tick_hz: float = 60.0
    duration_s: float = 10.0
    status_hz: float = 1.0
    viewpoint_start: Vec3 = (-2.0, 1.6, 0.0)
    viewpoint_end: Vec3 = (2.0, 1.6, 0.0)
    viewpoint_period_s: float = 4.0
    save_frames: str = ""
    log_level: str = "info"


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_FLOAT_FIELDS = {
    "update_frequency",
    "tick_hz",
    "duration_s",
    "status_hz",
    "viewpoint_period_s",
}
_VEC3_FIELDS = {"viewpoint_start", "viewpoint_end"}
_STRING_FIELDS = {"frames", "target", "mode", "save_frames", "log_level"}


def _parse_vec3(value: Any, key: str) -> Vec3:
    if isinstance(value, str):
        value = [p for p in value.replace(",", " ").split() if p]
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"config key '{key}' expects 3 numbers, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def _coerce_config_value(key: str, value: Any) -> Any:
    try:
        if key in _FLOAT_FIELDS:
            return float(value)
        if key in _VEC3_FIELDS:
            return _parse_vec3(value, key)
        if key in _STRING_FIELDS:
            return "" if value is None else str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for config key '{key}': {value!r}") from exc
    raise ValueError(f"unsupported config key '{key}'")


def _normalize_config_key(raw_key: Any) -> str:
    if not isinstance(raw_key, str):
        raise ValueError(f"config key must be string, got {type(raw_key).__name__}")
    key = raw_key.strip().replace("-", "_")
    if not key:
        raise ValueError("config key cannot be empty")
    return key


def _load_yaml_config(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ValueError(f"--config file not found: {p}")
    if not p.is_file():
        raise ValueError(f"--config must point to a file: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"failed to read --config file {p}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse YAML config {p}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"--config root must be a mapping/object, got {type(loaded).__name__}")

    normalized: dict[str, Any] = {}
    for raw_key, raw_value in loaded.items():
        key = _normalize_config_key(raw_key)
        if key not in _APP_CONFIG_FIELDS:
            raise ValueError(f"unknown config key in {p}: {raw_key!r}")
        normalized[key] = _coerce_config_value(key, raw_value)
    return normalized


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Align a spatial frame to the nearest of several anchor frames."
    )
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument(
        "--frames",
        required=False,
        default=None,
        help="JSON spatial frames document to load.",
    )
    ap.add_argument(
        "--target",
        required=False,
        default=None,
        help="Id of the frame to align. Its saved strategy config is used when present.",
    )
    ap.add_argument(
        "--mode",
        choices=_MODE_CHOICES,
        default=MultiParentAlignmentMode.NEAREST_NEIGHBOR.value,
        help="Multi-parent alignment mode.",
    )
    ap.add_argument(
        "--update-frequency",
        type=float,
        default=0.02,
        help="Seconds between recomputes (0 = every tick).",
    )
    ap.add_argument("--tick-hz", type=float, default=60.0, help="Driver tick rate in Hz.")
    ap.add_argument(
        "--duration-s",
        type=float,
        default=10.0,
        help="How long to run in seconds (0 = until interrupted).",
    )
    ap.add_argument(
        "--status-hz",
        type=float,
        default=1.0,
        help="Status log rate in Hz (0 disables status lines).",
    )
    ap.add_argument(
        "--viewpoint-start",
        nargs=3,
        type=float,
        metavar=("X", "Y", "Z"),
        default=(-2.0, 1.6, 0.0),
        help="Simulated viewpoint path start in meters, e.g. --viewpoint-start -2 1.6 0",
    )
    ap.add_argument(
        "--viewpoint-end",
        nargs=3,
        type=float,
        metavar=("X", "Y", "Z"),
        default=(2.0, 1.6, 0.0),
        help="Simulated viewpoint path end in meters.",
    )
    ap.add_argument(
        "--viewpoint-period-s",
        type=float,
        default=4.0,
        help="Seconds for the viewpoint to walk from start to end.",
    )
    ap.add_argument(
        "--save-frames",
        type=str,
        default="",
        help="Write the frames document here on exit (aligned pose + strategy config).",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )
    return ap


def validate_config(cfg: AppConfig) -> None:
    if not str(cfg.frames).strip():
        raise ValueError("--frames must be provided (CLI or --config)")
    if not str(cfg.target).strip():
        raise ValueError("--target must be provided (CLI or --config)")
    if cfg.mode not in _MODE_CHOICES:
        raise ValueError(f"--mode must be one of {'|'.join(_MODE_CHOICES)}, got {cfg.mode}")
    if not cfg.update_frequency >= 0.0:
        raise ValueError(f"--update-frequency must be >= 0, got {cfg.update_frequency}")
    if not cfg.tick_hz > 0.0:
        raise ValueError(f"--tick-hz must be > 0, got {cfg.tick_hz}")
    if cfg.duration_s < 0.0:
        raise ValueError(f"--duration-s must be >= 0, got {cfg.duration_s}")
    if cfg.status_hz < 0.0:
        raise ValueError(f"--status-hz must be >= 0, got {cfg.status_hz}")
    if not cfg.viewpoint_period_s > 0.0:
        raise ValueError(f"--viewpoint-period-s must be > 0, got {cfg.viewpoint_period_s}")
    for name, vec in (("--viewpoint-start", cfg.viewpoint_start), ("--viewpoint-end", cfg.viewpoint_end)):
        if not all(math.isfinite(v) for v in vec):
            raise ValueError(f"{name} must be finite numbers, got {vec}")
    if cfg.log_level not in {"debug", "info", "warning", "error"}:
        raise ValueError(f"--log-level must be debug|info|warning|error, got {cfg.log_level}")


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    yaml_cfg: dict[str, Any] = {}
    yaml_error: Optional[str] = None
    if bootstrap_ns.config:
        try:
            yaml_cfg = _load_yaml_config(bootstrap_ns.config)
        except ValueError as exc:
            yaml_error = str(exc)

    ap = build_arg_parser()
    if yaml_error is not None:
        ap.error(yaml_error)
    if yaml_cfg:
        ap.set_defaults(**yaml_cfg)
    args = ap.parse_args(argv)

    cfg = AppConfig(
        frames=str(args.frames or ""),
        target=str(args.target or ""),
        mode=args.mode,
        update_frequency=float(args.update_frequency),
        tick_hz=float(args.tick_hz),
        duration_s=float(args.duration_s),
        status_hz=float(args.status_hz),
        viewpoint_start=tuple(args.viewpoint_start),
        viewpoint_end=tuple(args.viewpoint_end),
        viewpoint_period_s=float(args.viewpoint_period_s),
        save_frames=args.save_frames,
        log_level=args.log_level,
    )
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
