from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fractalmarch.errors import ConfigError

RENDERERS = ("auto", "cpu", "numpy", "numba")
FRAME_FORMATS = ("pam", "png")
ENCODERS = ("ffmpeg", "opencv")


@dataclass(frozen=True)
class RenderConfig:
    width: int = 960
    height: int = 540
    frame_count: int = 240
    fps: int = 60
    iterations: int = 100
    frames_dir: str = "frames"
    frame_prefix: str = "output-"
    frame_format: str = "pam"
    output_video: str = "output.mp4"
    renderer: str = "auto"
    workers: int = 0
    band_height: int = 32
    frame_workers: int = 1
    encoder: str = "ffmpeg"
    ffmpeg_bin: str = "ffmpeg"
    skip_existing: bool = False

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0 or self.frame_count <= 0:
            raise ConfigError("width/height/frame_count must be positive.")
        if self.fps <= 0:
            raise ConfigError("fps must be positive.")
        if self.iterations <= 0:
            raise ConfigError("iterations must be positive.")
        if self.workers < 0 or self.frame_workers <= 0 or self.band_height <= 0:
            raise ConfigError("workers must be >= 0; frame_workers and band_height must be positive.")
        if self.renderer not in RENDERERS:
            raise ConfigError(f"renderer must be one of: {', '.join(RENDERERS)}")
        if self.frame_format not in FRAME_FORMATS:
            raise ConfigError(f"frame_format must be one of: {', '.join(FRAME_FORMATS)}")
        if self.encoder not in ENCODERS:
            raise ConfigError(f"encoder must be one of: {', '.join(ENCODERS)}")

    @property
    def pad_width(self) -> int:
        """Digits needed so frame names sort lexically; never fewer than 3."""
        return max(3, len(str(self.frame_count - 1)))

    @property
    def frame_pattern(self) -> str:
        """printf-style input pattern for ffmpeg, e.g. ``output-%03d.pam``."""
        return f"{self.frame_prefix}%0{self.pad_width}d.{self.frame_format}"

    def frame_name(self, frame_index: int) -> str:
        return f"{self.frame_prefix}{frame_index:0{self.pad_width}d}.{self.frame_format}"

    def replace(self, **overrides: Any) -> RenderConfig:
        """Copy with ``overrides`` applied; ``None`` values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return normalise_config({**self.to_dict(), **changes})

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


_INT_FIELDS = ("width", "height", "frame_count", "fps", "iterations", "workers", "band_height", "frame_workers")
_STR_FIELDS = ("frames_dir", "frame_prefix", "frame_format", "output_video", "renderer", "encoder", "ffmpeg_bin")


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return RenderConfig().to_dict()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e
    if not isinstance(cfg, dict):
        raise ConfigError("Config JSON must be an object.")
    return cfg


def normalise_config(cfg: Dict[str, Any]) -> RenderConfig:
    known = {f.name for f in dataclasses.fields(RenderConfig)}
    unknown = sorted(set(cfg) - known)
    if unknown:
        raise ConfigError(f"Unknown config field(s): {', '.join(unknown)}")

    out: Dict[str, Any] = {}
    try:
        for k in _INT_FIELDS:
            if k in cfg:
                out[k] = int(cfg[k])
        for k in _STR_FIELDS:
            if k in cfg:
                out[k] = str(cfg[k])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e
    if "skip_existing" in cfg:
        out["skip_existing"] = bool(cfg["skip_existing"])
    if "frame_format" in out:
        out["frame_format"] = out["frame_format"].lower()
    return RenderConfig(**out)
