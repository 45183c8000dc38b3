from fractalmarch.config import RenderConfig, load_config, normalise_config
from fractalmarch.core import march_pixel, pack_pixel, shade_pixel, tone_map
from fractalmarch.errors import (
    ConfigError,
    EncodingHandoffError,
    FractalMarchError,
    RenderCancelled,
    ResourceError,
)
from fractalmarch.pipeline import render_frame, render_sequence

__version__ = "0.1.0"
