from __future__ import annotations

import math

import numpy as np

from fractalmarch.core.field import SPHERE_RADIUS
from fractalmarch.core.march import (
    BASE_STEP,
    CAMERA_DEPTH,
    COLOR_GAIN,
    HUE_PHASE,
    HUE_RATE,
    STEP_GAIN,
    wrap_time,
)
from fractalmarch.core.pixel import encode_array
from fractalmarch.core.tone import tone_map_array
from fractalmarch.util.logging_setup import get_logger


def march_array(*, width: int, height: int, t: float, iterations: int) -> np.ndarray:
    """Raw accumulated color for every pixel, shape ``(height, width, 4)``."""
    angle = wrap_time(t) / 2.0
    c = math.cos(angle)
    s_ = math.sin(angle)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    u0 = (xs * 2.0 - width) / height
    v0 = (ys * 2.0 - height) / height

    d = np.zeros((height, width), dtype=np.float64)
    o = np.zeros((height, width, 4), dtype=np.float64)
    phase = np.array(list(HUE_PHASE), dtype=np.float64)

    for j in range(1, iterations + 1):
        u = u0 * d
        v = v0 * d
        # uv * rot(t/2), then the xz plane of p by the same rotation
        px = u * c + v * -s_
        py = u * s_ + v * c
        pz = d - CAMERA_DEPTH
        px, pz = px * c + pz * -s_, px * s_ + pz * c

        fx = px - np.floor(px)
        fy = py - np.floor(py)
        fz = pz - np.floor(pz)
        lattice = np.sqrt((fx * px) ** 2 + (fy * py) ** 2 + (fz * pz) ** 2)
        sphere = np.sqrt(px * px + py * py + pz * pz) - SPHERE_RADIUS
        metric = np.maximum(np.sin(lattice), sphere)

        step = BASE_STEP + STEP_GAIN * np.abs(metric - j / iterations)
        d = d + step

        hue = COLOR_GAIN * np.sin(phase + j * HUE_RATE)
        color = hue[None, None, :] / step[..., None]
        sx, sy, sz = px * px, py * py, pz * pz
        dist = -np.sqrt(sx * sx + sy * sy + sz * sz)
        o += np.maximum(color, dist[..., None])

    return o


def render_frame_numpy(*, width: int, height: int, t: float, iterations: int, frame_id: str) -> np.ndarray:
    logger = get_logger()
    logger.debug("[Frame %s] numpy render start t=%s iter=%s", frame_id, t, iterations)
    pixels = encode_array(tone_map_array(march_array(width=width, height=height, t=t, iterations=iterations)))
    logger.debug("[Frame %s] numpy render done", frame_id)
    return pixels
