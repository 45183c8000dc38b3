from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from fractalmarch.core.field import sample_field
from fractalmarch.core.vec import Rotation2D, Vec2, Vec3, Vec4

TAU = 2.0 * math.pi

DEFAULT_ITERATIONS = 100
CAMERA_DEPTH = 8.0
BASE_STEP = 0.012
STEP_GAIN = 0.07
COLOR_GAIN = 1.3
HUE_RATE = 0.3
HUE_PHASE = Vec4(1.0, 2.0, 3.0, 1.0)


@dataclass(frozen=True)
class MarchState:
    """Snapshot of one pixel's march after iteration ``j``.

    ``d`` is the depth after the step, ``s`` the step just taken and ``p`` the
    sample point that step was derived from.
    """

    j: int
    d: float
    s: float
    o: Vec4
    p: Vec3


def wrap_time(t: float) -> float:
    """Reduce ``t`` to the animation phase in ``[0, 2*pi)``."""
    return t % TAU


def frame_time(frame_index: int, frame_count: int) -> float:
    if frame_count <= 0:
        raise ValueError("frame_count must be positive.")
    return (frame_index % frame_count) / frame_count * TAU


def fragment_uv(x: int, y: int, width: int, height: int) -> Vec2:
    """Pixel corner ``(x, y)`` mapped so the vertical axis spans [-1, 1]; no half-pixel offset."""
    frag = Vec2(x, y)
    resolution = Vec2(width, height)
    return (frag * 2.0 - resolution) / resolution.y


def iter_march(
    x: int,
    y: int,
    width: int,
    height: int,
    t: float,
    iterations: int = DEFAULT_ITERATIONS,
) -> Iterator[MarchState]:
    rot = Rotation2D(wrap_time(t) / 2.0)
    uv0 = fragment_uv(x, y, width, height)
    d = 0.0
    o = Vec4(0.0, 0.0, 0.0, 0.0)

    for j in range(1, iterations + 1):
        uv = uv0 * d * rot
        p = Vec3(uv.x, uv.y, d - CAMERA_DEPTH)
        p = p.with_xz(p.xz * rot)

        s = BASE_STEP + STEP_GAIN * abs(sample_field(p) - j / iterations)
        d += s

        color = COLOR_GAIN * (HUE_PHASE + j * HUE_RATE).sin() / s
        # componentwise square before the norm
        dist = -(p * p).length()
        o = o + color.max(dist)

        yield MarchState(j=j, d=d, s=s, o=o, p=p)


def march_pixel(
    x: int,
    y: int,
    width: int,
    height: int,
    t: float,
    iterations: int = DEFAULT_ITERATIONS,
) -> Vec4:
    """Unbounded accumulated color of pixel ``(x, y)``; alpha is meaningless here."""
    o = Vec4(0.0, 0.0, 0.0, 0.0)
    for state in iter_march(x, y, width, height, t, iterations):
        o = state.o
    return o
