from __future__ import annotations

import math

import numpy as np
from numba import njit

from fractalmarch.core.field import SPHERE_RADIUS
from fractalmarch.core.march import BASE_STEP, CAMERA_DEPTH, COLOR_GAIN, HUE_PHASE, HUE_RATE, STEP_GAIN

_PHASE = np.array(list(HUE_PHASE), dtype=np.float64)


@njit(cache=False)
def march_kernel(out, width, height, angle, iterations, phase):
    """Fill ``out[y, x, :]`` with the raw accumulated color of each pixel."""
    c = math.cos(angle)
    s_ = math.sin(angle)
    for y in range(height):
        v0 = (y * 2.0 - height) / height
        for x in range(width):
            u0 = (x * 2.0 - width) / height
            d = 0.0
            o0 = 0.0
            o1 = 0.0
            o2 = 0.0
            o3 = 0.0
            for j in range(1, iterations + 1):
                u = u0 * d
                v = v0 * d
                rx = u * c + v * -s_
                py = u * s_ + v * c
                rz = d - CAMERA_DEPTH
                px = rx * c + rz * -s_
                pz = rx * s_ + rz * c

                lx = (px - math.floor(px)) * px
                ly = (py - math.floor(py)) * py
                lz = (pz - math.floor(pz)) * pz
                lattice = math.sqrt(lx * lx + ly * ly + lz * lz)
                sphere = math.sqrt(px * px + py * py + pz * pz) - SPHERE_RADIUS
                metric = max(math.sin(lattice), sphere)

                step = BASE_STEP + STEP_GAIN * abs(metric - j / iterations)
                d += step

                sx = px * px
                sy = py * py
                sz = pz * pz
                dist = -math.sqrt(sx * sx + sy * sy + sz * sz)
                o0 += max(COLOR_GAIN * math.sin(phase[0] + j * HUE_RATE) / step, dist)
                o1 += max(COLOR_GAIN * math.sin(phase[1] + j * HUE_RATE) / step, dist)
                o2 += max(COLOR_GAIN * math.sin(phase[2] + j * HUE_RATE) / step, dist)
                o3 += max(COLOR_GAIN * math.sin(phase[3] + j * HUE_RATE) / step, dist)
            out[y, x, 0] = o0
            out[y, x, 1] = o1
            out[y, x, 2] = o2
            out[y, x, 3] = o3


def march_array_jit(width: int, height: int, angle: float, iterations: int) -> np.ndarray:
    out = np.zeros((height, width, 4), dtype=np.float64)
    march_kernel(out, int(width), int(height), float(angle), int(iterations), _PHASE)
    return out
