from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from fractalmarch.core.vec import Vec4


class Pixel32(NamedTuple):
    r: int
    g: int
    b: int
    a: int

    def to_bytes(self) -> bytes:
        return bytes(self)


def to_byte(c: float) -> int:
    """Clamp to [0, 1] and truncate to 0..255. NaN encodes as 0."""
    if not c >= 0.0:
        c = 0.0
    elif c > 1.0:
        c = 1.0
    return int(math.floor(c * 255.0))


def pack_pixel(color: Vec4) -> Pixel32:
    return Pixel32(*(to_byte(c) for c in color))


def encode_array(toned: np.ndarray) -> np.ndarray:
    """Vectorised :func:`to_byte` over a float array, returning ``uint8``."""
    clamped = np.clip(np.nan_to_num(toned, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)
    return np.floor(clamped * 255.0).astype(np.uint8)
