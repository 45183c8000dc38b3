from __future__ import annotations

import numpy as np

from fractalmarch.core.vec import Vec4

EXPOSURE = 8e5


def tone_map(o: Vec4) -> Vec4:
    """``tanh(o*o / 8e5)`` per channel, alpha forced to 1.0."""
    return (o * o / EXPOSURE).tanh().with_w(1.0)


def tone_map_array(raw: np.ndarray) -> np.ndarray:
    """Vectorised :func:`tone_map` over a ``(..., 4)`` array."""
    out = np.tanh(raw * raw / EXPOSURE)
    out[..., 3] = 1.0
    return out
