from __future__ import annotations

from typing import Any, Dict

import numpy as np

from fractalmarch.core.march import wrap_time
from fractalmarch.core.pixel import encode_array
from fractalmarch.core.tone import tone_map_array
from fractalmarch.util.logging_setup import get_logger


def probe_numba() -> Dict[str, Any]:
    info: Dict[str, Any] = {"available": False}
    try:
        import numba  # type: ignore
    except ImportError as e:
        info["error"] = str(e)
        return info
    info.update({
        "available": True,
        "version": getattr(numba, "__version__", None),
        "threading_layer": getattr(numba.config, "THREADING_LAYER", None),
    })
    return info


def render_frame_numba(*, width: int, height: int, t: float, iterations: int, frame_id: str) -> np.ndarray:
    logger = get_logger()
    try:
        from fractalmarch.renderers.jit import march_array_jit
    except ImportError as e:
        raise RuntimeError(f"numba renderer not available: {e}") from e
    logger.debug("[Frame %s] numba render start t=%s iter=%s", frame_id, t, iterations)
    raw = march_array_jit(width, height, wrap_time(t) / 2.0, iterations)
    pixels = encode_array(tone_map_array(raw))
    logger.debug("[Frame %s] numba render done", frame_id)
    return pixels
