from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import List, Tuple

import numpy as np

from fractalmarch.core import shade_pixel
from fractalmarch.util.logging_setup import get_logger, logging_initialiser

_G = {}


def _init_worker(width, height, t, iterations, frame_id, log_queue, log_level):
    _G["width"] = width
    _G["height"] = height
    _G["t"] = t
    _G["iterations"] = iterations
    _G["frame_id"] = frame_id
    logging_initialiser(log_queue, log_level)


def _render_band(y0_y1: Tuple[int, int]):
    y0, y1 = y0_y1
    width = _G["width"]
    height = _G["height"]
    t = _G["t"]
    iterations = _G["iterations"]
    frame_id = _G["frame_id"]

    logger = get_logger()
    band = np.zeros((y1 - y0, width, 4), dtype=np.uint8)

    for yi, y in enumerate(range(y0, y1)):
        for x in range(width):
            band[yi, x] = shade_pixel(x, y, width, height, t, iterations)
        if y % 50 == 0:
            logger.debug("[Frame %s] Rendered row %s/%s", frame_id, y, height)

    return y0, band


def split_bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands


def render_frame_cpu(
    *,
    width: int,
    height: int,
    t: float,
    iterations: int,
    frame_id: str,
    workers: int = 0,
    band_height: int = 32,
    log_queue=None,
    log_level: int = logging.INFO,
) -> np.ndarray:
    """Scalar reference renderer; bands go to a process pool unless ``workers == 1``."""
    logger = get_logger()
    logger.debug("[Frame %s] CPU render start t=%s iter=%s", frame_id, t, iterations)

    buf = np.zeros((height, width, 4), dtype=np.uint8)
    bands = split_bands(height, band_height)
    initargs = (width, height, t, iterations, frame_id, log_queue, log_level)
    max_workers = workers or os.cpu_count() or 1

    if max_workers == 1 or len(bands) == 1:
        _init_worker(width, height, t, iterations, frame_id, None, log_level)
        for y0, band in map(_render_band, bands):
            buf[y0:y0 + band.shape[0]] = band
    else:
        with ProcessPoolExecutor(
            max_workers=max_workers,
            initializer=_init_worker,
            initargs=initargs,
        ) as pool:
            for y0, band in pool.map(_render_band, bands):
                buf[y0:y0 + band.shape[0]] = band

    logger.debug("[Frame %s] CPU render done", frame_id)
    return buf
