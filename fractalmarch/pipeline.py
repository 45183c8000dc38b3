from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from typing import Any, Dict, List, Optional

import numpy as np
from natsort import natsorted
from tqdm import tqdm

from fractalmarch.config import RenderConfig
from fractalmarch.core import frame_time, march_pixel, tone_map
from fractalmarch.errors import RenderCancelled
from fractalmarch.raster import ensure_dir, frame_path, write_frame
from fractalmarch.renderers import choose_renderer
from fractalmarch.renderers.accelerated import render_frame_numba
from fractalmarch.renderers.cpu import render_frame_cpu
from fractalmarch.renderers.vectorized import render_frame_numpy
from fractalmarch.util.logging_setup import get_logger, logging_initialiser


def render_frame(
    cfg: RenderConfig,
    frame_index: int,
    *,
    renderer: Optional[str] = None,
    t: Optional[float] = None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> np.ndarray:
    """Render one frame to a ``(height, width, 4)`` uint8 RGBA array.

    ``t`` defaults to the frame's place in the loop; passing it explicitly
    renders an arbitrary moment with the same configuration.
    """
    resolved = choose_renderer(renderer or cfg.renderer)
    if t is None:
        t = frame_time(frame_index, cfg.frame_count)
    frame_id = f"{frame_index:0{cfg.pad_width}d}"

    if resolved == "cpu":
        pixels = render_frame_cpu(
            width=cfg.width, height=cfg.height, t=t, iterations=cfg.iterations, frame_id=frame_id,
            workers=cfg.workers, band_height=cfg.band_height, log_queue=log_queue, log_level=log_level,
        )
    elif resolved == "numpy":
        pixels = render_frame_numpy(width=cfg.width, height=cfg.height, t=t, iterations=cfg.iterations, frame_id=frame_id)
    else:
        pixels = render_frame_numba(width=cfg.width, height=cfg.height, t=t, iterations=cfg.iterations, frame_id=frame_id)

    logger = get_logger()
    if logger.isEnabledFor(logging.DEBUG):
        raw = march_pixel(0, 0, cfg.width, cfg.height, t, cfg.iterations)
        logger.debug("[Frame %s] pixel(0,0) before tanh: %s", frame_id, tuple(raw))
        logger.debug("[Frame %s] pixel(0,0) after tanh: %s", frame_id, tuple(tone_map(raw)))
    return pixels


def render_and_write(
    cfg: RenderConfig,
    frame_index: int,
    *,
    renderer: Optional[str] = None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Optional[str]:
    """Render and write one frame; returns its path, or ``None`` when skipped."""
    path = frame_path(cfg, frame_index)
    if cfg.skip_existing and os.path.exists(path):
        get_logger().info("[Frame %s] Skipped: already exists at %s", frame_index, path)
        return None
    pixels = render_frame(cfg, frame_index, renderer=renderer, log_queue=log_queue, log_level=log_level)
    return write_frame(path, pixels, cfg.frame_format, frame_index=frame_index)


def _frame_worker(cfg: RenderConfig, frame_index: int, renderer: str) -> Optional[str]:
    return render_and_write(cfg, frame_index, renderer=renderer)


def render_sequence(
    *,
    cfg: RenderConfig,
    renderer: Optional[str] = None,
    log_queue=None,
    log_level: int = logging.INFO,
    cancel_event: Optional[threading.Event] = None,
    progress: bool = True,
) -> Dict[str, Any]:
    """Render every frame of the loop into ``cfg.frames_dir``.

    All frame files are closed when this returns. Cancellation is checked
    between frames; frames already started are finished before
    :class:`RenderCancelled` is raised.
    """
    logger = get_logger()
    resolved = choose_renderer(renderer or cfg.renderer)
    ensure_dir(cfg.frames_dir)

    logger.info("Render start frames=%s size=%sx%s iterations=%s renderer=%s frame_workers=%s",
                cfg.frame_count, cfg.width, cfg.height, cfg.iterations, resolved, cfg.frame_workers)
    started = time.time()

    written: List[str] = []
    skipped = 0
    done = 0
    bar = tqdm(total=cfg.frame_count, unit="frame", disable=not progress)

    def _record(i: int, path: Optional[str]) -> None:
        nonlocal skipped, done
        done += 1
        bar.update(1)
        if path is None:
            skipped += 1
        else:
            written.append(path)
            logger.info("Generated %s (%3d/%3d)", path, i + 1, cfg.frame_count)

    def _cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    try:
        if cfg.frame_workers <= 1:
            for i in range(cfg.frame_count):
                if _cancelled():
                    raise RenderCancelled(done, cfg.frame_count)
                _record(i, render_and_write(cfg, i, renderer=resolved, log_queue=log_queue, log_level=log_level))
        else:
            # band pools cannot nest inside frame workers
            worker_cfg = cfg.replace(workers=1)
            pending = {}
            next_index = 0
            with ProcessPoolExecutor(
                max_workers=cfg.frame_workers,
                initializer=logging_initialiser,
                initargs=(log_queue, log_level),
            ) as pool:
                while next_index < cfg.frame_count or pending:
                    while (next_index < cfg.frame_count and len(pending) < cfg.frame_workers
                           and not _cancelled()):
                        fut = pool.submit(_frame_worker, worker_cfg, next_index, resolved)
                        pending[fut] = next_index
                        next_index += 1
                    if not pending:
                        break
                    finished, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for fut in finished:
                        _record(pending.pop(fut), fut.result())
            if _cancelled() and done < cfg.frame_count:
                raise RenderCancelled(done, cfg.frame_count)
    finally:
        bar.close()

    elapsed = time.time() - started
    logger.info("Render complete frames_dir=%s written=%s skipped=%s elapsed=%.2fs",
                cfg.frames_dir, len(written), skipped, elapsed)
    return {
        "frames_dir": cfg.frames_dir,
        "frame_count": cfg.frame_count,
        "width": cfg.width,
        "height": cfg.height,
        "renderer": resolved,
        "written": natsorted(written),
        "skipped": skipped,
        "elapsed_sec": elapsed,
    }
