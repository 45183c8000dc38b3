from __future__ import annotations

from typing import Sequence

import numpy as np
from PIL import Image

from fractalmarch.errors import EncodingHandoffError
from fractalmarch.raster import read_pam
from fractalmarch.util.logging_setup import get_logger


def read_frame_bgr(path: str) -> np.ndarray:
    """Load an RGBA frame file as the contiguous 3-channel BGR array ``cv2.VideoWriter`` expects.

    PAM files go through :func:`read_pam`, anything else through Pillow, so the
    channel order never depends on which OpenCV decoder picks the file up.
    """
    try:
        if path.lower().endswith(".pam"):
            _, rgba = read_pam(path)
        else:
            with Image.open(path) as img:
                rgba = np.asarray(img.convert("RGBA"))
    except (OSError, ValueError, KeyError) as e:
        raise EncodingHandoffError(f"Failed to read frame {path}: {e}") from e
    return np.ascontiguousarray(rgba[..., 2::-1])


def encode_with_opencv(*, frames: Sequence[str], output_file: str, fps: int) -> None:
    """Encode ``frames`` in the given order; alpha is dropped."""
    logger = get_logger()
    try:
        import cv2  # type: ignore
    except ImportError as e:
        raise EncodingHandoffError(f"OpenCV not installed: {e}") from e

    if not frames:
        raise EncodingHandoffError("No frames to encode")

    first = read_frame_bgr(frames[0])
    h, w = first.shape[:2]

    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    out = cv2.VideoWriter(output_file, fourcc, fps, (w, h))
    if not out.isOpened():
        raise EncodingHandoffError(f"Failed to open VideoWriter for {output_file}")

    logger.info("Encoding video %s from %s frames (%sx%s @ %sfps)", output_file, len(frames), w, h, fps)
    try:
        for i, path in enumerate(frames):
            img = first if i == 0 else read_frame_bgr(path)
            if img.shape[0] != h or img.shape[1] != w:
                img = cv2.resize(img, (w, h), interpolation=cv2.INTER_AREA)
            out.write(img)
            if i % 60 == 0:
                logger.info("Encoded %s/%s frames", i, len(frames))
    finally:
        out.release()
    logger.info("Video written: %s", output_file)
