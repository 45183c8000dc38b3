from __future__ import annotations

import os
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from fractalmarch.config import RenderConfig
from fractalmarch.errors import ResourceError

CHANNELS = 4
MAXVAL = 255
TUPLTYPE = "RGB_ALPHA"


def ensure_dir(path: str) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise ResourceError(path, cause=e) from e


def frame_path(cfg: RenderConfig, frame_index: int) -> str:
    return os.path.join(cfg.frames_dir, cfg.frame_name(frame_index))


def pam_header(width: int, height: int) -> bytes:
    return (
        "P7\n"
        f"WIDTH {width}\n"
        f"HEIGHT {height}\n"
        f"DEPTH {CHANNELS}\n"
        f"MAXVAL {MAXVAL}\n"
        f"TUPLTYPE {TUPLTYPE}\n"
        "ENDHDR\n"
    ).encode("ascii")


def _check_pixels(pixels: np.ndarray) -> Tuple[int, int]:
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
        raise ValueError(f"Expected (height, width, 4) uint8 pixels, got {pixels.shape} {pixels.dtype}")
    height, width = pixels.shape[:2]
    return width, height


def write_frame(path: str, pixels: np.ndarray, fmt: str = "pam", frame_index: Optional[int] = None) -> str:
    """Write one RGBA raster. Any I/O failure surfaces as :class:`ResourceError`."""
    width, height = _check_pixels(pixels)
    try:
        if fmt == "pam":
            with open(path, "wb") as f:
                f.write(pam_header(width, height))
                f.write(np.ascontiguousarray(pixels).tobytes())
        elif fmt == "png":
            img = Image.fromarray(pixels)
            with open(path, "wb") as f:
                img.save(f, format="PNG")
        else:
            raise ValueError(f"Unsupported frame format: {fmt}")
    except OSError as e:
        raise ResourceError(path, frame_index=frame_index, cause=e) from e
    return path


def read_pam(path: str) -> Tuple[dict, np.ndarray]:
    """Read back a PAM written by :func:`write_frame`; returns ``(header, pixels)``."""
    header = {}
    with open(path, "rb") as f:
        magic = f.readline().strip()
        if magic != b"P7":
            raise ValueError(f"{path} is not a PAM file")
        while True:
            line = f.readline()
            if not line:
                raise ValueError(f"{path}: truncated header")
            line = line.strip()
            if line == b"ENDHDR":
                break
            if not line or line.startswith(b"#"):
                continue
            key, _, value = line.decode("ascii").partition(" ")
            header[key] = value.strip()
        data = f.read()

    width, height, depth = int(header["WIDTH"]), int(header["HEIGHT"]), int(header["DEPTH"])
    expected = width * height * depth
    if len(data) != expected:
        raise ValueError(f"{path}: expected {expected} pixel bytes, found {len(data)}")
    pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, depth)
    return header, pixels
