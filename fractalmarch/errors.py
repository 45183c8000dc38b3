from __future__ import annotations

from typing import Optional


class FractalMarchError(Exception):
    pass


class ConfigError(FractalMarchError, ValueError):
    pass


class ResourceError(FractalMarchError):
    """An output file or directory could not be created, opened or written."""

    def __init__(self, path: str, frame_index: Optional[int] = None, cause: Optional[BaseException] = None):
        self.path = path
        self.frame_index = frame_index
        self.cause = cause
        where = f"frame {frame_index} " if frame_index is not None else ""
        super().__init__(f"Failed to write {where}{path}: {cause}")


class EncodingHandoffError(FractalMarchError, RuntimeError):
    """The external video encoder is unavailable or failed. Frames on disk are still valid."""


class RenderCancelled(FractalMarchError):
    def __init__(self, frames_done: int, frame_count: int):
        self.frames_done = frames_done
        self.frame_count = frame_count
        super().__init__(f"Render cancelled after {frames_done}/{frame_count} frames")
