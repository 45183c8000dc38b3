from __future__ import annotations

import os
from typing import List, Optional

from fractalmarch.config import RenderConfig
from fractalmarch.errors import EncodingHandoffError
from fractalmarch.video.ffmpeg import encode_with_ffmpeg
from fractalmarch.video.opencv_writer import encode_with_opencv


def sequence_frames(cfg: RenderConfig, input_dir: str) -> List[str]:
    """Paths of exactly the ``frame_count`` frames of one loop, in order.

    Other files in ``input_dir`` (left over from a longer run, or written in the
    other container format) are never part of the sequence.
    """
    frames = [os.path.join(input_dir, cfg.frame_name(i)) for i in range(cfg.frame_count)]
    missing = [p for p in frames if not os.path.isfile(p)]
    if missing:
        raise EncodingHandoffError(
            f"{len(missing)} of {cfg.frame_count} frames missing from {input_dir}, first: {missing[0]}"
        )
    return frames


def encode_frames(
    cfg: RenderConfig,
    *,
    input_dir: Optional[str] = None,
    output_file: Optional[str] = None,
    fps: Optional[int] = None,
) -> str:
    """Hand the finished frame sequence to the configured encoder; returns the video path."""
    input_dir = input_dir or cfg.frames_dir
    output_file = output_file or cfg.output_video
    fps = fps or cfg.fps
    frames = sequence_frames(cfg, input_dir)
    if cfg.encoder == "opencv":
        encode_with_opencv(frames=frames, output_file=output_file, fps=fps)
    else:
        encode_with_ffmpeg(
            input_dir=input_dir, pattern=cfg.frame_pattern, output_file=output_file, fps=fps,
            frame_count=len(frames), ffmpeg_bin=cfg.ffmpeg_bin,
        )
    return output_file
