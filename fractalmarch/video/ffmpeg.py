from __future__ import annotations

import os
import subprocess
from typing import List

from fractalmarch.errors import EncodingHandoffError
from fractalmarch.util.logging_setup import get_logger


def ffmpeg_command(*, ffmpeg_bin: str, input_pattern: str, output_file: str, fps: int, frame_count: int) -> List[str]:
    # the pattern would also match frames past frame_count left by an earlier run
    return [
        ffmpeg_bin,
        "-y",
        "-framerate", str(fps),
        "-start_number", "0",
        "-i", input_pattern,
        "-frames:v", str(frame_count),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        output_file,
    ]


def encode_with_ffmpeg(
    *,
    input_dir: str,
    pattern: str,
    output_file: str,
    fps: int,
    frame_count: int,
    ffmpeg_bin: str = "ffmpeg",
) -> None:
    logger = get_logger()
    command = ffmpeg_command(
        ffmpeg_bin=ffmpeg_bin, input_pattern=os.path.join(input_dir, pattern), output_file=output_file,
        fps=fps, frame_count=frame_count,
    )
    logger.info("Encoding video %s with %s", output_file, " ".join(command))
    try:
        r = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as e:
        raise EncodingHandoffError(f"Cannot run {ffmpeg_bin}: {e}") from e
    if r.returncode != 0:
        tail = (r.stderr or "").strip().splitlines()[-5:]
        raise EncodingHandoffError(f"{ffmpeg_bin} exited with status {r.returncode}: {' | '.join(tail)}")
    logger.info("Video written: %s", output_file)
