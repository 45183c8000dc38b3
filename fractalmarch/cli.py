from __future__ import annotations

import argparse
import os
import signal
import subprocess
import threading
from typing import Optional

from fractalmarch.config import ENCODERS, FRAME_FORMATS, RENDERERS, RenderConfig, load_config, normalise_config
from fractalmarch.core import frame_time, march_pixel, pack_pixel, tone_map
from fractalmarch.errors import EncodingHandoffError, FractalMarchError, RenderCancelled
from fractalmarch.pipeline import render_sequence
from fractalmarch.renderers import renderer_info
from fractalmarch.util.logging_setup import (
    configure_root_logging,
    create_log_queue,
    get_logger,
    parse_level,
    start_queue_listener,
)
from fractalmarch.util.manifest import build_manifest, write_manifest
from fractalmarch.video import encode_frames

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ENCODE_FAILED = 2
EXIT_CANCELLED = 130


def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def _add_render_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--width", type=int, default=None, help="Frame width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Frame height in pixels.")
    p.add_argument("--frames", dest="frame_count", type=int, default=None, help="Frames in one loop of the animation.")
    p.add_argument("--iterations", type=int, default=None, help="March iterations per pixel.")
    p.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    p.add_argument("--format", dest="frame_format", choices=FRAME_FORMATS, default=None, help="Frame container.")
    p.add_argument("--workers", type=int, default=None, help="Band workers for the cpu renderer (0 = all cores).")
    p.add_argument("--frame-workers", type=int, default=None, help="Frames rendered in parallel.")
    p.add_argument("--skip-existing", action="store_true", default=None, help="Keep frames already on disk.")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")


def _add_encode_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--output", dest="output_video", type=str, default=None, help="Output video file.")
    p.add_argument("--fps", type=int, default=None, help="Output frame rate.")
    p.add_argument("--encoder", choices=ENCODERS, default=None, help="External encoder.")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractalmarch", description="CPU raymarched fractal loop renderer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--renderer", type=str, default=None, choices=RENDERERS, help="Renderer selection.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render frames to the frames directory.")
    _add_render_options(r)

    e = sub.add_parser("encode", help="Encode rendered frames into a video.")
    e.add_argument("--frames-dir", type=str, default=None, help="Frames directory (defaults to config.frames_dir).")
    _add_encode_options(e)

    run = sub.add_parser("run", help="Render all frames, then encode them.")
    _add_render_options(run)
    _add_encode_options(run)

    probe = sub.add_parser("probe", help="Print the raw, tone-mapped and encoded color of one pixel.")
    probe.add_argument("--x", type=int, default=0)
    probe.add_argument("--y", type=int, default=0)
    probe.add_argument("--frame", type=int, default=0)
    probe.add_argument("--width", type=int, default=None)
    probe.add_argument("--height", type=int, default=None)
    probe.add_argument("--iterations", type=int, default=None)

    return p


def _apply_overrides(cfg: RenderConfig, args: argparse.Namespace) -> RenderConfig:
    keys = ("width", "height", "frame_count", "iterations", "frames_dir", "frame_format", "workers",
            "frame_workers", "skip_existing", "output_video", "fps", "encoder", "renderer")
    return cfg.replace(**{k: getattr(args, k, None) for k in keys})


def _install_sigint(cancel: threading.Event):
    """Route the first Ctrl-C to ``cancel``; returns the previous handler.

    Signal handlers can only be set from the main thread. Elsewhere nothing is
    installed and ``None`` is returned.
    """
    if threading.current_thread() is not threading.main_thread():
        return None
    logger = get_logger()

    def _handler(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        logger.warning("Interrupt received: finishing frames in progress, press Ctrl-C again to abort")
        cancel.set()

    return signal.signal(signal.SIGINT, _handler)


def _render(cfg: RenderConfig, args, queue, log_level: int) -> None:
    logger = get_logger()
    cancel = threading.Event()
    previous = _install_sigint(cancel)
    try:
        result = render_sequence(
            cfg=cfg, log_queue=queue, log_level=log_level, cancel_event=cancel, progress=not args.no_progress
        )
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    manifest = build_manifest(
        config=cfg.to_dict(),
        renderer_info=renderer_info(result["renderer"]),
        result=result,
        git_commit=_git_commit(),
    )
    write_manifest(os.path.join("artifacts", "run.json"), manifest)
    logger.info("Run manifest written: artifacts/run.json")


def _probe(cfg: RenderConfig, args) -> None:
    t = frame_time(args.frame, cfg.frame_count)
    raw = march_pixel(args.x, args.y, cfg.width, cfg.height, t, cfg.iterations)
    toned = tone_map(raw)
    print(f"t = {t:.6f}")
    print("Before tanh: o = ({:f}, {:f}, {:f}, {:f})".format(*raw))
    print("After tanh: o = ({:f}, {:f}, {:f}, {:f})".format(*toned))
    print("RGBA bytes: ({}, {}, {}, {})".format(*pack_pixel(toned)))


def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = parse_level(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    queue = create_log_queue()
    listener = start_queue_listener(queue, listener_logger)

    logger = get_logger()

    try:
        cfg = _apply_overrides(normalise_config(load_config(args.config)), args)

        if args.cmd == "probe":
            _probe(cfg, args)
            return EXIT_OK

        if args.cmd in ("render", "run"):
            _render(cfg, args, queue, log_level)
            if args.cmd == "render":
                return EXIT_OK

        try:
            encode_frames(cfg)
        except EncodingHandoffError as e:
            logger.error("Encoding failed, frames in %s are kept: %s", cfg.frames_dir, e)
            return EXIT_ENCODE_FAILED
        return EXIT_OK
    except RenderCancelled as e:
        logger.warning("%s", e)
        return EXIT_CANCELLED
    except FractalMarchError as e:
        logger.error("%s", e)
        return EXIT_FAILED
    finally:
        listener.stop()
