import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from importlib import metadata as importlib_metadata
from typing import Any, Dict, Optional

STACK = ("numpy", "Pillow", "numba", "opencv-python", "tqdm", "natsort")


@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]
    renderer: Dict[str, Any]
    result: Dict[str, Any]


def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _safe_pkg_version(name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None


def build_manifest(
    *,
    config: Dict[str, Any],
    renderer_info: Dict[str, Any],
    result: Dict[str, Any],
    git_commit: Optional[str],
) -> RunManifest:
    pkgs = {}
    for name in STACK:
        v = _safe_pkg_version(name)
        if v:
            pkgs[name] = v

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        python={"version": sys.version, "executable": sys.executable},
        packages=pkgs,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "cpu_count": os.cpu_count()},
        renderer=renderer_info,
        result={
            "frames_written": len(result.get("written", [])),
            "frames_skipped": result.get("skipped", 0),
            "elapsed_sec": result.get("elapsed_sec"),
        },
    )


def write_manifest(path: str, manifest: RunManifest) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True)
