from __future__ import annotations

from typing import Any, Dict

from fractalmarch.renderers.accelerated import probe_numba


def choose_renderer(renderer: str) -> str:
    if renderer in ("cpu", "numpy", "numba"):
        return renderer
    if renderer != "auto":
        raise ValueError("renderer must be one of: auto, cpu, numpy, numba")
    return "numba" if probe_numba().get("available") else "numpy"


def renderer_info(resolved: str) -> Dict[str, Any]:
    return {"resolved": resolved, "numba": probe_numba()}
