from __future__ import annotations

import math

from fractalmarch.core.vec import Vec3

SPHERE_RADIUS = 4.0


def lattice_metric(p: Vec3) -> float:
    return (p.fract() * p).length()


def sphere_metric(p: Vec3) -> float:
    return p.length() - SPHERE_RADIUS


def sample_field(p: Vec3) -> float:
    """Scalar density at ``p``: a sine-folded lattice clipped by a sphere of radius 4."""
    return max(math.sin(lattice_metric(p)), sphere_metric(p))
