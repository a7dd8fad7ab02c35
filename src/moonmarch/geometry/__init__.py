"""Geometry module for signed-distance-field bodies.

Components:
    sdf: TraceState record and the SignedDistanceField contract with its
        finite-difference normal estimator
    sphere: Exact sphere body in vacuum
    noise: Seeded 3D gradient noise field
    moon: Noise-bumped sphere with an atmospheric glow

Bodies are Taichi data-oriented objects. Their ``signed_dist`` and
``trace_step`` methods are Taichi functions, and kernels receive bodies as
``ti.template()`` arguments:

    state, position = body.trace_step(direction, position)
"""

from .moon import Moon, MoonParams
from .noise import NoiseField
from .sdf import (
    NORMAL_EPSILON,
    TRACE_CONTINUE,
    TRACE_HIT,
    SignedDistanceField,
    TraceState,
    estimate_normal,
    make_continue,
    make_hit,
)
from .sphere import SphereSDF, sdf_sphere

__all__ = [
    "TraceState",
    "TRACE_CONTINUE",
    "TRACE_HIT",
    "NORMAL_EPSILON",
    "SignedDistanceField",
    "estimate_normal",
    "make_continue",
    "make_hit",
    "SphereSDF",
    "sdf_sphere",
    "NoiseField",
    "Moon",
    "MoonParams",
]
