"""Signed-distance-field contract for traceable bodies.

A traceable body supplies two things:

    signed_dist(point) -> f32
        Signed distance from ``point`` to the surface. Negative inside,
        zero on the surface, positive outside.

    trace_step(direction, position) -> (TraceState, new_position)
        One march step: advance ``position`` along ``direction`` by a
        body-chosen amount and report whether the ray continued through a
        participating medium or hit the surface.

Surface normals are derived from ``signed_dist`` alone by finite
differencing (``estimate_normal``), so bodies without analytic derivatives,
such as noise-perturbed surfaces, get normals for free.

TraceState is a tagged record. ``kind`` is TRACE_CONTINUE or TRACE_HIT;
``normal`` is only meaningful for hits. ``transmit`` components lie in
[0, 1]; a body that violates this has a modeling bug.
"""

import abc

import taichi as ti

from moonmarch.core.ray import normalize, vec3

# Trace state tags
TRACE_CONTINUE = 0
TRACE_HIT = 1

# Finite-difference step for normal estimation
NORMAL_EPSILON = 0.001


@ti.dataclass
class TraceState:
    """Result of one march step.

    Attributes:
        kind: TRACE_CONTINUE or TRACE_HIT.
        emit: Light added by this step (medium glow or surface color).
        transmit: Fraction of light surviving this step, per channel.
        normal: Outward unit surface normal at the hit point.
            Only valid if kind == TRACE_HIT.
    """

    kind: ti.i32
    emit: vec3
    transmit: vec3
    normal: vec3


@ti.func
def make_continue(emit: vec3, transmit: vec3) -> TraceState:
    """Build a Continue state: the ray passed through medium this step."""
    return TraceState(
        kind=TRACE_CONTINUE,
        emit=emit,
        transmit=transmit,
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def make_hit(emit: vec3, transmit: vec3, normal: vec3) -> TraceState:
    """Build a Hit state: the ray reached the surface and must stop."""
    return TraceState(kind=TRACE_HIT, emit=emit, transmit=transmit, normal=normal)


@ti.func
def estimate_normal(body: ti.template(), point: vec3) -> vec3:
    """Estimate the surface normal as the numerical gradient of the SDF.

    Evaluates the body's distance at ``point`` and at ``point`` offset by
    NORMAL_EPSILON along each axis, and normalizes the three forward
    differences:

        n = normalize(d(p + ex*e) - d(p), d(p + ey*e) - d(p), d(p + ez*e) - d(p))

    Args:
        body: Any object with a ``signed_dist`` Taichi function.
        point: The point to evaluate at (usually a hit point).

    Returns:
        The unit gradient direction.
    """
    dist_here = body.signed_dist(point)
    xn = body.signed_dist(point + vec3(NORMAL_EPSILON, 0.0, 0.0)) - dist_here
    yn = body.signed_dist(point + vec3(0.0, NORMAL_EPSILON, 0.0)) - dist_here
    zn = body.signed_dist(point + vec3(0.0, 0.0, NORMAL_EPSILON)) - dist_here
    return normalize(vec3(xn, yn, zn))


@ti.data_oriented
class SignedDistanceField(abc.ABC):
    """Base class for bodies the ray marcher can trace.

    Subclasses implement ``signed_dist`` and ``trace_step`` as Taichi
    functions (``@ti.func``). ``normal`` is shared and built only on
    ``signed_dist``. Instances are passed to kernels as ``ti.template()``
    arguments, so each body type compiles its own march.
    """

    @abc.abstractmethod
    def signed_dist(self, point):
        """Signed distance from point to the surface (Taichi function)."""

    @abc.abstractmethod
    def trace_step(self, direction, position):
        """Advance one march step; return (TraceState, new_position)."""

    @ti.func
    def normal(self, point: vec3) -> vec3:
        """Outward unit normal at point, via finite differences."""
        return estimate_normal(self, point)

