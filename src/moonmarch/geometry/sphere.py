"""Exact sphere body for the signed-distance-field ray marcher.

The sphere is the simplest traceable body: its distance is analytic,

    d(p) = |p - center| - radius

and the space around it is empty, so every non-hit step is a Continue with
no emitted light and full transmittance. It is useful as a reference body
when checking the march loop and the finite-difference normals against a
closed-form answer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.geometry.sphere import SphereSDF
    >>> sphere = SphereSDF(center=(0.0, 0.0, 0.0), radius=6.0)
"""

import taichi as ti
import taichi.math as tm

from moonmarch.core.ray import vec3
from moonmarch.geometry.sdf import SignedDistanceField, make_continue, make_hit

# Default distance under which a step counts as a surface hit
HIT_THRESHOLD = 0.01


@ti.func
def sdf_sphere(point: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Signed distance from point to a sphere surface."""
    return tm.length(point - center) - radius


@ti.data_oriented
class SphereSDF(SignedDistanceField):
    """A sphere in vacuum.

    Attributes:
        hit_threshold: Distance at or below which a step is a hit.
    """

    def __init__(
        self,
        center: tuple[float, float, float] = (0.0, 0.0, 0.0),
        radius: float = 1.0,
        color: tuple[float, float, float] = (1.0, 1.0, 1.0),
        hit_threshold: float = HIT_THRESHOLD,
    ) -> None:
        """Create a sphere body.

        Args:
            center: Sphere center in world space.
            radius: Sphere radius (must be positive).
            color: Surface color returned as the hit emission.
            hit_threshold: Hit distance threshold.

        Raises:
            ValueError: If radius is not positive.
        """
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        self.hit_threshold = hit_threshold

        self._center = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._radius = ti.field(dtype=ti.f32, shape=())
        self._color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._center[None] = [center[0], center[1], center[2]]
        self._radius[None] = radius
        self._color[None] = [color[0], color[1], color[2]]

    @property
    def center(self) -> tuple[float, float, float]:
        c = self._center[None]
        return (float(c[0]), float(c[1]), float(c[2]))

    @property
    def radius(self) -> float:
        return float(self._radius[None])

    @ti.func
    def signed_dist(self, point: vec3) -> ti.f32:
        return sdf_sphere(point, self._center[None], self._radius[None])

    @ti.func
    def trace_step(self, direction: vec3, position: vec3):
        """Step by the exact distance; hit when within the threshold."""
        distance = self.signed_dist(position)
        new_position = position + direction * distance

        state = make_continue(vec3(0.0, 0.0, 0.0), vec3(1.0, 1.0, 1.0))
        if distance <= self.hit_threshold:
            state = make_hit(self._color[None], vec3(1.0, 1.0, 1.0), self.normal(new_position))
        return state, new_position
