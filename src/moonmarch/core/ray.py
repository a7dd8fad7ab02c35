"""Ray data structure and vector helpers for ray marching.

This module provides the Ray dataclass, the normalization used for camera
rays and SDF normals, and the cubic smoothstep ease used to fade surface
bumps.

Colors are plain ``vec3`` values (r, g, b) in linear space. They are not
clamped anywhere in the core; quantization happens in the preview layer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 10.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Fixed world-up axis used by the camera basis
WORLD_UP = vec3(0.0, 1.0, 0.0)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Camera rays are unit
            length; the march steps by distance along this direction.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Zero-length input has no direction. With ``ti.init(debug=True)`` this
    fails loudly instead of letting NaN flow into the accumulators.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    assert tm.length(v) > 0.0, "cannot normalize a zero-length vector"
    return tm.normalize(v)


@ti.func
def smoothstep(x: ti.f32) -> ti.f32:
    """Cubic Hermite ease on [0, 1].

    The input is clamped to [0, 1] first, so the result is 0 for x <= 0
    and 1 for x >= 1:

        t = clamp(x, 0, 1)
        smoothstep(x) = (3 - 2t) * t^2

    Args:
        x: Ease parameter.

    Returns:
        The eased value in [0, 1].
    """
    t = tm.clamp(x, 0.0, 1.0)
    return (3.0 - 2.0 * t) * t * t
