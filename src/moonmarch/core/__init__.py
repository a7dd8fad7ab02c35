"""Core rendering module.

Components:
    ray: Ray data structure, normalization and smoothstep
    integrator: The per-ray march loop and the fragment render kernel
    renderer: Work-list driven renderer producing the pixel buffer

The march loop repeatedly asks a signed-distance-field body for one trace
step, adds emitted light attenuated by the accumulated transmittance, and
stops on a surface hit or when the step budget runs out.
"""

from .ray import WORLD_UP, Ray, make_ray, normalize, smoothstep, vec3

# Note: integrator and renderer are NOT imported here. They allocate Taichi
# fields at import time, so import them after ti.init():
#   from moonmarch.core.renderer import Renderer

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "normalize",
    "smoothstep",
    "WORLD_UP",
]
