"""Taichi-based ray marcher for a procedural moon.

This package renders a single signed-distance-field body by marching camera
rays through its distance field, accumulating atmospheric glow and surface
shading per ray, and resolving multisampled contributions into pixels.

Subpackages:
    core: Ray and vector utilities, the march loop, and the renderer
    geometry: Signed-distance-field contract, noise field, and bodies
    camera: Pinhole ray generation and the multisample rasterizer
    scene: Default moon scene factory
    preview: Tone mapping and ANSI terminal output

Taichi must be initialized (``ti.init``) before importing modules that
allocate fields (``moonmarch.camera.pinhole``, ``moonmarch.core.integrator``
and everything importing them, such as ``moonmarch.scene``).
"""

__version__ = "0.1.0"
