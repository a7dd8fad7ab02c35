"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole camera basis and per-sample ray generation
    multisample: Fixed sub-pixel sample patterns and the rasterizer that
        turns an image size into a (screen coordinate, pixel) work list

Screen coordinates are normalized to roughly [-1, 1]:
    x: left to right across the image
    y: bottom to top across the image (row 0 is the top row)
"""

from .multisample import (
    SAMPLE_PATTERNS,
    SUPPORTED_SAMPLE_COUNTS,
    Fragments,
    get_sample_pattern,
    rasterize,
    validate_dimensions,
)

# Note: pinhole is NOT imported here. It allocates Taichi fields at import
# time, so import it after ti.init():
#   from moonmarch.camera.pinhole import PinholeCamera, setup_camera

__all__ = [
    "SAMPLE_PATTERNS",
    "SUPPORTED_SAMPLE_COUNTS",
    "Fragments",
    "get_sample_pattern",
    "rasterize",
    "validate_dimensions",
]
