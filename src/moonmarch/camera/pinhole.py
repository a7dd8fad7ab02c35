"""Pinhole camera for ray-marched rendering.

The camera is a position plus a forward direction. Its basis is built
against the fixed world-up axis (0, 1, 0):

    right = normalize(cross(forward, up))
    view  = normalize(forward + right * x + up * y)

where (x, y) are normalized screen coordinates produced by the multisample
rasterizer. There is no field-of-view parameter: the screen normalization
spans [-1, 1] on both axes, which fixes the view cone at 45 degrees to each
side. ``up`` is the world axis, not a re-orthogonalized camera up.

The forward direction must not be zero or parallel to world up; both are
rejected by ``setup_camera`` before any ray is generated.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(position=(0.0, 0.0, 10.0), direction=(0.0, 0.0, -1.0))
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.0, 0.0)  # Ray through image center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from moonmarch.core.ray import WORLD_UP, Ray, make_ray, normalize, vec3

# Smallest |cross(forward, up)| accepted as a non-degenerate basis
MIN_BASIS_LENGTH = 1e-6

# World-up as a NumPy array for Python-side basis setup
_WORLD_UP_NP = np.array([0.0, 1.0, 0.0], dtype=np.float64)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        direction: Forward direction (x, y, z). Need not be unit length.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 10.0)
    direction: tuple[float, float, float] = (0.0, 0.0, -1.0)


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())

_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def compute_camera_basis(camera: PinholeCamera) -> tuple[np.ndarray, np.ndarray]:
    """Compute the unit forward and right vectors of a camera.

    Args:
        camera: Camera configuration.

    Returns:
        Tuple of (forward, right) as float64 arrays of shape (3,).

    Raises:
        ValueError: If the direction is zero or parallel to world up.
    """
    forward = np.asarray(camera.direction, dtype=np.float64)
    norm = np.linalg.norm(forward)
    if norm == 0.0:
        raise ValueError("Camera direction must be a non-zero vector")
    forward = forward / norm

    right = np.cross(forward, _WORLD_UP_NP)
    right_norm = np.linalg.norm(right)
    if right_norm < MIN_BASIS_LENGTH:
        raise ValueError(
            f"Camera direction {tuple(camera.direction)} is parallel to world up; "
            "the camera basis is undefined"
        )

    return forward, right / right_norm


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering. Writes the basis to Taichi fields and
    should be called from Python (not from within a Taichi kernel).

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera basis is degenerate.
    """
    forward, right = compute_camera_basis(camera)

    _camera_origin[None] = [float(c) for c in camera.position]
    _camera_forward[None] = forward.tolist()
    _camera_right[None] = right.tolist()
    _camera_ready[None] = 1


def reset_camera() -> None:
    """Mark the camera as not set up."""
    _camera_ready[None] = 0


def is_camera_ready() -> bool:
    """Check if setup_camera() has been called."""
    return bool(_camera_ready[None])


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def view_direction(forward: vec3, right: vec3, x: ti.f32, y: ti.f32) -> vec3:
    """Direction through screen point (x, y) for a given basis."""
    return normalize(forward + right * x + WORLD_UP * y)


@ti.func
def get_ray(x: ti.f32, y: ti.f32) -> Ray:
    """Generate a ray through normalized screen coordinates (x, y).

    Args:
        x: Horizontal coordinate, roughly [-1, 1], left to right.
        y: Vertical coordinate, roughly [-1, 1], bottom to top.

    Returns:
        A Ray from the camera position with unit direction.
    """
    direction = view_direction(_camera_forward[None], _camera_right[None], x, y)
    return make_ray(_camera_origin[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, forward and right vectors.
    """
    origin_vec = _camera_origin[None]
    forward_vec = _camera_forward[None]
    right_vec = _camera_right[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "forward": (float(forward_vec[0]), float(forward_vec[1]), float(forward_vec[2])),
        "right": (float(right_vec[0]), float(right_vec[1]), float(right_vec[2])),
    }
