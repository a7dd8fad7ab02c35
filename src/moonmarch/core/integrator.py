"""Ray march integrator for signed-distance-field bodies.

This module implements the per-ray shading loop and the kernel that runs it
over a rasterizer work list.

For one camera ray the loop keeps two accumulators:

    incoming_light   starts black, collects emitted light
    accumulated_tone starts white, the transmittance left along the path

and repeats up to ``max_steps`` times:

    Continue(emit, transmit):
        incoming_light   += emit * accumulated_tone
        accumulated_tone *= transmit
    Hit(emit, transmit, normal):
        diffuse = emit * max(dot(normal, -sun), ambient_floor)
        incoming_light   += diffuse * accumulated_tone
        accumulated_tone *= transmit
        stop

A ray that never hits leaves with only the medium contribution. That is the
accepted outcome for non-convergent marches as well; there is no retry.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.core.integrator import RayMarcher, setup_sun
    >>> from moonmarch.geometry.sphere import SphereSDF
    >>>
    >>> marcher = RayMarcher()
    >>> setup_sun((0.5, 0.2, 0.0))
    >>> color = marcher.trace_ray(SphereSDF(radius=6.0), (0, 0, 10), (0, 0, -1))
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from moonmarch.camera.pinhole import get_ray, is_camera_ready
from moonmarch.core.ray import vec3
from moonmarch.geometry.sdf import TRACE_CONTINUE

logger = logging.getLogger(__name__)

# =============================================================================
# March Settings
# =============================================================================

# Step budget per ray
MAX_STEPS = 50

# Lowest diffuse factor, so unlit surfaces are not pure black
AMBIENT_FLOOR = 0.05


@dataclass(frozen=True)
class MarchSettings:
    """Tuning constants of the march loop.

    These are empirical values. They are compiled into the march kernels,
    so a RayMarcher keeps the settings it was created with.

    Attributes:
        max_steps: Step budget per ray.
        ambient_floor: Lower bound of the diffuse factor on hits.
    """

    max_steps: int = MAX_STEPS
    ambient_floor: float = AMBIENT_FLOOR

    def __post_init__(self) -> None:
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")


@ti.dataclass
class MarchResult:
    """Outcome of marching one ray.

    Attributes:
        light: Accumulated incoming light (the ray's color contribution).
        tone: Remaining transmittance along the path.
        hit: 1 if the ray ended on a surface, 0 if the budget ran out.
        steps: Number of trace steps taken.
    """

    light: vec3
    tone: vec3
    hit: ti.i32
    steps: ti.i32


# =============================================================================
# Sun Direction
# =============================================================================

_sun_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_sun_ready = ti.field(dtype=ti.i32, shape=())


def normalize_sun_direction(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Normalize a sun direction.

    Raises:
        ValueError: If the direction is a zero vector.
    """
    dx, dy, dz = (float(c) for c in direction)
    length = math.sqrt(dx * dx + dy * dy + dz * dz)
    if length == 0.0:
        raise ValueError("Sun direction must be a non-zero vector")
    return (dx / length, dy / length, dz / length)


def setup_sun(direction: tuple[float, float, float]) -> None:
    """Configure the sun direction used for diffuse shading.

    The direction points from the sun toward the scene; it is normalized
    here, so any non-zero vector is accepted.

    Args:
        direction: Sun direction (x, y, z).

    Raises:
        ValueError: If the direction is a zero vector.
    """
    sun = normalize_sun_direction(direction)
    _sun_direction[None] = list(sun)
    _sun_ready[None] = 1
    logger.debug("Sun direction set to (%.4f, %.4f, %.4f)", *sun)


def reset_sun() -> None:
    """Mark the sun as not set up."""
    _sun_ready[None] = 0


def get_sun_direction() -> tuple[float, float, float]:
    """Get the normalized sun direction."""
    s = _sun_direction[None]
    return (float(s[0]), float(s[1]), float(s[2]))


def _check_ready() -> None:
    """Raise if camera or sun have not been configured."""
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")
    if _sun_ready[None] == 0:
        raise RuntimeError("Sun not set up. Call setup_sun() first.")


# =============================================================================
# Ray Marcher
# =============================================================================


@ti.data_oriented
class RayMarcher:
    """Marches camera rays through a body and accumulates their light.

    Attributes:
        settings: The march settings compiled into this marcher's kernels.
    """

    def __init__(self, settings: MarchSettings | None = None) -> None:
        if settings is None:
            settings = MarchSettings()
        self.settings = settings
        self.max_steps = settings.max_steps
        self.ambient_floor = settings.ambient_floor
        logger.debug(
            "RayMarcher created: max_steps=%d, ambient_floor=%g",
            self.max_steps,
            self.ambient_floor,
        )

    @ti.func
    def march(self, body: ti.template(), origin: vec3, direction: vec3, sun: vec3) -> MarchResult:
        """March one ray through a body.

        Args:
            body: A SignedDistanceField instance.
            origin: Ray origin (camera position).
            direction: Unit ray direction.
            sun: Unit sun direction.

        Returns:
            The accumulated light, remaining tone, hit flag and step count.
        """
        incoming_light = vec3(0.0, 0.0, 0.0)
        accumulated_tone = vec3(1.0, 1.0, 1.0)
        position = origin
        hit = 0
        steps = 0

        # Active flag instead of break (Taichi doesn't support break in ti.func loops)
        for _ in range(self.max_steps):
            if hit == 0:
                state, position = body.trace_step(direction, position)
                steps += 1

                if state.kind == TRACE_CONTINUE:
                    incoming_light += state.emit * accumulated_tone
                    accumulated_tone *= state.transmit
                else:
                    light_coef = ti.max(tm.dot(state.normal, -sun), self.ambient_floor)
                    diffuse = state.emit * light_coef
                    incoming_light += diffuse * accumulated_tone
                    accumulated_tone *= state.transmit
                    hit = 1

        return MarchResult(light=incoming_light, tone=accumulated_tone, hit=hit, steps=steps)

    @ti.kernel
    def _render_fragments(
        self,
        body: ti.template(),
        screen: ti.types.ndarray(dtype=ti.f32, ndim=2),
        pixels: ti.types.ndarray(dtype=ti.i32, ndim=2),
        image: ti.types.ndarray(dtype=ti.f32, ndim=3),
    ):
        sun = _sun_direction[None]

        # Serial so per-pixel sums add in a fixed order (bit-reproducible)
        ti.loop_config(serialize=True)
        for n in range(screen.shape[0]):
            ray = get_ray(screen[n, 0], screen[n, 1])
            result = self.march(body, ray.origin, ray.direction, sun)
            color = result.light

            # Degenerate marches must not poison the pixel sum
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            px = pixels[n, 0]
            py = pixels[n, 1]
            for c in ti.static(range(3)):
                image[py, px, c] += color[c]

    @ti.kernel
    def _trace_single(
        self,
        body: ti.template(),
        ox: ti.f32,
        oy: ti.f32,
        oz: ti.f32,
        dx: ti.f32,
        dy: ti.f32,
        dz: ti.f32,
    ) -> vec3:
        direction = tm.normalize(vec3(dx, dy, dz))
        result = self.march(body, vec3(ox, oy, oz), direction, _sun_direction[None])
        return result.light

    def render_fragments(
        self,
        body,
        screen: npt.NDArray[np.float32],
        pixels: npt.NDArray[np.int32],
        image: npt.NDArray[np.float32],
    ) -> None:
        """Add the contribution of every fragment to its pixel.

        Args:
            body: A SignedDistanceField instance.
            screen: Float32 array (N, 2) of normalized screen coordinates.
            pixels: Int32 array (N, 2) of (pixel_x, pixel_y).
            image: Float32 array (height, width, 3), updated in place.

        Raises:
            RuntimeError: If camera or sun have not been set up.
        """
        _check_ready()
        if screen.shape[0] == 0:
            return
        self._render_fragments(
            body,
            np.ascontiguousarray(screen, dtype=np.float32),
            np.ascontiguousarray(pixels, dtype=np.int32),
            image,
        )

    def trace_ray(
        self,
        body,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """March a single ray from Python, for testing and debugging.

        Args:
            body: A SignedDistanceField instance.
            origin: Ray origin.
            direction: Ray direction (normalized here, must be non-zero).

        Returns:
            Tuple of (R, G, B) accumulated light.

        Raises:
            RuntimeError: If the sun has not been set up.
            ValueError: If the direction is a zero vector.
        """
        if _sun_ready[None] == 0:
            raise RuntimeError("Sun not set up. Call setup_sun() first.")
        if not any(direction):
            raise ValueError("Ray direction must be a non-zero vector")

        color = self._trace_single(body, *origin, *direction)
        return (float(color[0]), float(color[1]), float(color[2]))
