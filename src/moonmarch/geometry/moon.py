"""Procedural moon: a noise-bumped sphere wrapped in a thin glow.

Distance field:
    base = |p - C| - R
    d(p) = base                                          if base > BUMP
    d(p) = base + noise(p * FREQ) * smoothstep(BUMP - base) * BUMP   otherwise

Far from the surface the noise is never evaluated. Inside the bump shell the
noise weight ramps from 0 at the shell boundary to BUMP, so the field stays
continuous and the march still converges.

Trace step:
    The position advances by the current distance. A step of at most the
    hit threshold is a surface hit: the base color gets its blue channel
    shifted by the noise at the new position, transmittance is white and
    the normal comes from the SDF gradient. Any other step passes through
    atmosphere, emitting ``white / (d + GLOW_OFFSET)`` and transmitting
    ``white - glow``. The glow is brightest for rays skimming the surface
    and negligible far away.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.geometry.moon import Moon, MoonParams
    >>> moon = Moon(MoonParams(radius=6.0, seed=6554))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from moonmarch.core.ray import smoothstep, vec3
from moonmarch.geometry.noise import NoiseField
from moonmarch.geometry.sdf import SignedDistanceField, make_continue, make_hit


@dataclass
class MoonParams:
    """Parameters of the procedural moon.

    Attributes:
        color: Diffuse base color (r, g, b).
        radius: Base sphere radius.
        position: Base sphere center in world space.
        seed: Seed of the surface noise field.
        bump_height: Thickness of the shell where noise perturbs the
            surface, and the peak bump amplitude.
        bump_frequency: Scale applied to positions before sampling noise.
        hit_threshold: Step distance at or below which the ray hits.
        glow_offset: Added to the distance in the glow term; larger values
            give a fainter atmosphere.

    Example:
        >>> params = MoonParams()
        >>> params.radius
        6.0
    """

    color: tuple[float, float, float] = (0.5, 0.0, 0.0)
    radius: float = 6.0
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    seed: int = 6554
    bump_height: float = 2.0
    bump_frequency: float = 1.0
    hit_threshold: float = 0.01
    glow_offset: float = 200.0


@ti.data_oriented
class Moon(SignedDistanceField):
    """The moon body traced by the renderer.

    State is fixed at construction and read-only while rendering.
    """

    def __init__(self, params: MoonParams | None = None) -> None:
        """Create the moon and its noise field.

        Args:
            params: Moon parameters. If None, uses default MoonParams().

        Raises:
            ValueError: If radius or bump height is not positive.
        """
        if params is None:
            params = MoonParams()

        if params.radius <= 0.0:
            raise ValueError(f"Moon radius must be positive, got {params.radius}")
        if params.bump_height <= 0.0:
            raise ValueError(f"Bump height must be positive, got {params.bump_height}")

        self.params = params

        # Tuning constants are compiled into the kernels
        self.bump_height = params.bump_height
        self.bump_frequency = params.bump_frequency
        self.hit_threshold = params.hit_threshold
        self.glow_offset = params.glow_offset

        self._radius = ti.field(dtype=ti.f32, shape=())
        self._position = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._radius[None] = params.radius
        self._position[None] = list(params.position)
        self._color[None] = list(params.color)

        self.surface = NoiseField(params.seed)

    @ti.func
    def signed_dist(self, point: vec3) -> ti.f32:
        dist = tm.length(point - self._position[None]) - self._radius[None]
        result = dist
        if dist <= self.bump_height:
            noise = self.surface.sample(point * self.bump_frequency)
            result = dist + noise * smoothstep(self.bump_height - dist) * self.bump_height
        return result

    @ti.func
    def trace_step(self, direction: vec3, position: vec3):
        distance = self.signed_dist(position)
        new_position = position + direction * distance

        # Atmosphere: glow is taken out of the transmitted light
        glow = vec3(1.0, 1.0, 1.0) / (distance + self.glow_offset)
        state = make_continue(glow, vec3(1.0, 1.0, 1.0) - glow)

        if distance <= self.hit_threshold:
            # Surface: cheap color variation on the blue channel
            noise = self.surface.sample(new_position)
            state = make_hit(
                self._color[None] + vec3(0.0, 0.0, noise),
                vec3(1.0, 1.0, 1.0),
                self.normal(new_position),
            )
        return state, new_position
