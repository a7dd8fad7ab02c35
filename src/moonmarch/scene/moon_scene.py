"""Default moon scene configuration.

The default scene looks at a red moon of radius 6 at the origin from
ten units down the +z axis, lit by a low sun from the +x side:

    camera:  position (0, 0, 10), direction (0, 0, -1)
    sun:     direction (0.5, 0.2, 0.0)
    moon:    color (0.5, 0, 0), radius 6, seed 6554

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.scene.moon_scene import MoonSceneParams, create_moon_scene
    >>>
    >>> moon, camera, sun = create_moon_scene(MoonSceneParams(seed=7))
"""

from dataclasses import dataclass

from moonmarch.camera.pinhole import PinholeCamera
from moonmarch.geometry.moon import Moon, MoonParams

# Default camera placement
CAMERA_POSITION = (0.0, 0.0, 10.0)
CAMERA_DIRECTION = (0.0, 0.0, -1.0)

# Default sun direction (normalized by the integrator)
SUN_DIRECTION = (0.5, 0.2, 0.0)

# Default moon appearance
MOON_COLOR = (0.5, 0.0, 0.0)
MOON_RADIUS = 6.0
MOON_POSITION = (0.0, 0.0, 0.0)
MOON_SEED = 6554


@dataclass
class MoonSceneParams:
    """Parameters for configuring the moon scene.

    Attributes:
        camera_position: Camera position in world space.
        camera_direction: Camera forward direction.
        sun_direction: Direction the sunlight travels.
        color: Moon base color.
        radius: Moon radius.
        position: Moon center.
        seed: Surface noise seed.

    Example:
        >>> params = MoonSceneParams(seed=42, radius=4.0)
    """

    camera_position: tuple[float, float, float] = CAMERA_POSITION
    camera_direction: tuple[float, float, float] = CAMERA_DIRECTION
    sun_direction: tuple[float, float, float] = SUN_DIRECTION
    color: tuple[float, float, float] = MOON_COLOR
    radius: float = MOON_RADIUS
    position: tuple[float, float, float] = MOON_POSITION
    seed: int = MOON_SEED


def create_moon_scene(
    params: MoonSceneParams | None = None,
) -> tuple[Moon, PinholeCamera, tuple[float, float, float]]:
    """Create the moon, its camera and the sun direction.

    Args:
        params: Optional MoonSceneParams. If None, uses defaults.

    Returns:
        A tuple of (Moon, PinholeCamera, sun_direction).

    Raises:
        ValueError: If the moon radius is not positive.
    """
    if params is None:
        params = MoonSceneParams()

    moon = Moon(
        MoonParams(
            color=params.color,
            radius=params.radius,
            position=params.position,
            seed=params.seed,
        )
    )
    camera = PinholeCamera(
        position=params.camera_position,
        direction=params.camera_direction,
    )
    return moon, camera, params.sun_direction
