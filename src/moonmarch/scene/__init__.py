"""Scene module.

Components:
    moon_scene: Default moon, camera and sun configuration

Example:
    >>> from moonmarch.scene import create_moon_scene
    >>> moon, camera, sun = create_moon_scene()
"""

from .moon_scene import MoonSceneParams, create_moon_scene

__all__ = [
    "MoonSceneParams",
    "create_moon_scene",
]
