"""Renderer driving the rasterizer, camera and march loop.

The Renderer owns the pixel buffer and wires the pipeline together:

    rasterize(width, height, samples)    -> work list of fragments
    setup_camera / setup_sun             -> validated up front, loaded per batch
    RayMarcher.render_fragments(batch)   -> per-pixel sums

The buffer holds the plain sum of the per-sample contributions, in linear
unclamped color. Dividing by the sample count is a separate step
(``get_normalized_image``) for callers that want an exposure-normalized
image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from moonmarch.core.renderer import Renderer
    >>> from moonmarch.scene.moon_scene import create_moon_scene
    >>>
    >>> moon, camera, sun = create_moon_scene()
    >>> renderer = Renderer(48, 32, samples=4)
    >>> image = renderer.render(moon, camera, sun)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator, Iterator

import numpy as np
import numpy.typing as npt

from moonmarch.camera.multisample import (
    Fragments,
    get_sample_pattern,
    rasterize,
    validate_dimensions,
)
from moonmarch.camera.pinhole import PinholeCamera, compute_camera_basis, setup_camera
from moonmarch.core.integrator import (
    MarchSettings,
    RayMarcher,
    normalize_sun_direction,
    setup_sun,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (fragments_done, fragments_total)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders a body into a summed multisample pixel buffer.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Samples per pixel (1, 2, 4 or 8).
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples: int = 1,
        settings: MarchSettings | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            samples: Samples per pixel (1, 2, 4 or 8).
            settings: March settings. If None, uses default MarchSettings().

        Raises:
            ValueError: If the dimensions or the sample count are invalid.
        """
        validate_dimensions(width, height)
        get_sample_pattern(samples)

        self._width = width
        self._height = height
        self._samples = samples
        self._marcher = RayMarcher(settings)
        self._image = np.zeros((height, width, 3), dtype=np.float32)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def samples(self) -> int:
        """Get the number of samples per pixel."""
        return self._samples

    @property
    def marcher(self) -> RayMarcher:
        """Get the ray marcher used by this renderer."""
        return self._marcher

    def render(
        self,
        body,
        camera: PinholeCamera,
        sun_direction: tuple[float, float, float],
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render the body and return the summed image.

        Clears the buffer first, so each call is a complete render.

        Args:
            body: A SignedDistanceField instance.
            camera: Camera configuration.
            sun_direction: Sun direction (any non-zero vector).
            batch_size: Fragments per batch. If None, renders in one batch.
            callback: Optional callback called after each batch.
                Receives (fragments_done, fragments_total).

        Returns:
            Copy of the summed image, shape (height, width, 3), float32.

        Raises:
            ValueError: If the camera, sun or batch size is invalid.
        """
        for done, total in self.render_progressive(body, camera, sun_direction, batch_size):
            if callback is not None:
                callback(done, total)
        return self.get_image()

    def render_progressive(
        self,
        body,
        camera: PinholeCamera,
        sun_direction: tuple[float, float, float],
        batch_size: int | None = None,
    ) -> Iterator[tuple[int, int]]:
        """Render batch by batch, yielding progress after each one.

        Arguments are validated when this is called, before the first batch
        is requested. The buffer is cleared once iteration starts.

        Args:
            body: A SignedDistanceField instance.
            camera: Camera configuration.
            sun_direction: Sun direction (any non-zero vector).
            batch_size: Fragments per batch. If None, renders in one batch.

        Returns:
            Iterator of (fragments_done, fragments_total) tuples.

        Raises:
            ValueError: If the camera, sun or batch size is invalid.
        """
        compute_camera_basis(camera)
        sun = normalize_sun_direction(sun_direction)
        if batch_size is not None and batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        # Snapshot, so later edits to the caller's camera don't leak into this render
        camera = PinholeCamera(position=tuple(camera.position), direction=tuple(camera.direction))
        fragments = rasterize(self._width, self._height, self._samples)
        if batch_size is None:
            batch_size = len(fragments)
        return self._march_batches(body, camera, sun, fragments, batch_size)

    def _march_batches(
        self,
        body,
        camera: PinholeCamera,
        sun: tuple[float, float, float],
        fragments: Fragments,
        batch_size: int,
    ) -> Generator[tuple[int, int], None, None]:
        self._image.fill(0.0)
        total = len(fragments)

        start_time = time.perf_counter()
        done = 0
        for batch in fragments.batches(batch_size):
            # Camera and sun live in shared fields; reload them in case another
            # render ran between two of our batches
            setup_camera(camera)
            setup_sun(sun)
            self._marcher.render_fragments(body, batch.screen, batch.pixels, self._image)
            done += len(batch)
            yield (done, total)

        logger.info(
            "Rendered %d fragments (%dx%d, %d spp) in %.3fs",
            total,
            self._width,
            self._height,
            self._samples,
            time.perf_counter() - start_time,
        )

    def get_image(self) -> npt.NDArray[np.float32]:
        """Get the summed image (linear, unclamped).

        Returns:
            Array of shape (height, width, 3) with dtype float32.
        """
        return self._image.copy()

    def get_normalized_image(self) -> npt.NDArray[np.float32]:
        """Get the image divided by the sample count.

        Returns:
            Array of shape (height, width, 3) with dtype float32.
        """
        return self._image * np.float32(1.0 / self._samples)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.samples})"
        )
