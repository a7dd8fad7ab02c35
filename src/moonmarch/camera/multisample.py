"""Multisample rasterizer producing the per-sample work list.

Each pixel is sampled at a fixed set of sub-pixel offsets. The patterns
are rotated grids at 1/16-pixel resolution:

    1: center only
    2: two diagonal samples
    4: rotated 4-sample grid
    8: 8-queens style pattern

Any other sample count is a configuration error.

For pixel (px, py) and offset (sx, sy) the screen coordinate is:

    x =  ((px - width // 2) + sx) / width * 2
    y = -((py - height // 2) + sy) / height * 2

The vertical axis is flipped so that row 0 is the top of the image while
positive y points up in the world.

Example:
    >>> fragments = rasterize(4, 4, samples=2)
    >>> len(fragments)
    32
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)

# Sub-pixel grid resolution of the sample offsets
SUBPIXEL_RESOLUTION = 16.0

# Sample offsets in 1/16-pixel units, keyed by sample count
SAMPLE_PATTERNS: dict[int, tuple[tuple[int, int], ...]] = {
    1: ((0, 0),),
    2: ((-4, -4), (4, 4)),
    4: ((-2, -6), (6, -2), (-6, 2), (2, 6)),
    8: (
        (-7, 1),
        (-5, -5),
        (-3, 5),
        (-1, -3),
        (1, 3),
        (3, -7),
        (5, -1),
        (7, 7),
    ),
}

SUPPORTED_SAMPLE_COUNTS = tuple(sorted(SAMPLE_PATTERNS))


def get_sample_pattern(samples: int) -> npt.NDArray[np.float32]:
    """Get the sub-pixel offsets for a sample count.

    Args:
        samples: Samples per pixel (1, 2, 4 or 8).

    Returns:
        Array of shape (samples, 2) with offsets in pixels.

    Raises:
        ValueError: If the sample count has no pattern.
    """
    if samples not in SAMPLE_PATTERNS:
        raise ValueError(
            f"Unsupported multisample pattern: {samples} samples "
            f"(expected one of {SUPPORTED_SAMPLE_COUNTS})"
        )
    offsets = np.array(SAMPLE_PATTERNS[samples], dtype=np.float32)
    return offsets / SUBPIXEL_RESOLUTION


@dataclass
class Fragments:
    """Work list of (screen coordinate, pixel) pairs.

    Attributes:
        screen: Float32 array of shape (N, 2) with normalized (x, y).
        pixels: Int32 array of shape (N, 2) with (pixel_x, pixel_y).
    """

    screen: npt.NDArray[np.float32]
    pixels: npt.NDArray[np.int32]

    def __len__(self) -> int:
        return int(self.screen.shape[0])

    def batches(self, batch_size: int) -> Iterator[Fragments]:
        """Split the work list into consecutive batches.

        Args:
            batch_size: Maximum number of fragments per batch (positive).

        Yields:
            Fragments views of at most batch_size items, in order.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        for start in range(0, len(self), batch_size):
            stop = start + batch_size
            yield Fragments(
                screen=self.screen[start:stop],
                pixels=self.pixels[start:stop],
            )


def validate_dimensions(width: int, height: int) -> None:
    """Reject non-positive image dimensions.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")


def rasterize(width: int, height: int, samples: int = 1) -> Fragments:
    """Enumerate every (pixel, sample) pair of an image.

    Items are ordered by pixel x, then pixel y, then sample. Consumers
    accumulate per pixel and do not depend on this order.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Samples per pixel (1, 2, 4 or 8).

    Returns:
        The work list with width * height * samples items.

    Raises:
        ValueError: If the dimensions or the sample count are invalid.
    """
    validate_dimensions(width, height)
    offsets = get_sample_pattern(samples)

    px, py, sample = np.meshgrid(
        np.arange(width, dtype=np.int32),
        np.arange(height, dtype=np.int32),
        np.arange(samples),
        indexing="ij",
    )
    px = px.ravel()
    py = py.ravel()
    sample = sample.ravel()

    xf = (px - width // 2).astype(np.float32) + offsets[sample, 0]
    yf = (py - height // 2).astype(np.float32) + offsets[sample, 1]

    screen = np.empty((px.size, 2), dtype=np.float32)
    screen[:, 0] = xf / np.float32(width) * np.float32(2.0)
    screen[:, 1] = -yf / np.float32(height) * np.float32(2.0)

    pixels = np.stack([px, py], axis=1).astype(np.int32)

    logger.debug(
        "Rasterized %dx%d image with %d samples per pixel: %d fragments",
        width,
        height,
        samples,
        px.size,
    )
    return Fragments(screen=screen, pixels=pixels)
