"""ANSI true-color output of rendered images.

Two layouts are supported:

    halfblock  Each character cell shows two pixel rows using the upper
               half block U+2580: the foreground color paints the top
               row, the background color the bottom row. An odd last row
               is drawn with the foreground color only.
    spaces     Each pixel is one space with a 24-bit background color.

Channels are quantized as clamp(round(v * 256), 0, 255). Every line ends
with the reset sequence ESC[0m and a newline.

Example:
    >>> from moonmarch.preview.terminal import to_ansi
    >>> print(to_ansi(image), end="")
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for terminal layouts
TerminalMode = Literal["halfblock", "spaces"]

TERMINAL_MODES: tuple[str, ...] = ("halfblock", "spaces")

RESET = "\x1b[0m"
HALF_BLOCK = "▀"


def quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.int32]:
    """Quantize linear channel values to 0..255.

    Args:
        image: Float image of any shape.

    Returns:
        Int32 array of the same shape.
    """
    scaled = np.round(np.asarray(image, dtype=np.float32) * 256.0)
    scaled = np.nan_to_num(scaled, nan=0.0)
    return np.clip(scaled, 0, 255).astype(np.int32)


def _foreground(rgb: npt.NDArray[np.int32]) -> str:
    return f"\x1b[38;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def _background(rgb: npt.NDArray[np.int32]) -> str:
    return f"\x1b[48;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def _check_image(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def to_ansi_halfblock(image: npt.NDArray[np.floating]) -> str:
    """Render an image with half-block characters (two rows per line).

    Args:
        image: Float image of shape (H, W, 3), row 0 at the top.

    Returns:
        The escape-sequence string, starting with a reset.

    Raises:
        ValueError: If the image shape is not (H, W, 3).
    """
    _check_image(image)
    pixels = quantize(image)
    height, width, _ = pixels.shape

    parts = [RESET]
    for top in range(0, height - 1, 2):
        for x in range(width):
            parts.append(_foreground(pixels[top, x]))
            parts.append(_background(pixels[top + 1, x]))
            parts.append(HALF_BLOCK)
        parts.append(RESET + "\n")

    if height % 2 == 1:
        for x in range(width):
            parts.append(_foreground(pixels[height - 1, x]))
            parts.append(HALF_BLOCK)
        parts.append(RESET + "\n")

    return "".join(parts)


def to_ansi_spaces(image: npt.NDArray[np.floating]) -> str:
    """Render an image with one colored space per pixel.

    Args:
        image: Float image of shape (H, W, 3), row 0 at the top.

    Returns:
        The escape-sequence string.

    Raises:
        ValueError: If the image shape is not (H, W, 3).
    """
    _check_image(image)
    pixels = quantize(image)
    height, width, _ = pixels.shape

    parts = []
    for y in range(height):
        for x in range(width):
            parts.append(_background(pixels[y, x]))
            parts.append(" ")
        parts.append(RESET + "\n")

    return "".join(parts)


def to_ansi(image: npt.NDArray[np.floating], mode: TerminalMode = "halfblock") -> str:
    """Render an image in the given terminal layout.

    Raises:
        ValueError: If the mode is unknown.
    """
    if mode == "halfblock":
        return to_ansi_halfblock(image)
    if mode == "spaces":
        return to_ansi_spaces(image)
    raise ValueError(f"Unknown terminal mode: {mode}")
