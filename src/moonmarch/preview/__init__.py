"""Preview module for showing renders in a terminal.

Components:
    display: Tone mapping (Reinhard, exposure) and gamma encoding
    terminal: 24-bit ANSI escape output (half-block and spaces layouts)

Example:
    >>> from moonmarch.preview import process_image_for_display, to_ansi
    >>>
    >>> shown = process_image_for_display(renderer.get_normalized_image())
    >>> print(to_ansi(shown, mode="halfblock"), end="")
"""

from moonmarch.preview.display import (
    TONE_MAP_METHODS,
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)
from moonmarch.preview.terminal import (
    TERMINAL_MODES,
    TerminalMode,
    quantize,
    to_ansi,
    to_ansi_halfblock,
    to_ansi_spaces,
)

__all__ = [
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    "TONE_MAP_METHODS",
    # Terminal output
    "quantize",
    "to_ansi",
    "to_ansi_halfblock",
    "to_ansi_spaces",
    "TerminalMode",
    "TERMINAL_MODES",
]
