"""Render the procedural moon to the terminal.

Usage:
    moonmarch [options]
    python -m moonmarch [options]

Options:
    --size WxH          Image size in pixels (default: 48x32)
    --multi N           Samples per pixel: 1, 2, 4 or 8 (default: 1)
    --mode MODE         Terminal layout: halfblock or spaces (default: halfblock)
    --tone-map METHOD   none, reinhard or exposure (default: none)
    --gamma GAMMA       Gamma encoding before quantization (default: 1.0)
    --seed SEED         Surface noise seed (default: 6554)
    --arch ARCH         Taichi backend: cpu or gpu (default: cpu)
    --batch-size SIZE   Fragments per progress update (default: whole image)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

The picture goes to stdout, progress to stderr.

Example:
    moonmarch --size 80x48 --multi 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import taichi as ti

from moonmarch.camera.multisample import SUPPORTED_SAMPLE_COUNTS
from moonmarch.preview.display import TONE_MAP_METHODS
from moonmarch.preview.terminal import TERMINAL_MODES


def parse_size(text: str) -> tuple[int, int]:
    """Parse a ``WxH`` size string.

    Raises:
        argparse.ArgumentTypeError: If the string is not two positive
            integers separated by ``x``.
    """
    parts = text.lower().split("x")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"invalid size format {text!r}, expected WxH")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid size {text!r}: {e}") from e
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="moonmarch",
        description="Render a ray-marched procedural moon to the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-s",
        "--size",
        type=parse_size,
        default=(48, 32),
        help="Image size in pixels as WxH (default: 48x32)",
    )
    parser.add_argument(
        "-m",
        "--multi",
        type=int,
        default=1,
        choices=SUPPORTED_SAMPLE_COUNTS,
        help="Samples per pixel (default: 1)",
    )
    parser.add_argument(
        "--mode",
        default="halfblock",
        choices=TERMINAL_MODES,
        help="Terminal layout (default: halfblock)",
    )
    parser.add_argument(
        "--tone-map",
        default="none",
        choices=TONE_MAP_METHODS,
        help="Tone mapping before quantization (default: none)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma encoding before quantization (default: 1.0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Surface noise seed (default: 6554)",
    )
    parser.add_argument(
        "--arch",
        default="cpu",
        choices=("cpu", "gpu"),
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Fragments per progress update (default: whole image)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def render_moon(
    width: int = 48,
    height: int = 32,
    samples: int = 1,
    seed: int | None = None,
    mode: str = "halfblock",
    tone_map: str = "none",
    gamma: float = 1.0,
    batch_size: int | None = None,
    quiet: bool = False,
) -> str:
    """Render the moon scene and return it as an ANSI string.

    Taichi must already be initialized.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Samples per pixel.
        seed: Surface noise seed. If None, uses the scene default.
        mode: Terminal layout.
        tone_map: Tone mapping method.
        gamma: Gamma encoding.
        batch_size: Fragments per progress update.
        quiet: If True, suppress progress output.

    Returns:
        The rendered picture as escape sequences.
    """
    # Lazy imports so fields are allocated after ti.init()
    from moonmarch.core.renderer import Renderer
    from moonmarch.preview.display import process_image_for_display
    from moonmarch.preview.terminal import to_ansi
    from moonmarch.scene.moon_scene import MoonSceneParams, create_moon_scene

    if not quiet:
        print(f"Creating moon scene ({width}x{height}, {samples} spp)...", file=sys.stderr)

    params = MoonSceneParams() if seed is None else MoonSceneParams(seed=seed)
    moon, camera, sun = create_moon_scene(params)
    renderer = Renderer(width, height, samples=samples)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} fragments ({progress_pct:.1f}%)",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(moon, camera, sun, batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print(file=sys.stderr)  # Newline after progress
        print(f"Total time: {time.time() - start_time:.2f}s", file=sys.stderr)

    image = process_image_for_display(
        renderer.get_normalized_image(),
        tone_map=tone_map,
        gamma=gamma,
    )
    return to_ansi(image, mode=mode)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    width, height = args.size
    try:
        picture = render_moon(
            width=width,
            height=height,
            samples=args.multi,
            seed=args.seed,
            mode=args.mode,
            tone_map=args.tone_map,
            gamma=args.gamma,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(picture)
    return 0


if __name__ == "__main__":
    sys.exit(main())
