"""Command-line entry point: render a scene to a PNG file.

Usage:
    pathtrace [options]
    python -m src.pathtrace.cli [options]

Options:
    --width WIDTH           Image width in pixels (default: 1920)
    --height HEIGHT         Image height in pixels (default: 1080)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum ray bounces (default: 10)
    --scene NAME            Preset scene (default: default)
    --scene-file PATH       Load the scene from a JSON file instead
    --mode MODE             material or normals (default: material)
    --seed SEED             Global random seed (default: 0)
    --threads N             Worker threads (default: all cores)
    --rows-per-batch N      Rows per progress update (default: 1)
    --output OUTPUT         Output file path (default: res/scene.png)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    pathtrace --width 400 --height 225 --samples 20 --output res/small.png
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_SAMPLES = 100
DEFAULT_MAX_DEPTH = 10
DEFAULT_OUTPUT = "res/scene.png"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pathtrace",
        description="Render a sphere scene with a CPU path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum number of ray bounces (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="default",
        help="Preset scene name: default or single (default: default)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene description; overrides --scene",
    )
    parser.add_argument(
        "--mode",
        choices=("material", "normals"),
        default="material",
        help="Shading mode (default: material)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Global random seed (default: 0)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of worker threads (default: all cores)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=1,
        help="Rows rendered between progress updates (default: 1)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
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
    return parser.parse_args(argv)


def init_taichi(threads: int | None = None) -> None:
    """Initialize Taichi on the CPU backend."""
    if threads is not None and threads < 1:
        raise ValueError(f"Thread count must be at least 1, got {threads}")
    kwargs = {"arch": ti.cpu}
    if threads is not None:
        kwargs["cpu_max_num_threads"] = threads
    ti.init(**kwargs)


def load_scene(scene_name: str, scene_file: str | None = None):
    """Build the scene to render from a preset name or a JSON file.

    Returns:
        The SceneManager holding the scene.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtrace.scene.manager import SceneManager
    from src.pathtrace.scene.presets import create_scene

    if scene_file is None:
        return create_scene(scene_name)

    with open(scene_file, encoding="utf-8") as fh:
        data = json.load(fh)
    scene = SceneManager()
    scene.from_dict(data)
    logger.debug("Loaded %d spheres from %s", scene.get_sphere_count(), scene_file)
    return scene


def render_scene(args: argparse.Namespace) -> Path:
    """Render the scene described by parsed arguments and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtrace.camera.viewport import CameraConfig
    from src.pathtrace.core.integrator import RenderMode
    from src.pathtrace.core.renderer import Renderer
    from src.pathtrace.preview.export import save_png

    config = CameraConfig(
        width=args.width,
        height=args.height,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
    )
    scene = load_scene(args.scene, args.scene_file)
    mode = RenderMode.NORMALS if args.mode == "normals" else RenderMode.MATERIAL

    if not args.quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{config.width}x{config.height}, {config.samples_per_pixel} spp..."
        )

    renderer = Renderer(config)

    def progress_callback(done: int, total: int) -> None:
        if not args.quiet:
            print(f"\r  Scanlines remaining: {total - done:5d}", end="", flush=True)

    start_time = time.time()
    image = renderer.render(
        callback=progress_callback,
        rows_per_batch=args.rows_per_batch,
        mode=mode,
    )
    elapsed = time.time() - start_time

    if not args.quiet:
        print()  # Newline after progress
        print(f"Render finished in {elapsed:.2f} s")

    output_file = save_png(image, args.output)
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")

    return output_file


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        init_taichi(args.threads)
        render_scene(args)
        return 0
    except Exception as e:
        logger.debug("Render failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
