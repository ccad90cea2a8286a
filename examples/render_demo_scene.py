#!/usr/bin/env python3
"""Render the demo scene (or a scene from a JSON configuration).

Usage:
    python examples/render_demo_scene.py [options]

Options:
    --width WIDTH               Image width in pixels (default: 800)
    --height HEIGHT             Image height in pixels (default: 450)
    --samples SAMPLES           Samples per pixel (default: 100)
    --max-depth DEPTH           Maximum bounces per path (default: 20)
    --seed SEED                 Root seed for reproducible output
    --sun-probability P         Chance of a sun-biased bounce (default: 0)
    --rows-per-batch ROWS       Rows per progress update (default: 32)
    --config PATH               JSON configuration; overrides the demo scene
    --output OUTPUT             Output file path (default: demo.png)
    --quiet / --verbose         Less or more logging

Example:
    python examples/render_demo_scene.py --width 400 --height 225 --samples 20 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_demo_scene")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=800, help="Image width in pixels (default: 800)")
    parser.add_argument("--height", type=int, default=450, help="Image height in pixels (default: 450)")
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel (default: 100)")
    parser.add_argument("--max-depth", type=int, default=20, help="Maximum bounces (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="Root seed (default: random)")
    parser.add_argument(
        "--sun-probability",
        type=float,
        default=0.0,
        help="Probability of a sun-biased bounce (default: 0)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=32,
        help="Rows per progress update (default: 32)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON configuration file; replaces the demo scene and the options above",
    )
    parser.add_argument("--output", type=str, default="demo.png", help="Output file path")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    verbosity.add_argument("--verbose", action="store_true", help="Log per-batch progress")
    return parser.parse_args()


def render_scene(args: argparse.Namespace) -> Path:
    """Build the configuration, render it and save the PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from skytrace.config import RenderConfig, load_config
    from skytrace.core.renderer import FrameRenderer, RenderSettings
    from skytrace.scene.demo import create_demo_scene

    if args.config is not None:
        config = load_config(args.config)
    else:
        world, camera = create_demo_scene(width=args.width, height=args.height)
        config = RenderConfig(
            world=world,
            camera=camera,
            settings=RenderSettings(
                image_samples=args.samples,
                max_depth=args.max_depth,
                seed=args.seed,
                sun_probability=args.sun_probability,
            ),
        )

    renderer = FrameRenderer(config.world, config.camera, config.settings)

    def progress_callback(done: int, total: int) -> None:
        logger.info("Progress: %d/%d rows (%.1f%%)", done, total, 100.0 * done / total)

    renderer.render(rows_per_batch=args.rows_per_batch, callback=progress_callback)

    output_file = Path(args.output)
    renderer.save_image(str(output_file))
    logger.info("Saved to: %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        logger.info("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        logger.info("Using CPU backend")

    try:
        render_scene(args)
        return 0
    except Exception:
        logger.exception("Render failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
