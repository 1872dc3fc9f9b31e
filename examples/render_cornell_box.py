#!/usr/bin/env python3
"""Render the Cornell box scene to a PNG file.

This script builds the Cornell box, aims the camera into it, and renders the
image in row batches, printing progress after every batch.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --preset NAME           Base settings: fast, balanced or quality
    --config FILE           JSON file with render settings (applied before flags)
    --width WIDTH           Image width in pixels
    --height HEIGHT         Image height in pixels
    --samples SAMPLES       Samples per pixel
    --max-depth DEPTH       Maximum path length
    --fov DEGREES           Vertical field of view
    --distance SCALE        Camera distance in units of 50 scene units
    --batch-rows ROWS       Rows per progress update
    --no-boxes              Leave out the two boxes
    --no-light              Leave out the ceiling light
    --light-intensity K     Light intensity multiplier
    --left-box MATERIAL     Tall box material: lambertian, metal or glass
    --right-box MATERIAL    Short box material: lambertian, metal or glass
    --output OUTPUT         Output file path (default: cornell_box.png)
    --seed SEED             Random seed
    --arch ARCH             Taichi backend: cpu (default), gpu or cuda
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    python -m examples.render_cornell_box --preset fast --right-box glass
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

# Allow `python examples/render_cornell_box.py` from a checkout
_ROOT = str(Path(__file__).resolve().parents[1])
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

import taichi as ti  # noqa: E402

import src.pathtracer as pt  # noqa: E402

if TYPE_CHECKING:
    from src.pathtracer.config import RenderConfig

BOX_MATERIAL_CHOICES = ("lambertian", "metal", "glass")

# Backends offered on the command line; pt.init drops to cpu when gpu lacks f64
ARCHES = {"cpu": ti.cpu, "gpu": ti.gpu, "cuda": ti.cuda}

# Command-line flag -> RenderConfig field
_RENDER_FLAGS = {
    "width": "image_width",
    "height": "image_height",
    "samples": "samples_per_pixel",
    "max_depth": "max_depth",
    "fov": "camera_vfov",
    "distance": "camera_distance_scale",
    "batch_rows": "batch_rows",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--preset", choices=("fast", "balanced", "quality"), help="Base settings")
    parser.add_argument("--config", type=str, help="JSON file with render settings")
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--height", type=int, help="Image height in pixels")
    parser.add_argument("--samples", type=int, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, help="Maximum path length")
    parser.add_argument("--fov", type=float, help="Vertical field of view in degrees")
    parser.add_argument("--distance", type=float, help="Camera distance scale")
    parser.add_argument("--batch-rows", type=int, help="Rows per progress update")
    parser.add_argument("--no-boxes", action="store_true", help="Leave out the two boxes")
    parser.add_argument("--no-light", action="store_true", help="Leave out the ceiling light")
    parser.add_argument("--light-intensity", type=float, help="Light intensity multiplier")
    parser.add_argument("--left-box", choices=BOX_MATERIAL_CHOICES, help="Tall box material")
    parser.add_argument("--right-box", choices=BOX_MATERIAL_CHOICES, help="Short box material")
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Combine the config file, preset and flags into a RenderConfig.

    Later sources win: the JSON file, then --preset, then individual flags.

    Raises:
        ValueError: If a setting is out of range or the JSON is malformed.
        OSError: If the config file cannot be read.
    """
    from src.pathtracer.config import RenderConfig

    data: dict[str, Any] = {}
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in {args.config}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"{args.config} must contain a JSON object")

    if args.preset:
        data["preset"] = args.preset

    for flag, key in _RENDER_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            data[key] = value

    scene = dict(data.get("scene") or {})
    if args.no_boxes:
        scene["show_boxes"] = False
    if args.no_light:
        scene["show_light"] = False
    if args.light_intensity is not None:
        scene["light_intensity"] = args.light_intensity
    if args.left_box:
        scene["left_box_material"] = args.left_box
    if args.right_box:
        scene["right_box_material"] = args.right_box
    if scene:
        data["scene"] = scene

    return RenderConfig.from_dict(data)


def render_cornell_box(
    config: RenderConfig,
    output_path: str = "cornell_box.png",
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Args:
        config: Render settings.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    from src.pathtracer.core.progressive import ProgressiveRenderer, RenderProgress

    def progress_callback(progress: RenderProgress) -> None:
        if not quiet:
            print(
                f"\r  {progress.status} {progress.percent:5.1f}% "
                f"({progress.elapsed_seconds:.1f}s)",
                end="",
                flush=True,
            )

    renderer = ProgressiveRenderer(
        config.image_width,
        config.image_height,
        progress_callback=progress_callback,
    )
    scene = renderer.apply_config(config)

    if not quiet:
        print(f"Scene: {scene!r}")
        print(
            f"Rendering {config.image_width}x{config.image_height}, "
            f"{config.samples_per_pixel} spp, max depth {config.max_depth}..."
        )

    final = renderer.render()

    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        if final is not None:
            print(f"Total time: {final.elapsed_seconds:.1f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point; returns the process exit code."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")

    backend = pt.init(arch=ARCHES[args.arch], random_seed=args.seed)
    if not args.quiet:
        print(f"Backend: {backend.name}")

    try:
        config = build_config(args)
        render_cornell_box(config, output_path=args.output, quiet=args.quiet)
        return 0
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
