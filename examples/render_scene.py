#!/usr/bin/env python3
"""Render a scene to a PPM (and optionally PNG) image.

This script builds a scene (the stock demo scene, or one loaded from a JSON
file), sets up the camera, renders with progress reporting and writes the
result as a P3 PPM file.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene FILE        Scene JSON file (default: built-in demo scene)
    --brightness B      Override the scene brightness (clamped into (0, 1])
    --width WIDTH       Image width in pixels (default: 320)
    --height HEIGHT     Image height in pixels (default: 180)
    --samples SAMPLES   Primary rays per pixel (default: 16)
    --batch-size SIZE   Samples per progress update (default: 4)
    --output OUTPUT     Output PPM path (default: output.ppm)
    --png PNG           Also write a PNG to this path
    --cpu               Force the CPU backend
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 640 --height 360 --samples 32
    python -m examples.render_scene --scene examples/scenes/demo.json --png out.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene to a PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Scene JSON file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--brightness",
        type=float,
        default=None,
        help="Override the scene brightness (clamped into (0, 1])",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=320,
        help="Image width in pixels (default: 320)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=180,
        help="Image height in pixels (default: 180)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=16,
        help="Primary rays per pixel (default: 16)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=4,
        help="Samples per progress update (default: 4)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output.ppm",
        help="Output PPM path (default: output.ppm)",
    )
    parser.add_argument(
        "--png",
        type=str,
        default=None,
        help="Also write a PNG to this path",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_scene(
    scene_path: str | None = None,
    brightness: float | None = None,
    width: int = 320,
    height: int = 180,
    num_samples: int = 16,
    output_path: str = "output.ppm",
    png_path: str | None = None,
    batch_size: int = 4,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        scene_path: Optional scene JSON file; the demo scene is used if None.
        brightness: Optional brightness override.
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Primary rays per pixel.
        output_path: Output file path (PPM).
        png_path: Optional additional PNG output path.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved PPM file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.rt.scene.demo import create_demo_camera, create_demo_scene
    from src.rt.scene.scene import Scene

    if scene_path is None:
        scene = create_demo_scene()
    else:
        scene = Scene.load_json(scene_path)

    if brightness is not None:
        scene = Scene(scene.objects, brightness=brightness)

    if not quiet:
        print(f"Scene: {len(scene)} objects, brightness {scene.brightness:g} ({width}x{height})")

    camera = create_demo_camera(width=width, height=height, sample_size=num_samples)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    camera.send_rays(scene, batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    camera.write_to_ppm(output_file)
    if png_path is not None:
        camera.save_png(png_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        if png_path is not None:
            print(f"Saved to: {Path(png_path).absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_scene(
            scene_path=args.scene,
            brightness=args.brightness,
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            output_path=args.output,
            png_path=args.png,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
