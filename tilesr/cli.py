"""
Command-line interface for tiled super-resolution.

Usage:
    python -m tilesr render <inputs...> --model swin_unet/art --scale 2 [--noise 1] [--tta]
    python -m tilesr plan <image_path> [--tile-size 256] [--scale 2] [--output json|visual]
    python -m tilesr --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tilesr.config.models import (
    BLEND_CHOICES,
    MODEL_CHOICES,
    NOISE_CHOICES,
    SCALE_CHOICES,
    TILE_SIZE_CHOICES,
    ModelPreset,
)
from tilesr.config.render_config import RenderConfig
from tilesr.errors import TilingError

logger = logging.getLogger(__name__)


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="tilesr",
        description="Tiled super-resolution for images of any size",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # render command
    render_parser = subparsers.add_parser(
        "render",
        help="Upscale image files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s image.png --model swin_unet/art --scale 2          Upscale one image
  %(prog)s images/ -r --model cunet/art --scale 2 --noise 1   Upscale and denoise a tree
  %(prog)s image.png --backend resize --scale 4               Plain bicubic, no model
        """,
    )
    render_parser.add_argument(
        "inputs",
        nargs="+",
        help="Input image files or directories",
    )
    render_parser.add_argument(
        "--model",
        choices=MODEL_CHOICES,
        default="swin_unet/art",
        help="Model family and domain (default: swin_unet/art)",
    )
    render_parser.add_argument(
        "--scale",
        type=int,
        choices=SCALE_CHOICES,
        default=None,
        help="Upscaling factor (default: 2)",
    )
    render_parser.add_argument(
        "--noise",
        type=int,
        choices=NOISE_CHOICES,
        default=-1,
        help="Denoising level, -1 for none (default: -1)",
    )
    render_parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Tiles per backend call (default: 1)",
    )
    render_parser.add_argument(
        "--tile-size",
        type=int,
        choices=TILE_SIZE_CHOICES,
        default=None,
        help="Input tile size in pixels (default: 256)",
    )
    render_parser.add_argument(
        "--blend",
        type=float,
        choices=BLEND_CHOICES,
        default=None,
        help="Fraction of a tile blended with each neighbour (default: 0.0625)",
    )
    render_parser.add_argument(
        "--tta",
        action="store_true",
        default=None,
        help="Average the 8 flips/rotations of every tile",
    )
    render_parser.add_argument(
        "-o", "--output",
        help="Output directory (default: next to each input)",
    )
    render_parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Search directories recursively",
    )
    render_parser.add_argument(
        "--backend",
        choices=["onnx", "resize"],
        default="onnx",
        help="Inference backend (default: onnx)",
    )
    render_parser.add_argument(
        "--models-dir",
        default="models",
        help="Directory holding <model>/<noiseN_scaleNx>.onnx files (default: models)",
    )
    render_parser.add_argument(
        "--device",
        type=int,
        default=0,
        help="GPU device id for the onnx backend (default: 0)",
    )
    render_parser.add_argument(
        "--config",
        help="YAML file with render settings; command-line flags take precedence",
    )
    render_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    # plan command
    plan_parser = subparsers.add_parser(
        "plan",
        help="Show the tile grid planned for an image",
    )
    plan_parser.add_argument(
        "image_path",
        type=str,
        help="Path to the input image",
    )
    plan_parser.add_argument(
        "--tile-size",
        type=int,
        default=256,
        help="Input tile size in pixels (default: 256)",
    )
    plan_parser.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Upscaling factor (default: 2)",
    )
    plan_parser.add_argument(
        "--blend",
        type=float,
        default=1.0 / 16.0,
        help="Fraction of a tile blended with each neighbour (default: 0.0625)",
    )
    plan_parser.add_argument(
        "--output",
        "-o",
        choices=["json", "visual"],
        default="json",
        help="Output format (default: json)",
    )
    plan_parser.add_argument(
        "--output-path",
        type=str,
        help="Output file path (for visual mode)",
    )
    plan_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def build_render_config(args) -> RenderConfig:
    """Merge the optional YAML config with explicit command-line values."""
    config = RenderConfig.from_yaml(args.config) if args.config else RenderConfig()
    data = config.to_dict()

    overrides = {
        "tile_size": args.tile_size,
        "scale": args.scale,
        "overlap": args.blend,
        "tta": args.tta,
        "batch_size": args.batch_size,
    }
    for key, value in overrides.items():
        if value is not None:
            data[key] = value

    # Output tiles always follow from the backend
    data["output_tile_size"] = None
    return RenderConfig.from_dict(data)


def create_backend(args, config: RenderConfig):
    """
    Build the inference backend and the output name suffix.

    Returns:
        (backend, suffix) tuple
    """
    from tilesr.backends import InterpolationBackend, OnnxBackend

    scale = config.scale_xy[0]

    if args.backend == "resize":
        suffix = f"(resize)(scale{scale:g})" + ("(tta)" if config.tta else "")
        return InterpolationBackend(scale=scale), suffix

    preset = ModelPreset(args.model, int(scale), args.noise)
    backend = OnnxBackend(str(preset.model_path(args.models_dir)), device_id=args.device)
    return backend, preset.output_suffix(config.tta)


def cmd_render(args) -> int:
    """Handle render command."""
    from tilesr.processing.runner import RunnerConfig, UpscaleRunner
    from tilesr.tiling.renderer import TileSession

    try:
        config = build_render_config(args)
        backend, suffix = create_backend(args, config)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    runner_config = RunnerConfig(
        input_paths=args.inputs,
        output_dir=args.output,
        output_suffix=suffix,
        recursive=args.recursive,
    )

    def progress(current: int, total: int, filename: str):
        print(f"[{current}/{total}] Rendering: {filename}")

    with TileSession(backend, config) as session:
        try:
            geometry = session.configure()
        except (TilingError, OSError, ImportError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        logger.info(
            f"Tiles: {geometry.input_tile_size} -> {geometry.output_tile_size}, "
            f"batch size {config.batch_size}, tta {config.tta}"
        )

        runner = UpscaleRunner(
            config=runner_config,
            session=session,
            progress_callback=progress if args.verbose else None,
        )
        result = runner.run_batch()

    print(f"\nResults:")
    print(f"  Total: {result.total_files}")
    print(f"  Successful: {result.successful}")
    print(f"  Failed: {result.failed}")
    print(f"  Time: {result.total_time_ms:.1f}ms")

    return 0 if result.failed == 0 and result.total_files > 0 else 1


def cmd_plan(args) -> int:
    """Handle plan command."""
    from tilesr.imaging import from_float_rgb, read_image, to_float_rgb
    from tilesr.tiling.geometry import GeometryPlanner
    from tilesr.tiling.visualization import visualize_tiles

    image_path = Path(args.image_path)
    try:
        image = read_image(image_path)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    h, w = image.shape[:2]
    output_tile = int(round(args.tile_size * args.scale))

    try:
        planner = GeometryPlanner(
            input_tile_size=(args.tile_size, args.tile_size),
            output_tile_size=(output_tile, output_tile),
            scale=args.scale,
            overlap=args.blend,
        )
        grid = planner.plan(w, h)
    except TilingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output == "json":
        output = {
            "image_dimensions": {"width": w, "height": h},
            "geometry": planner.geometry.to_dict(),
            "grid": grid.to_dict(),
        }
        print(json.dumps(output, indent=2))

    elif args.output == "visual":
        output_path = args.output_path
        if output_path is None:
            output_path = str(image_path.stem) + "_tiles.png"

        visualize_tiles(from_float_rgb(to_float_rgb(image)), grid, output_path)
        print(f"Tile grid visualization saved to: {output_path}")

    return 0


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if not provided)

    Returns:
        Exit code (0 for success)
    """
    parser = setup_argparse()
    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 0

    log_level = logging.DEBUG if parsed.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if parsed.command == "render":
        return cmd_render(parsed)

    if parsed.command == "plan":
        return cmd_plan(parsed)

    return 0


if __name__ == "__main__":
    sys.exit(main())
