"""
Command-line perspective correction.

Reads an image file, squares up the quadrilateral marked by 4 corner points
and writes the result. Decoding and encoding are done with OpenCV; the output
format follows the output file extension.

Usage:
    # Corners in top-left, top-right, bottom-right, bottom-left order
    python scripts/square_up.py photo.jpg squared.png --points 120,180 450,165 470,250 100,270

    # Let the engine sort the corners
    python scripts/square_up.py photo.jpg squared.png --auto-order --points 450,165 100,270 120,180 470,250
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import cv2

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.squaring import PerspectiveCorrector, SquaringError, load_config  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_point(text: str) -> tuple:
    """Parse an 'x,y' argument into a float pair."""
    try:
        x, y = text.split(",")
        return float(x), float(y)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"Invalid point '{text}', expected format x,y"
        ) from e


def main() -> int:
    """Main entry point for the squaring CLI."""
    parser = argparse.ArgumentParser(
        description="Square up a photographed rectangle from its 4 corners",
    )
    parser.add_argument("input", type=Path, help="Source image file")
    parser.add_argument("output", type=Path, help="Destination image file")
    parser.add_argument(
        "--points",
        type=parse_point,
        nargs="+",
        required=True,
        help="Corner points as x,y (top-left, top-right, bottom-right, bottom-left)",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Path to a custom config.yaml"
    )
    parser.add_argument(
        "--auto-order",
        action="store_true",
        help="Sort the corners automatically instead of trusting their order",
    )
    parser.add_argument(
        "--interpolation",
        choices=["bilinear", "nearest"],
        default=None,
        help="Override the configured interpolation",
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Override the worker thread count"
    )

    args = parser.parse_args()

    config = load_config(args.config) if args.config else load_config()
    if args.auto_order:
        config = dataclasses.replace(
            config, ordering=dataclasses.replace(config.ordering, auto_order=True)
        )
    if args.interpolation is not None or args.workers is not None:
        config = dataclasses.replace(
            config,
            resampling=dataclasses.replace(
                config.resampling,
                interpolation=args.interpolation or config.resampling.interpolation,
                max_workers=(
                    args.workers
                    if args.workers is not None
                    else config.resampling.max_workers
                ),
            ),
        )

    image = cv2.imread(str(args.input), cv2.IMREAD_UNCHANGED)
    if image is None:
        logger.error(f"Could not read image: {args.input}")
        return 1

    corrector = PerspectiveCorrector(config=config)
    try:
        squared = corrector.correct(image, args.points)
    except (SquaringError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2

    args.output.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(args.output), squared.data):
        logger.error(f"Could not write image: {args.output}")
        return 1

    logger.info(f"Saved {squared.width}x{squared.height} image to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
