"""
Output canvas sizing for the squared-up image.

The destination rectangle takes the longer of each pair of opposite edges,
so the result is at least as large as the most face-on edge of the source
quadrilateral.
"""

import logging
import math
from typing import Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

# Lengths within this distance above an integer do not round up
_ROUNDING_SLACK = 1e-6


def compute_edge_lengths(
    corners: Union[np.ndarray, list],
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        corners: 4 corner points in order [TL, TR, BR, BL], shape (4, 2).

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> top, right, bottom, left = compute_edge_lengths(
        ...     [[100, 100], [400, 100], [400, 200], [100, 200]]
        ... )
        >>> print(f"Width: {top:.0f}, Height: {right:.0f}")
        Width: 300, Height: 100
    """
    corners = np.asarray(corners, dtype=np.float64)

    if corners.shape != (4, 2):
        raise ValueError(f"Expected 4 corners with shape (4, 2), got {corners.shape}")

    tl, tr, br, bl = corners

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def _round_up(length: float) -> int:
    return max(1, math.ceil(length - _ROUNDING_SLACK))


def compute_output_size(corners: Union[np.ndarray, list]) -> Tuple[int, int]:
    """
    Choose the destination width and height in whole pixels.

    Width is the longer of the top and bottom edges, height the longer of the
    left and right edges, each rounded up and clamped to at least 1.

    Returns:
        Tuple of (width, height).
    """
    top, right, bottom, left = compute_edge_lengths(corners)

    width = _round_up(max(top, bottom))
    height = _round_up(max(left, right))

    logger.debug(f"Output size: {width} x {height}")

    return width, height


def destination_corners(width: int, height: int) -> np.ndarray:
    """Corners of the axis-aligned output rectangle in [TL, TR, BR, BL] order."""
    return np.array(
        [
            [0, 0],  # Top-Left
            [width, 0],  # Top-Right
            [width, height],  # Bottom-Right
            [0, height],  # Bottom-Left
        ],
        dtype=np.float64,
    )
