"""
Corner ordering and convexity checks for control points.

The engine normally trusts the click order [TL, TR, BR, BL]. When automatic
ordering is enabled the corners are sorted into that order from their
convex hull.
"""

import logging
from typing import Union

import cv2
import numpy as np

from src.squaring.exceptions import DegenerateControlPoints

logger = logging.getLogger(__name__)


def _signed_area(corners: np.ndarray) -> float:
    """Shoelace area; positive for TL->TR->BR->BL order in image coordinates."""
    x = corners[:, 0]
    y = corners[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def order_corners(points: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The points are arranged along their convex hull (clockwise on screen,
    since y grows downwards), then rotated so that the sequence starts at
    the left end of the edge whose midpoint is highest in the image.

    Args:
        points: Array of 4 points with shape (4, 2) or list of [x, y] pairs.

    Returns:
        Ordered float64 array of shape (4, 2): [TL, TR, BR, BL].

    Raises:
        ValueError: If input does not contain exactly 4 points.
        DegenerateControlPoints: If the points are not the vertices of a
            convex quadrilateral (one lies inside the others' triangle, or
            three are collinear).

    Example:
        >>> order_corners([[90, 5], [5, 95], [10, 10], [95, 90]])
        array([[10., 10.],
               [90.,  5.],
               [95., 90.],
               [ 5., 95.]])
    """
    pts = np.array(points, dtype=np.float64)

    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    hull_indices = cv2.convexHull(pts.astype(np.float32), returnPoints=False)
    hull_indices = hull_indices.reshape(-1)

    if len(hull_indices) != 4:
        logger.warning(f"Convex hull has {len(hull_indices)} vertices, expected 4")
        raise DegenerateControlPoints("non-convex quadrilateral")

    hull = pts[hull_indices]
    if _signed_area(hull) < 0:
        hull = hull[::-1]

    # Start at the left end of the top-most edge
    first = 0
    min_mid_y = np.inf
    for i in range(4):
        nxt = (i + 1) % 4
        mid_y = (hull[i, 1] + hull[nxt, 1]) / 2.0
        if mid_y < min_mid_y:
            min_mid_y = mid_y
            first = i if hull[i, 0] < hull[nxt, 0] else nxt

    ordered = np.roll(hull, -first, axis=0)

    logger.debug(
        f"Ordered corners: TL={ordered[0]}, TR={ordered[1]}, "
        f"BR={ordered[2]}, BL={ordered[3]}"
    )

    return ordered


def is_convex_quadrilateral(corners: Union[np.ndarray, list]) -> bool:
    """
    Check if 4 ordered points form a convex, non-self-intersecting quadrilateral.

    A quadrilateral is convex if the 2D cross products of consecutive edge
    pairs (P1->P2, P2->P3) all have the same strict sign. Mixed signs mean a
    concave or self-intersecting (bow-tie) outline; a zero means three
    consecutive corners are collinear.

    Args:
        corners: Ordered points [TL, TR, BR, BL] with shape (4, 2).

    Returns:
        True if the quadrilateral is convex, False otherwise.
    """
    rect = np.asarray(corners, dtype=np.float64)
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2

        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    is_convex = all(cp > 0 for cp in cross_products) or all(
        cp < 0 for cp in cross_products
    )

    if not is_convex:
        logger.warning(
            f"Non-convex quadrilateral detected. Cross products: {cross_products}"
        )

    return is_convex
