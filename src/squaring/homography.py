"""
Homography construction from four point correspondences.

Each correspondence (x, y) -> (x', y') of the general projective map

    x' = (a*x + b*y + c) / (g*x + h*y + 1)
    y' = (d*x + e*y + f) / (g*x + h*y + 1)

contributes two linear equations in the unknowns a..h. Four correspondences
give an 8x8 system, solved with the partial-pivoting linear solver.
"""

import itertools
import logging
from typing import Tuple

import numpy as np

from src.squaring.exceptions import DegenerateControlPoints, SingularMatrix
from src.squaring.linear_solver import DEFAULT_PIVOT_TOLERANCE, solve
from src.squaring.transform import Transform3x3

logger = logging.getLogger(__name__)

DEFAULT_COLLINEARITY_TOLERANCE = 1e-6


def check_point_configuration(
    points: np.ndarray,
    tolerance: float = DEFAULT_COLLINEARITY_TOLERANCE,
    label: str = "source",
) -> None:
    """
    Reject point sets with coincident points or any three collinear points.

    Three points are collinear when |sin| of the angle between the two
    vectors leaving any one of them is below `tolerance`.

    Args:
        points: Array of shape (4, 2).
        tolerance: Collinearity threshold on |sin(angle)|.
        label: Name of the point set, used in error messages.

    Raises:
        DegenerateControlPoints: If the configuration is degenerate.
    """
    pts = np.asarray(points, dtype=np.float64)

    for i, j in itertools.combinations(range(len(pts)), 2):
        if np.allclose(pts[i], pts[j], rtol=0.0, atol=1e-9):
            raise DegenerateControlPoints(
                f"{label} points {i + 1} and {j + 1} coincide"
            )

    for i, j, k in itertools.combinations(range(len(pts)), 3):
        v1 = pts[j] - pts[i]
        v2 = pts[k] - pts[i]
        cross = v1[0] * v2[1] - v1[1] * v2[0]
        sine = abs(cross) / (np.linalg.norm(v1) * np.linalg.norm(v2))
        if sine < tolerance:
            logger.warning(
                f"Collinear {label} points {i + 1}, {j + 1}, {k + 1} (|sin|={sine:.2e})"
            )
            raise DegenerateControlPoints(
                f"{label} points {i + 1}, {j + 1} and {k + 1} are collinear"
            )


def _build_system(src: np.ndarray, dst: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Assemble the 8x8 coefficient matrix and right-hand side."""
    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)

    for i, ((x, y), (u, v)) in enumerate(zip(src, dst)):
        a[2 * i] = [x, y, 1.0, 0.0, 0.0, 0.0, -u * x, -u * y]
        b[2 * i] = u
        a[2 * i + 1] = [0.0, 0.0, 0.0, x, y, 1.0, -v * x, -v * y]
        b[2 * i + 1] = v

    return a, b


def build_homography(
    src_points: np.ndarray,
    dst_points: np.ndarray,
    pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE,
    collinearity_tolerance: float = DEFAULT_COLLINEARITY_TOLERANCE,
    check_source: bool = True,
) -> Tuple[Transform3x3, Transform3x3]:
    """
    Build the projective transform mapping 4 source points onto 4 destination points.

    Args:
        src_points: Source corners, shape (4, 2).
        dst_points: Destination corners, shape (4, 2), same order as src_points.
        pivot_tolerance: Pivot threshold handed to the linear solver.
        collinearity_tolerance: Threshold for the collinearity pre-check.
        check_source: Set to False when the caller has already run
            check_point_configuration on src_points.

    Returns:
        Tuple of (forward, inverse): forward maps source -> destination,
        inverse maps destination -> source.

    Raises:
        ValueError: If either point set does not have shape (4, 2).
        DegenerateControlPoints: If either point set is coincident/collinear
            or the resulting system is singular.

    Example:
        >>> src = [[10, 10], [90, 5], [95, 90], [5, 95]]
        >>> dst = [[0, 0], [91, 0], [91, 86], [0, 86]]
        >>> forward, inverse = build_homography(src, dst)
        >>> forward.apply([[10, 10]])
        array([[0., 0.]])
    """
    src = np.asarray(src_points, dtype=np.float64)
    dst = np.asarray(dst_points, dtype=np.float64)

    if src.shape != (4, 2) or dst.shape != (4, 2):
        raise ValueError(
            f"Expected source and destination shapes (4, 2), got {src.shape} and {dst.shape}"
        )

    if check_source:
        check_point_configuration(src, collinearity_tolerance, label="source")
    check_point_configuration(dst, collinearity_tolerance, label="destination")

    a, b = _build_system(src, dst)

    try:
        coeffs = solve(a, b, tolerance=pivot_tolerance)
        forward = Transform3x3(np.append(coeffs, 1.0).reshape(3, 3))
        inverse = forward.inverse()
    except SingularMatrix as e:
        logger.warning(f"Homography system is singular: {e}")
        raise DegenerateControlPoints("the point configuration is singular") from e

    logger.debug(f"Forward homography:\n{forward.matrix}")
    logger.debug(f"Inverse homography:\n{inverse.matrix}")

    return forward, inverse
