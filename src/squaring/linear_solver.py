"""
Dense linear solver for the homography coefficients.

Gaussian elimination with partial pivoting, sized for the small (8x8)
systems produced by four point correspondences.
"""

import logging

import numpy as np

from src.squaring.exceptions import SingularMatrix

logger = logging.getLogger(__name__)

DEFAULT_PIVOT_TOLERANCE = 1e-12


def solve(
    matrix: np.ndarray,
    rhs: np.ndarray,
    tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> np.ndarray:
    """
    Solve A·x = b for a square system.

    At each elimination step the row with the largest absolute value in the
    active column becomes the pivot row. Inputs are copied and left untouched.

    Args:
        matrix: Square coefficient matrix A with shape (n, n).
        rhs: Right-hand side vector b with shape (n,).
        tolerance: Smallest acceptable pivot magnitude.

    Returns:
        Solution vector x with shape (n,), dtype float64.

    Raises:
        ValueError: If shapes are inconsistent.
        SingularMatrix: If no pivot of magnitude >= tolerance exists at some step.

    Example:
        >>> solve(np.array([[2.0, 0.0], [0.0, 4.0]]), np.array([2.0, 2.0]))
        array([1. , 0.5])
    """
    a = np.array(matrix, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64).reshape(-1)

    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {a.shape}")
    n = a.shape[0]
    if b.shape != (n,):
        raise ValueError(f"Expected right-hand side of length {n}, got {b.shape[0]}")

    for col in range(n):
        pivot = col + int(np.argmax(np.abs(a[col:, col])))
        pivot_value = a[pivot, col]

        if abs(pivot_value) < tolerance:
            logger.debug(
                f"No usable pivot in column {col}: |{pivot_value:.3e}| < {tolerance:.1e}"
            )
            raise SingularMatrix(
                f"Matrix is singular: no pivot above {tolerance:g} in column {col}"
            )

        if pivot != col:
            a[[col, pivot]] = a[[pivot, col]]
            b[[col, pivot]] = b[[pivot, col]]

        factors = a[col + 1 :, col] / a[col, col]
        a[col + 1 :, col:] -= np.outer(factors, a[col, col:])
        b[col + 1 :] -= factors * b[col]

    x = np.zeros(n, dtype=np.float64)
    for row in range(n - 1, -1, -1):
        x[row] = (b[row] - a[row, row + 1 :] @ x[row + 1 :]) / a[row, row]

    return x
