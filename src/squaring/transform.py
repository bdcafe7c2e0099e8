"""
Projective transform in homogeneous coordinates.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from src.squaring.exceptions import SingularMatrix

logger = logging.getLogger(__name__)

# |det| threshold relative to the product of the row norms (Hadamard bound)
RELATIVE_DETERMINANT_TOLERANCE = 1e-14


@dataclass(frozen=True, eq=False)
class Transform3x3:
    """
    Invertible 3x3 projective map, defined up to a nonzero scale.

    A point (x, y) maps to (X/W, Y/W) where [X, Y, W] = M @ [x, y, 1].

    Raises:
        SingularMatrix: On construction, if the matrix is not finite or its
            determinant is zero relative to the product of its row norms.
    """

    matrix: np.ndarray = field(repr=True)

    def __post_init__(self) -> None:
        m = np.array(self.matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {m.shape}")
        if not np.all(np.isfinite(m)):
            raise SingularMatrix("Transform matrix contains non-finite values")

        row_norms = float(np.prod(np.linalg.norm(m, axis=1)))
        det = float(np.linalg.det(m))
        if row_norms == 0.0 or abs(det) <= RELATIVE_DETERMINANT_TOLERANCE * row_norms:
            raise SingularMatrix(f"Transform matrix is not invertible (det={det:.3e})")

        m.setflags(write=False)
        object.__setattr__(self, "matrix", m)

    @property
    def determinant(self) -> float:
        return float(np.linalg.det(self.matrix))

    def inverse(self) -> "Transform3x3":
        """
        Invert via the adjugate divided by the determinant.

        Returns:
            The inverse transform, normalized so its [2, 2] entry is 1 when
            that entry is not zero.
        """
        m = self.matrix
        adjugate = np.array(
            [
                [
                    m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1],
                    m[0, 2] * m[2, 1] - m[0, 1] * m[2, 2],
                    m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1],
                ],
                [
                    m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2],
                    m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0],
                    m[0, 2] * m[1, 0] - m[0, 0] * m[1, 2],
                ],
                [
                    m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0],
                    m[0, 1] * m[2, 0] - m[0, 0] * m[2, 1],
                    m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0],
                ],
            ],
            dtype=np.float64,
        )
        det = m[0, 0] * adjugate[0, 0] + m[0, 1] * adjugate[1, 0] + m[0, 2] * adjugate[2, 0]
        logger.debug(f"Inverting transform (det={det:.3e})")
        return Transform3x3(adjugate / det).normalized()

    def normalized(self) -> "Transform3x3":
        """Scale the matrix so that its [2, 2] entry equals 1, if possible."""
        corner = self.matrix[2, 2]
        bottom_row = float(np.linalg.norm(self.matrix[2]))
        if abs(corner) < RELATIVE_DETERMINANT_TOLERANCE * bottom_row:
            return self
        return Transform3x3(self.matrix / corner)

    def apply(self, points: np.ndarray) -> np.ndarray:
        """
        Map an (N, 2) array of points through the transform.

        Points sent to infinity (homogeneous w == 0) come back as inf/nan;
        callers that sample images must clamp them.
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))]) @ self.matrix.T
        with np.errstate(divide="ignore", invalid="ignore"):
            return homogeneous[:, :2] / homogeneous[:, 2:3]

    def compose(self, other: "Transform3x3") -> "Transform3x3":
        """Return the transform applying `other` first, then this one."""
        return Transform3x3(self.matrix @ other.matrix)
