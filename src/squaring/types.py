"""
Data types and structures for the squaring module.

Provides type-safe containers for configuration and control points.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from src.common.types import Point2D
from src.squaring.exceptions import InvalidControlPoints


class ControlPoints(BaseModel):
    """
    Immutable snapshot of the 4 user-picked corners, in click order.

    Unless auto-ordering is enabled, the order is taken to be top-left,
    top-right, bottom-right, bottom-left.

    Example:
        >>> cps = ControlPoints.from_any([(10, 10), (90, 5), (95, 90), (5, 95)])
        >>> cps.top_left
        Point2D(x=10.0, y=10.0)
    """

    model_config = ConfigDict(frozen=True)

    points: Tuple[Point2D, Point2D, Point2D, Point2D]

    @field_validator("points", mode="before")
    @classmethod
    def _coerce_points(cls, v):
        return tuple(
            p if isinstance(p, Point2D) else Point2D.from_sequence(p) for p in v
        )

    @classmethod
    def from_any(
        cls,
        points: Union["ControlPoints", Sequence, np.ndarray, None],
    ) -> "ControlPoints":
        """
        Build ControlPoints from any reasonable container of 4 coordinates.

        Accepts an existing ControlPoints, a sequence of Point2D or (x, y)
        pairs, or a numpy array of shape (4, 2).

        Raises:
            InvalidControlPoints: If there are not exactly 4 valid 2D points.
        """
        if isinstance(points, ControlPoints):
            return points
        if points is None:
            raise InvalidControlPoints(0, "no points supplied")

        try:
            items = list(points)
        except TypeError as e:
            raise InvalidControlPoints(0, "not a sequence of points") from e

        if len(items) != 4:
            raise InvalidControlPoints(len(items))

        try:
            return cls(points=items)
        except ValueError as e:
            raise InvalidControlPoints(len(items), f"malformed coordinates: {e}") from e

    @property
    def top_left(self) -> Point2D:
        return self.points[0]

    @property
    def top_right(self) -> Point2D:
        return self.points[1]

    @property
    def bottom_right(self) -> Point2D:
        return self.points[2]

    @property
    def bottom_left(self) -> Point2D:
        return self.points[3]

    def to_numpy(self) -> np.ndarray:
        """Return the corners as a (4, 2) float64 array."""
        return np.array([p.to_tuple() for p in self.points], dtype=np.float64)

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class SolverConfig:
    """Configuration for the linear solver."""

    pivot_tolerance: float  # Pivots below this magnitude mean a singular system


@dataclass
class ValidationConfig:
    """Configuration for control point validation."""

    collinearity_tolerance: float  # |sin(angle)| below this counts as collinear
    require_convex: bool


@dataclass
class OrderingConfig:
    """Configuration for corner ordering."""

    auto_order: bool  # False: trust the caller's click order


@dataclass
class ResamplingConfig:
    """Configuration for the resampling stage."""

    interpolation: str  # "bilinear" or "nearest"
    max_workers: int  # 0 = one worker per CPU core
    tile_rows: int  # Destination rows per parallel band


@dataclass
class CorrectionConfig:
    """Complete squaring module configuration."""

    solver: SolverConfig
    validation: ValidationConfig
    ordering: OrderingConfig
    resampling: ResamplingConfig
