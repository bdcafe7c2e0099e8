"""
Perspective Squaring Engine

Removes perspective distortion from a photographed planar rectangle:
four corner points define a homography onto an axis-aligned rectangle,
and the source image is resampled through its inverse.

Pipeline stages:
1. Control point validation (exactly 4, non-degenerate)
2. Output canvas sizing (longest opposite edges)
3. Homography construction (8x8 linear system)
4. Inverse-mapping resampling (bilinear, edge-clamped, parallel bands)
"""

from src.squaring.config_loader import load_config
from src.squaring.corner_ordering import is_convex_quadrilateral, order_corners
from src.squaring.exceptions import (
    CorrectionCancelled,
    DegenerateControlPoints,
    InvalidControlPoints,
    SquaringError,
)
from src.squaring.homography import build_homography
from src.squaring.output_geometry import compute_output_size
from src.squaring.processor import PerspectiveCorrector, correct
from src.squaring.resampler import resample
from src.squaring.transform import Transform3x3
from src.squaring.types import ControlPoints, CorrectionConfig

__all__ = [
    "PerspectiveCorrector",
    "correct",
    "load_config",
    "build_homography",
    "compute_output_size",
    "resample",
    "order_corners",
    "is_convex_quadrilateral",
    "Transform3x3",
    "ControlPoints",
    "CorrectionConfig",
    "SquaringError",
    "InvalidControlPoints",
    "DegenerateControlPoints",
    "CorrectionCancelled",
]
