"""
Main processor for the squaring module.

Orchestrates the complete perspective correction:
1. Control point normalization (exactly 4 points)
2. Optional corner ordering and convexity validation
3. Output canvas sizing
4. Homography construction (forward + inverse)
5. Inverse-mapping resampling

Implements fail-fast strategy: the first failure is raised and no output
image is produced.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from src.common.types import ImageBuffer
from src.squaring.config_loader import load_config
from src.squaring.corner_ordering import is_convex_quadrilateral, order_corners
from src.squaring.exceptions import DegenerateControlPoints
from src.squaring.homography import build_homography, check_point_configuration
from src.squaring.output_geometry import compute_output_size, destination_corners
from src.squaring.resampler import resample
from src.squaring.types import ControlPoints, CorrectionConfig

logger = logging.getLogger(__name__)


class PerspectiveCorrector:
    """
    Squares up a photographed planar rectangle from its 4 corner points.

    The corrector holds only its (immutable) configuration, so a single
    instance can serve concurrent calls from several threads.

    Example:
        >>> corrector = PerspectiveCorrector()
        >>> image = cv2.imread("sign.jpg")
        >>> corners = [[120, 180], [450, 165], [470, 250], [100, 270]]
        >>> squared = corrector.correct(image, corners)
        >>> cv2.imwrite("sign_squared.png", squared.to_numpy())
    """

    def __init__(
        self,
        config: Optional[CorrectionConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the perspective corrector.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

    def correct(
        self,
        image: Union[ImageBuffer, np.ndarray],
        control_points: Union[ControlPoints, Sequence, np.ndarray],
        cancel_event: Optional[threading.Event] = None,
    ) -> ImageBuffer:
        """
        Remove perspective distortion from the quadrilateral marked by control_points.

        Args:
            image: Decoded source image (ImageBuffer or uint8 numpy array).
            control_points: 4 corners in source pixel coordinates, in the
                order [TL, TR, BR, BL] unless auto-ordering is configured.
            cancel_event: Optional event checked between resampling bands.

        Returns:
            New ImageBuffer holding the squared-up rectangle.

        Raises:
            ValueError: If the image is invalid.
            InvalidControlPoints: If not exactly 4 control points were supplied.
            DegenerateControlPoints: If the points cannot define a rectangle.
            CorrectionCancelled: If cancel_event was set during resampling.
        """
        points = ControlPoints.from_any(control_points)
        source = ImageBuffer.from_any(image)
        corners = points.to_numpy()

        logger.info(
            f"Squaring {source.width}x{source.height} image from corners {corners.tolist()}"
        )

        if self.config.ordering.auto_order:
            corners = order_corners(corners)

        check_point_configuration(
            corners, self.config.validation.collinearity_tolerance
        )

        if self.config.validation.require_convex and not is_convex_quadrilateral(
            corners
        ):
            raise DegenerateControlPoints(
                "non-convex quadrilateral (check the corner order)"
            )

        width, height = compute_output_size(corners)

        _, inverse = build_homography(
            corners,
            destination_corners(width, height),
            pivot_tolerance=self.config.solver.pivot_tolerance,
            collinearity_tolerance=self.config.validation.collinearity_tolerance,
            check_source=False,
        )

        output = resample(
            source.data,
            inverse,
            width,
            height,
            interpolation=self.config.resampling.interpolation,
            max_workers=self.config.resampling.max_workers,
            tile_rows=self.config.resampling.tile_rows,
            cancel_event=cancel_event,
        )

        logger.info(f"Squared image size: {width}x{height}")

        return ImageBuffer(data=output)


def correct(
    image: Union[ImageBuffer, np.ndarray],
    control_points: Union[ControlPoints, Sequence, np.ndarray],
    config: Optional[CorrectionConfig] = None,
) -> ImageBuffer:
    """
    Convenience function for one-shot perspective correction.

    Args:
        image: Decoded source image.
        control_points: 4 corner points in [TL, TR, BR, BL] order.
        config: Optional custom configuration. Uses default if None.

    Returns:
        The squared-up ImageBuffer.

    Example:
        >>> squared = correct(image, [[10, 10], [90, 5], [95, 90], [5, 95]])
        >>> squared.width, squared.height
        (91, 86)
    """
    corrector = PerspectiveCorrector(config=config)
    return corrector.correct(image, control_points)
