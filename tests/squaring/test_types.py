"""
Unit tests for the value types: Point2D, ControlPoints and ImageBuffer.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.types import ImageBuffer, Point2D
from src.squaring.exceptions import InvalidControlPoints
from src.squaring.types import ControlPoints


class TestPoint2D:
    """Tests for Point2D."""

    def test_int_input_kept_exact(self):
        """Test that integer clicks become floats without rounding."""
        point = Point2D(x=3, y=7)

        assert point.to_tuple() == (3.0, 7.0)

    def test_float_input(self):
        """Test that sub-pixel coordinates are preserved."""
        assert Point2D(x=1.25, y=-0.5).to_tuple() == (1.25, -0.5)

    def test_from_sequence_numpy(self):
        """Test creation from a numpy pair."""
        assert Point2D.from_sequence(np.array([4.0, 5.0])) == Point2D(x=4, y=5)

    def test_from_sequence_wrong_length(self):
        """Test that a triple is rejected."""
        with pytest.raises(ValueError, match="Expected 2 coordinates"):
            Point2D.from_sequence([1, 2, 3])

    def test_non_finite_rejected(self):
        """Test that NaN/inf coordinates are rejected."""
        with pytest.raises(ValidationError):
            Point2D(x=float("nan"), y=0)

    def test_non_numeric_rejected(self):
        """Test that strings are rejected."""
        with pytest.raises(ValidationError):
            Point2D(x="10", y=0)

    def test_immutable(self):
        """Test that points cannot be modified."""
        point = Point2D(x=1, y=2)

        with pytest.raises(ValidationError):
            point.x = 5

    def test_distance(self):
        """Test Euclidean distance."""
        assert Point2D(x=0, y=0).distance_to(Point2D(x=3, y=4)) == 5.0


class TestControlPoints:
    """Tests for ControlPoints."""

    def test_from_tuples(self, skewed_corners):
        """Test creation from a list of pairs."""
        cps = ControlPoints.from_any([tuple(p) for p in skewed_corners.tolist()])

        assert len(cps) == 4
        assert cps.top_left == Point2D(x=10, y=10)
        assert cps.bottom_left == Point2D(x=5, y=95)
        np.testing.assert_array_equal(cps.to_numpy(), skewed_corners)

    def test_from_numpy(self, skewed_corners):
        """Test creation from a (4, 2) array."""
        cps = ControlPoints.from_any(skewed_corners)

        assert cps.top_right == Point2D(x=90, y=5)
        assert cps.bottom_right == Point2D(x=95, y=90)

    def test_from_point2d(self):
        """Test creation from Point2D instances."""
        pts = [Point2D(x=0, y=0), Point2D(x=1, y=0), Point2D(x=1, y=1), Point2D(x=0, y=1)]

        assert ControlPoints.from_any(pts).points == tuple(pts)

    def test_passthrough(self, skewed_corners):
        """Test that an existing ControlPoints is returned unchanged."""
        cps = ControlPoints.from_any(skewed_corners)

        assert ControlPoints.from_any(cps) is cps

    @pytest.mark.parametrize("count", [0, 1, 3, 5, 8])
    def test_wrong_count(self, count):
        """Test that anything but 4 points raises InvalidControlPoints."""
        points = [(i, i * 2) for i in range(count)]

        with pytest.raises(InvalidControlPoints, match=f"got {count}"):
            ControlPoints.from_any(points)

    def test_none(self):
        """Test that missing points raise InvalidControlPoints."""
        with pytest.raises(InvalidControlPoints):
            ControlPoints.from_any(None)

    @pytest.mark.parametrize("points", [5, 1.5, np.float64(3.0), np.array(7)])
    def test_not_a_sequence(self, points):
        """Test that non-iterables raise InvalidControlPoints, not TypeError."""
        with pytest.raises(InvalidControlPoints, match="not a sequence"):
            ControlPoints.from_any(points)

    def test_malformed_coordinates(self):
        """Test that non-pair entries raise InvalidControlPoints."""
        with pytest.raises(InvalidControlPoints, match="malformed"):
            ControlPoints.from_any([(0, 0), (1, 0), (1, 1, 1), (0, 1)])

    def test_is_value_error(self):
        """Test that InvalidControlPoints can be handled as ValueError."""
        with pytest.raises(ValueError):
            ControlPoints.from_any([(0, 0)])


class TestImageBuffer:
    """Tests for ImageBuffer."""

    def test_color_properties(self, random_image):
        """Test shape helpers for a color image."""
        buffer = ImageBuffer(data=random_image)

        assert (buffer.width, buffer.height, buffer.channels) == (80, 60, 3)
        assert not buffer.is_grayscale

    def test_grayscale_properties(self):
        """Test shape helpers for a grayscale image."""
        buffer = ImageBuffer(data=np.zeros((5, 7), dtype=np.uint8))

        assert (buffer.width, buffer.height, buffer.channels) == (7, 5, 1)
        assert buffer.is_grayscale

    def test_to_numpy_returns_copy(self, random_image):
        """Test that to_numpy does not expose the wrapped array."""
        buffer = ImageBuffer(data=random_image)
        array = buffer.to_numpy()
        array[:] = 0

        assert np.array_equal(buffer.data, random_image)

    @pytest.mark.parametrize(
        "data",
        [
            np.array([], dtype=np.uint8),
            np.zeros((4, 4), dtype=np.float32),
            np.zeros((4, 4, 2), dtype=np.uint8),
            np.zeros((2, 2, 2, 2), dtype=np.uint8),
        ],
    )
    def test_invalid_images(self, data):
        """Test that empty, non-uint8 or odd-shaped arrays are rejected."""
        with pytest.raises(ValueError):
            ImageBuffer(data=data)

    def test_from_any_none(self):
        """Test that a missing image raises ValueError."""
        with pytest.raises(ValueError, match="Invalid input image"):
            ImageBuffer.from_any(None)

    def test_from_any_passthrough(self, random_image):
        """Test that an ImageBuffer is passed through unchanged."""
        buffer = ImageBuffer(data=random_image)

        assert ImageBuffer.from_any(buffer) is buffer
