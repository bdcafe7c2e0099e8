"""
Common type definitions for the perspective squaring engine.

This module provides Pydantic-based type definitions for the core value types
shared by every stage: images and 2D points.

These types provide:
- Type validation and conversion
- Immutable values that can be passed safely between stages
- Integration with numpy arrays and OpenCV
"""

import math
from typing import Any, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImageBuffer(BaseModel):
    """
    Type-safe wrapper for decoded image arrays (numpy.ndarray).

    The engine consumes and produces ImageBuffer instances. The wrapped array
    is treated as read-only: every stage allocates a new buffer for its output
    and never writes into one it received.

    Attributes:
        data: The underlying numpy array containing image data.
            Shape: (H, W, C) for color images, (H, W) for grayscale.
            Dtype: uint8 (0-255), 8 bits per channel.

    Example:
        >>> import cv2
        >>> image = cv2.imread("sign.jpg")
        >>> img_buffer = ImageBuffer(data=image)
        >>> print(img_buffer.width, img_buffer.height)  # 640, 480
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid 8-bit image.

        Args:
            v: Numpy array to validate.

        Returns:
            Validated numpy array.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @classmethod
    def from_any(cls, image: Union["ImageBuffer", np.ndarray, None]) -> "ImageBuffer":
        """
        Wrap a raw array, or pass an existing ImageBuffer through unchanged.

        Raises:
            ValueError: If image is None or not a valid image array.
        """
        if isinstance(image, ImageBuffer):
            return image
        if image is None:
            raise ValueError("Invalid input image: image is None")
        return cls(data=image)

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for RGB/BGR, 4 for RGBA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    @property
    def is_grayscale(self) -> bool:
        """Check if image is a single-plane grayscale array."""
        return len(self.data.shape) == 2

    def to_numpy(self) -> np.ndarray:
        """
        Get a copy of the underlying numpy array.

        Returns:
            Numpy array owned by the caller.
        """
        return self.data.copy()

    def __repr__(self) -> str:
        return f"ImageBuffer(width={self.width}, height={self.height}, channels={self.channels})"


class Point2D(BaseModel):
    """
    Immutable 2D point (x, y) in source-image pixel space.

    Coordinates are stored as floats; integer input (e.g. mouse clicks) is
    converted without rounding.

    Attributes:
        x: X-coordinate (horizontal, grows to the right).
        y: Y-coordinate (vertical, grows downwards).

    Example:
        >>> point = Point2D(x=100, y=200.5)
        >>> point.to_tuple()
        (100.0, 200.5)
        >>> Point2D.from_sequence([3, 4]).distance_to(Point2D(x=0, y=0))
        5.0
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_float(cls, v: Any) -> float:
        """Convert a numeric coordinate (including numpy scalars) to float."""
        if isinstance(v, bool) or not isinstance(v, (int, float, np.number)):
            raise ValueError(f"Coordinate must be numeric, got {type(v)}")
        value = float(v)
        if not math.isfinite(value):
            raise ValueError(f"Coordinate must be finite, got {value}")
        return value

    @classmethod
    def from_sequence(cls, coords: Union[Sequence[float], np.ndarray]) -> "Point2D":
        """
        Create Point2D from a pair such as [x, y], (x, y) or array([x, y]).

        Raises:
            ValueError: If coords does not contain exactly 2 elements.
        """
        values = np.asarray(coords).reshape(-1)
        if values.shape != (2,):
            raise ValueError(f"Expected 2 coordinates, got {values.shape[0]}")
        return cls(x=values[0].item(), y=values[1].item())

    def to_tuple(self) -> Tuple[float, float]:
        """Convert Point2D to (x, y) tuple."""
        return (self.x, self.y)

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def __repr__(self) -> str:
        return f"Point2D(x={self.x}, y={self.y})"
