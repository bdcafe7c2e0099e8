"""
Common types shared across the squaring engine.

This module provides standardized value types (images and points) used by
every stage of the perspective correction pipeline.
"""

from src.common.types import ImageBuffer, Point2D

__all__ = ["ImageBuffer", "Point2D"]
