"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def skewed_corners():
    """Fixture providing 4 skewed corners in [TL, TR, BR, BL] order."""
    import numpy as np

    return np.array(
        [
            [10, 10],  # Top-left
            [90, 5],  # Top-right
            [95, 90],  # Bottom-right
            [5, 95],  # Bottom-left
        ],
        dtype=np.float64,
    )


@pytest.fixture
def skewed_scene(skewed_corners):
    """Fixture providing a 100x100 red RGB image with a blue skewed quadrilateral."""
    import cv2
    import numpy as np

    image = np.zeros((100, 100, 3), dtype=np.uint8)
    image[:] = RED

    cv2.fillPoly(image, [skewed_corners.astype(np.int32)], BLUE)

    return image, skewed_corners


@pytest.fixture
def random_image():
    """Fixture providing a deterministic 60x80 RGB noise image."""
    import numpy as np

    rng = np.random.default_rng(seed=42)
    return rng.integers(0, 256, size=(60, 80, 3), dtype=np.uint8)


@pytest.fixture
def default_config():
    """Fixture providing the packaged default configuration."""
    from src.squaring.config_loader import load_config

    return load_config()
