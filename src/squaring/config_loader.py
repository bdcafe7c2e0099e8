"""
Configuration loader for the squaring module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.squaring.types import (
    CorrectionConfig,
    OrderingConfig,
    ResamplingConfig,
    SolverConfig,
    ValidationConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

VALID_INTERPOLATIONS = ["bilinear", "nearest"]


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> CorrectionConfig:
    """
    Load squaring configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated CorrectionConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.solver.pivot_tolerance)
        1e-12
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading squaring config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded squaring configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> CorrectionConfig:
    """Parse raw dictionary into structured config objects."""
    return CorrectionConfig(
        solver=SolverConfig(
            pivot_tolerance=float(raw["solver"]["pivot_tolerance"]),
        ),
        validation=ValidationConfig(
            collinearity_tolerance=float(raw["validation"]["collinearity_tolerance"]),
            require_convex=bool(raw["validation"]["require_convex"]),
        ),
        ordering=OrderingConfig(
            auto_order=bool(raw["ordering"]["auto_order"]),
        ),
        resampling=ResamplingConfig(
            interpolation=str(raw["resampling"]["interpolation"]),
            max_workers=int(raw["resampling"]["max_workers"]),
            tile_rows=int(raw["resampling"]["tile_rows"]),
        ),
    )


def _validate_config(config: CorrectionConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    if config.solver.pivot_tolerance <= 0:
        raise ValueError("pivot_tolerance must be positive")

    if config.validation.collinearity_tolerance <= 0:
        raise ValueError("collinearity_tolerance must be positive")

    if config.resampling.interpolation not in VALID_INTERPOLATIONS:
        raise ValueError(
            f"Invalid interpolation: {config.resampling.interpolation}. "
            f"Must be one of {VALID_INTERPOLATIONS}"
        )

    if config.resampling.max_workers < 0:
        raise ValueError("max_workers cannot be negative")

    if config.resampling.tile_rows < 1:
        raise ValueError("tile_rows must be at least 1")

    logger.debug("Configuration validation passed")
