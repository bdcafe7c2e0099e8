"""
Unit tests for config_loader module.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from src.squaring.config_loader import load_config
from src.squaring.types import CorrectionConfig


def _valid_raw_config():
    return {
        "solver": {"pivot_tolerance": 1e-10},
        "validation": {"collinearity_tolerance": 1e-5, "require_convex": False},
        "ordering": {"auto_order": True},
        "resampling": {"interpolation": "nearest", "max_workers": 2, "tile_rows": 16},
    }


def _write_temp_config(raw):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(raw, f)
        return Path(f.name)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Test loading the default configuration file."""
        config = load_config()

        assert isinstance(config, CorrectionConfig)
        assert config.solver.pivot_tolerance == 1e-12
        assert config.validation.collinearity_tolerance == 1e-6
        assert config.validation.require_convex is True
        assert config.ordering.auto_order is False
        assert config.resampling.interpolation == "bilinear"
        assert config.resampling.max_workers == 0
        assert config.resampling.tile_rows == 64

    def test_load_custom_config(self):
        """Test loading a custom configuration file."""
        temp_path = _write_temp_config(_valid_raw_config())

        try:
            config = load_config(temp_path)

            assert config.solver.pivot_tolerance == 1e-10
            assert config.validation.require_convex is False
            assert config.ordering.auto_order is True
            assert config.resampling.interpolation == "nearest"
            assert config.resampling.max_workers == 2
            assert config.resampling.tile_rows == 16
        finally:
            temp_path.unlink()

    def test_accepts_string_path(self):
        """Test that a str path is accepted as well as Path."""
        temp_path = _write_temp_config(_valid_raw_config())

        try:
            assert load_config(str(temp_path)).resampling.tile_rows == 16
        finally:
            temp_path.unlink()

    def test_missing_file_raises_error(self):
        """Test that missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))

    def test_missing_section(self):
        """Test that a missing section is reported as invalid."""
        raw = _valid_raw_config()
        del raw["resampling"]
        temp_path = _write_temp_config(raw)

        try:
            with pytest.raises(ValueError, match="Invalid configuration file"):
                load_config(temp_path)
        finally:
            temp_path.unlink()

    @pytest.mark.parametrize(
        "section, key, value, message",
        [
            ("solver", "pivot_tolerance", 0.0, "pivot_tolerance must be positive"),
            ("validation", "collinearity_tolerance", -1e-3, "collinearity_tolerance must be positive"),
            ("resampling", "interpolation", "lanczos", "Invalid interpolation"),
            ("resampling", "max_workers", -1, "max_workers cannot be negative"),
            ("resampling", "tile_rows", 0, "tile_rows must be at least 1"),
        ],
    )
    def test_invalid_values(self, section, key, value, message):
        """Test that out-of-range values are rejected."""
        raw = _valid_raw_config()
        raw[section][key] = value
        temp_path = _write_temp_config(raw)

        try:
            with pytest.raises(ValueError, match=message):
                load_config(temp_path)
        finally:
            temp_path.unlink()
