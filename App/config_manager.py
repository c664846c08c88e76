"""Configuration persistence manager for the Scribbler application.

This module handles loading and saving of job settings to/from JSON files.
Missing or out-of-range values fall back to their defaults.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Tuple

from models import CONFIG_FILE, PreviewMode, ScribblerConfig
from scribbler.params import validate_blur, validate_threshold

logger = logging.getLogger(__name__)


def _positive(value: int) -> int:
    if value < 1:
        raise ValueError(f"must be at least 1, got {value}")
    return value


def _gray_resolution(value: int) -> int:
    if not 0 < value <= 255:
        raise ValueError(f"must be in 1..255, got {value}")
    return value


_VALIDATORS = {
    "blur": validate_blur,
    "threshold": validate_threshold,
    "num_attempts": _positive,
    "max_strokes": _positive,
    "gray_resolution": _gray_resolution,
}


class ConfigManager:
    """Handles loading and saving of scribbler configuration."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file (defaults to ~/.scribbler_config.json)
        """
        self.config_path = config_path

    def load(self) -> ScribblerConfig:
        """Load configuration from file, returning defaults if not found.

        Returns:
            ScribblerConfig with loaded or default values
        """
        config = ScribblerConfig()

        try:
            if self.config_path.exists():
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                    # Update config with loaded values (fallback to defaults)
                    config.blur = float(data.get("blur", config.blur))
                    config.threshold = float(data.get("threshold", config.threshold))
                    config.mode = PreviewMode(data.get("mode", config.mode.value))
                    config.num_attempts = int(data.get("num_attempts", config.num_attempts))
                    config.max_strokes = int(data.get("max_strokes", config.max_strokes))
                    config.chained_kernels = bool(
                        data.get("chained_kernels", config.chained_kernels)
                    )
                    config.line_width_to_image_width = float(
                        data.get("line_width_to_image_width", config.line_width_to_image_width)
                    )
                    config.gray_resolution = int(
                        data.get("gray_resolution", config.gray_resolution)
                    )
                self._validate(config)
                logger.info("Loaded configuration from %s", self.config_path)
        except Exception as e:
            logger.warning("Could not load config file: %s", e)
            config = ScribblerConfig()

        return config

    def _validate(self, config: ScribblerConfig):
        """Replace out-of-range values with their defaults."""
        defaults = ScribblerConfig()
        for name, validate in _VALIDATORS.items():
            try:
                setattr(config, name, validate(getattr(config, name)))
            except ValueError as e:
                logger.warning("Ignoring saved %s: %s", name, e)
                setattr(config, name, getattr(defaults, name))

    def save(self, config: ScribblerConfig) -> Tuple[bool, Optional[str]]:
        """Save configuration to file.

        Args:
            config: ScribblerConfig to save

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        data = asdict(config)
        data["mode"] = config.mode.value
        try:
            with open(self.config_path, "w") as f:
                json.dump(data, f, indent=2)
            return True, None
        except Exception as e:
            return False, str(e)
