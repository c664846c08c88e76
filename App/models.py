"""Data models and constants for the Scribbler stroke fitter."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

import numpy as np

# AIDEV-NOTE: Residue is resampled to this width divided by blur
LINE_WIDTH_TO_IMAGE_WIDTH = 450.0  # px
GRAY_RESOLUTION = 128  # ink value of one stroke pixel
NUM_ATTEMPTS = 100  # candidates per stroke
MAX_STROKES = 2000

# Configuration file path
CONFIG_FILE = Path.home() / ".scribbler_config.json"


class PreviewMode(Enum):
    """What the preview frames show."""

    RASTER = "raster"  # Blurred source with simulated threshold
    VECTOR = "vector"  # Accumulated strokes


@dataclass
class ScribblerConfig:
    """Job settings for a scribble run."""

    # Live parameters (initial values)
    blur: float = 2.0  # preview px per residue px
    threshold: float = 0.05  # stop once darkness falls to this (0-1)
    mode: PreviewMode = PreviewMode.VECTOR

    # Greedy search
    num_attempts: int = NUM_ATTEMPTS
    max_strokes: int = MAX_STROKES
    chained_kernels: bool = False  # start each stroke where the last ended

    # Raster resolution
    line_width_to_image_width: float = LINE_WIDTH_TO_IMAGE_WIDTH
    gray_resolution: int = GRAY_RESOLUTION


# --- Stroke records ---


@dataclass(frozen=True)
class StrokeRecord:
    """An accepted stroke.

    AIDEV-NOTE: sort_key is the negated darkness measured right after the
    stroke was subtracted; sequence breaks ties between equal keys.
    """

    sort_key: float
    sequence: int
    shape: Any  # MultiCurve
    context: Any = None  # opaque, owned by the kernel factory

    @property
    def darkness(self) -> float:
        return -self.sort_key

    @property
    def key(self) -> "tuple[float, int]":
        return (self.sort_key, self.sequence)


# --- Worker messages ---


@dataclass
class PreviewFrame:
    """A freshly rendered grayscale preview (uint8 array)."""

    image: np.ndarray


@dataclass
class Progress:
    """Darkness left after the latest stroke, and the stroke count."""

    darkness: float
    num_strokes: int


@dataclass
class Result:
    """Final composite stroke and a side-by-side comparison thumbnail."""

    curve: Any  # MultiCurve
    thumbnail: np.ndarray


ScribblerMessage = Union[PreviewFrame, Progress, Result]
