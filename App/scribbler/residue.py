"""Source, preview and residue images for a scribble job.

AIDEV-NOTE: The residue buffer is the ink that accepted strokes have not
yet covered. It lives at preview resolution divided by blur, so a single
1-pixel residue stroke stands for a blur-wide stroke on the preview.
"""

import logging
from typing import Optional

import numpy as np
from PIL import Image

from models import ScribblerConfig

from .kernels import KernelFactory
from .selector import StrokeCollection, darkness

logger = logging.getLogger(__name__)

# int16 residue must hold blur * gray_resolution
MAX_BLUR = 255.0


def resize_area(image: np.ndarray, scale: float) -> np.ndarray:
    """Area-averaging resize of a uint8 grayscale array by `scale`."""
    height, width = image.shape
    new_size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
    resized = Image.fromarray(image).resize(new_size, Image.Resampling.BOX)
    return np.array(resized, dtype=np.uint8)


class ResidualImageModel:
    """Owns the images of one job and the strokes fitted to them."""

    def __init__(
        self,
        source: np.ndarray,
        kernel_factory: KernelFactory,
        config: Optional[ScribblerConfig] = None,
    ):
        if source.ndim != 2 or source.size == 0:
            raise ValueError(f"Expected a non-empty 2D grayscale image, got shape {source.shape}")
        self.config = config or ScribblerConfig()
        self.kernel_factory = kernel_factory
        self.source = source.astype(np.uint8, copy=False)
        self.strokes = StrokeCollection()

        preview_scale = self.config.line_width_to_image_width / self.source.shape[1]
        self.preview = resize_area(self.source, preview_scale)
        self.residue: Optional[np.ndarray] = None
        self.blur: Optional[float] = None

    @property
    def preview_size(self) -> "tuple[int, int]":
        """(width, height) of the preview image."""
        height, width = self.preview.shape
        return width, height

    def rebuild(self, blur: float):
        """Reset the residue for a new blur and drop all strokes."""
        if not 0 < blur <= MAX_BLUR:
            raise ValueError(f"blur must be in (0, {MAX_BLUR}], got {blur}")

        # Native resolution divided by blur factor
        scale = self.config.line_width_to_image_width / blur / self.source.shape[1]
        resized = resize_area(self.source, scale)

        # Negative, widened to signed so strokes can be subtracted
        ink = 255 - resized.astype(np.int32)

        # Full scale is now blur * gray_resolution
        full_scale = blur * self.config.gray_resolution
        self.residue = np.rint(ink * (full_scale / 255.0)).astype(np.int16)
        self.blur = blur

        self.strokes.clear()

        height, width = self.residue.shape
        self.kernel_factory.set_dimensions(width, height)
        logger.info("Rebuilt residue at %dx%d for blur %.2f", width, height, blur)

    def darkness(self) -> float:
        """Remaining ink of the residue; equals blur for an all-black image."""
        if self.residue is None:
            raise RuntimeError("rebuild() must be called first")
        return darkness(self.residue, self.config.gray_resolution)
