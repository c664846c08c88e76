"""Preview frames and result thumbnails.

AIDEV-NOTE: Raster mode simulates what the stroke fit will look like from
the source alone (blur plus a clipping bias); vector mode draws the strokes
accepted so far.
"""

import numpy as np
from PIL import Image, ImageDraw, ImageFilter
from PyQt6.QtGui import QImage

from shapes import ConcatMultiCurve, MultiCurve, TransformedMultiCurve
from shapes.rendering import draw_multi_curve

from .selector import StrokeCollection

WHITE = 255
BLACK = 0


def render_raster_preview(preview: np.ndarray, blur: float, threshold: float) -> np.ndarray:
    """Blur the preview image and brighten it by the threshold, clipping at white."""
    image = Image.fromarray(preview)
    if blur > 0:
        image = image.filter(ImageFilter.GaussianBlur(radius=blur))

    # Simulate threshold through saturation
    biased = np.asarray(image, dtype=np.int16) + int(round(threshold * 255))
    return np.clip(biased, 0, 255).astype(np.uint8)


def residue_to_preview(shape: MultiCurve, blur: float) -> MultiCurve:
    """Map a stroke from residue pixels to preview pixels.

    A residue pixel covers blur x blur preview pixels; pixel centers sit on
    integer coordinates in both grids.
    """
    center = (blur - 1) / 2
    return TransformedMultiCurve(shape, offset=(center, center), scale=blur)


def render_vector_preview(
    size: "tuple[int, int]",
    strokes: StrokeCollection,
    blur: float,
    threshold: float,
) -> np.ndarray:
    """Draw strokes darker than `threshold` in black on a white canvas.

    Args:
        size: (width, height) of the preview
        strokes: Accepted strokes in residue coordinates
        blur: Residue-to-preview scale, also the drawn line width
        threshold: Darkness at or below which strokes are left out
    """
    canvas = Image.new("L", size, WHITE)
    draw = ImageDraw.Draw(canvas)
    for record in strokes.above(threshold):
        draw_multi_curve(draw, residue_to_preview(record.shape, blur), BLACK, line_width=blur)
    return np.array(canvas, dtype=np.uint8)


def build_thumbnail(original: np.ndarray, rendered: np.ndarray) -> np.ndarray:
    """Side-by-side comparison: original on the left, strokes on the right."""
    return np.hstack([original, rendered])


def composite_stroke(strokes: StrokeCollection, threshold: float) -> ConcatMultiCurve:
    """Concatenate all strokes darker than `threshold`, strongest first."""
    return ConcatMultiCurve(record.shape for record in strokes.above(threshold))


def to_qimage(grid: np.ndarray) -> QImage:
    """Convert a uint8 grayscale grid into an independent QImage."""
    data = np.ascontiguousarray(grid, dtype=np.uint8)
    height, width = data.shape
    image = QImage(data.tobytes(), width, height, width, QImage.Format.Format_Grayscale8)
    # Detach from the temporary buffer
    return image.copy()
