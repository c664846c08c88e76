"""Rasterize multi-curves into grayscale grids."""

import numpy as np
from PIL import Image, ImageDraw

from .multicurve import MultiCurve


def draw_multi_curve(
    draw: ImageDraw.ImageDraw,
    shape: MultiCurve,
    intensity: int,
    line_width: float = 1.0,
):
    """Stroke every component polyline of `shape` onto a Pillow canvas.

    AIDEV-NOTE: Pillow places pixel centers on integer coordinates, which
    matches the residue grid indexing (x = column, y = row).
    """
    width = max(1, int(round(line_width)))
    joint = "curve" if width > 2 else None
    for curve in shape.curves():
        draw.line(list(curve.points), fill=intensity, width=width, joint=joint)


def render_multi_curve(
    grid: np.ndarray,
    shape: MultiCurve,
    intensity: int,
    line_width: float = 1.0,
) -> np.ndarray:
    """Paint the footprint of `shape` into a uint8 grid in place.

    Args:
        grid: 2D uint8 array (rows x cols)
        shape: Stroke to draw
        intensity: Gray value (0-255) written under the stroke
        line_width: Stroke width in pixels

    Returns:
        The same grid, for chaining
    """
    if grid.dtype != np.uint8 or grid.ndim != 2:
        raise TypeError(f"Can only render into 2D uint8 grids, got {grid.dtype}")
    canvas = Image.fromarray(grid)
    draw_multi_curve(ImageDraw.Draw(canvas), shape, intensity, line_width)
    grid[...] = np.asarray(canvas)
    return grid


def stroke_mask(
    shape: MultiCurve,
    size: "tuple[int, int]",
    intensity: int,
    line_width: float = 1.0,
) -> np.ndarray:
    """Render a stroke on a blank (zero) uint8 grid of size (width, height)."""
    canvas = Image.new("L", size, 0)
    draw_multi_curve(ImageDraw.Draw(canvas), shape, intensity, line_width)
    return np.array(canvas, dtype=np.uint8)
