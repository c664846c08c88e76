"""Plottable stroke geometry.

AIDEV-NOTE: Curves are arc-length parameterized polylines; multi-curves
group them into strokes the plotter draws with pen lifts in between.
- curves: PointsCurve primitive, playback cursor, binary persistence
- multicurve: single/concatenated/transformed multi-curves
- rendering: rasterizing strokes into numpy grids
"""

from .curves import (
    Curve,
    CurveCursor,
    Line,
    PointsCurve,
    read_points_curve,
    write_points_curve,
)
from .multicurve import (
    ConcatMultiCurve,
    MultiCurve,
    SingleCurveMultiCurve,
    TransformedMultiCurve,
)
from .rendering import render_multi_curve, stroke_mask

__all__ = [
    "ConcatMultiCurve",
    "Curve",
    "CurveCursor",
    "Line",
    "MultiCurve",
    "PointsCurve",
    "SingleCurveMultiCurve",
    "TransformedMultiCurve",
    "read_points_curve",
    "render_multi_curve",
    "stroke_mask",
    "write_points_curve",
]
