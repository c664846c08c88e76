"""Greedy stroke fitting for pen plotters.

AIDEV-NOTE: This package turns a grayscale image into plottable strokes,
one greedy choice at a time, while live parameters can change:
- kernels: random candidate stroke generators
- residue: source/preview/residue images of a job
- selector: greedy candidate scoring and the ordered stroke collection
- preview: raster/vector previews and result thumbnails
- params: mutex-guarded live parameters
- worker: scheduling loop (ScribblerEngine) and its QThread host
"""

from .kernels import KernelFactory, KernelInstance, LineKernelFactory
from .params import ParameterBlock, ParameterSnapshot
from .residue import ResidualImageModel
from .selector import StrokeCollection, StrokeSelector, darkness
from .worker import ScribblerEngine, ScribblerThread, WorkPlan

__all__ = [
    "KernelFactory",
    "KernelInstance",
    "LineKernelFactory",
    "ParameterBlock",
    "ParameterSnapshot",
    "ResidualImageModel",
    "ScribblerEngine",
    "ScribblerThread",
    "StrokeCollection",
    "StrokeSelector",
    "WorkPlan",
    "darkness",
]
