"""Candidate stroke generators ("kernels") for the greedy selector."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from shapes import Line, MultiCurve, SingleCurveMultiCurve


@dataclass(frozen=True)
class KernelInstance:
    """A candidate stroke and the context needed to continue from it."""

    shape: MultiCurve
    context: Any = None


class KernelFactory(ABC):
    """Produces random candidate strokes inside a width x height grid."""

    def __init__(self):
        self.width: Optional[int] = None
        self.height: Optional[int] = None

    def set_dimensions(self, width: int, height: int):
        """Restrict future candidates to a new grid size."""
        self.width = width
        self.height = height

    def _require_dimensions(self) -> Tuple[int, int]:
        if self.width is None or self.height is None:
            raise RuntimeError("set_dimensions() must be called before creating kernels")
        return self.width, self.height

    @abstractmethod
    def create_instance(self, context: Any = None) -> KernelInstance:
        """Create a new candidate, optionally continuing from `context`."""


@dataclass(frozen=True)
class _LineEnd:
    """Where the previous line stopped."""

    point: Tuple[float, float]


class LineKernelFactory(KernelFactory):
    """Random straight strokes.

    Both end points are uniform over the grid. When `chained` is set and a
    context from a previous line is supplied, the new line starts where
    that one ended, producing one continuous scribble.
    """

    def __init__(self, chained: bool = False, rng: Optional[np.random.Generator] = None):
        super().__init__()
        self.chained = chained
        self.rng = rng if rng is not None else np.random.default_rng()

    def _random_point(self, width: int, height: int) -> Tuple[float, float]:
        return (
            float(self.rng.uniform(0, width - 1)),
            float(self.rng.uniform(0, height - 1)),
        )

    def create_instance(self, context: Any = None) -> KernelInstance:
        width, height = self._require_dimensions()

        if self.chained and isinstance(context, _LineEnd):
            start = context.point
        else:
            start = self._random_point(width, height)
        end = self._random_point(width, height)

        return KernelInstance(
            shape=SingleCurveMultiCurve(Line(start, end)),
            context=_LineEnd(end),
        )
