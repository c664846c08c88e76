"""Composite strokes: sequences of curves drawn with pen lifts in between.

AIDEV-NOTE: A MultiCurve is what the plotter consumes. The pen goes down
at the start of each component curve and up at its end.
"""

from abc import ABC, abstractmethod
from itertools import chain
from typing import Iterable, Iterator, List, Optional

from .curves import Curve, Point, PointsCurve


class MultiCurve(ABC):
    """An ordered collection of curves."""

    @abstractmethod
    def curves(self) -> Iterator[Curve]:
        """Iterate the component curves in drawing order."""

    def __iter__(self) -> Iterator[Curve]:
        return self.curves()

    def total_time(self) -> float:
        """Pen-down time of all component curves."""
        return sum(curve.total_time() for curve in self.curves())

    def bounds(self) -> Optional[List[float]]:
        """Union of component bounds, or None for an empty collection."""
        result = None
        for curve in self.curves():
            box = curve.bounds()
            if result is None:
                result = box
            else:
                result = [
                    min(result[0], box[0]),
                    min(result[1], box[1]),
                    max(result[2], box[2]),
                    max(result[3], box[3]),
                ]
        return result


class SingleCurveMultiCurve(MultiCurve):
    """Wraps one curve."""

    def __init__(self, curve: Curve):
        self.curve = curve

    def curves(self) -> Iterator[Curve]:
        return iter((self.curve,))


class ConcatMultiCurve(MultiCurve):
    """Draws several multi-curves one after the other."""

    def __init__(self, parts: Iterable[MultiCurve]):
        self.parts = list(parts)

    def curves(self) -> Iterator[Curve]:
        return chain.from_iterable(part.curves() for part in self.parts)

    def __len__(self) -> int:
        return len(self.parts)


class TransformedMultiCurve(MultiCurve):
    """Scales then offsets every point of another multi-curve.

    A point p maps to offset + scale * p.
    """

    def __init__(
        self,
        inner: MultiCurve,
        offset: Point = (0.0, 0.0),
        scale: float = 1.0,
    ):
        self.inner = inner
        self.offset = offset
        self.scale = scale

    def transform_point(self, point: Point) -> Point:
        x, y = point
        return (self.offset[0] + self.scale * x, self.offset[1] + self.scale * y)

    def curves(self) -> Iterator[Curve]:
        for curve in self.inner.curves():
            yield PointsCurve(self.transform_point(p) for p in curve.points)
