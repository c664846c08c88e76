"""Arc-length parameterized curves.

AIDEV-NOTE: "Time" along a curve is distance travelled along its polyline,
so a plotter moving at constant speed reaches position_at(t) after t units.
"""

import math
import struct
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable, List, Sequence, Tuple

Point = Tuple[float, float]

_COUNT = struct.Struct(">i")
_XY = struct.Struct(">dd")


class Curve(ABC):
    """A single continuous pen-down path."""

    @property
    @abstractmethod
    def points(self) -> Tuple[Point, ...]:
        """Polyline vertices in drawing order."""

    @abstractmethod
    def total_time(self) -> float:
        """Time needed to traverse the whole curve."""

    @abstractmethod
    def position_at(self, time: float) -> Point:
        """Position reached after `time`."""

    @abstractmethod
    def bounds(self) -> List[float]:
        """Axis-aligned box as [min_x, min_y, max_x, max_y]."""


class CurveCursor:
    """Forward-only playback session over a polyline.

    The cursor remembers the segment it stopped in, so a sequence of
    non-decreasing queries costs O(segments) in total. Queries with a
    smaller time than a previous one are not supported; open a new cursor
    to play the curve back again.
    """

    def __init__(self, points: Sequence[Point]):
        self._points = points
        self._index = 0
        self._time_at_index = 0.0

    def position_at(self, time: float) -> Point:
        points = self._points
        if time < 0:
            return points[0]

        last = len(points) - 1
        time_from_current = time - self._time_at_index
        while True:
            if self._index == last:
                return points[last]
            x0, y0 = points[self._index]
            x1, y1 = points[self._index + 1]
            time_to_next = math.hypot(x1 - x0, y1 - y0)
            if time_to_next > time_from_current:
                ratio = time_from_current / time_to_next
                return (x0 + (x1 - x0) * ratio, y0 + (y1 - y0) * ratio)
            time_from_current -= time_to_next
            self._time_at_index += time_to_next
            self._index += 1


class PointsCurve(Curve):
    """Polyline through an ordered sequence of at least two points.

    position_at() shares one cursor per instance, so callers must query it
    with non-decreasing times. Use cursor() for independent playbacks.
    """

    def __init__(self, points: Iterable[Point]):
        pts = tuple((float(x), float(y)) for x, y in points)
        if len(pts) < 2:
            raise ValueError(f"A curve needs at least 2 points, got {len(pts)}")
        self._points = pts
        self._total_length = total_length(pts)
        self._bounds = _bounds(pts)
        self._cursor = CurveCursor(pts)

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    def total_time(self) -> float:
        return self._total_length

    def position_at(self, time: float) -> Point:
        return self._cursor.position_at(time)

    def cursor(self) -> CurveCursor:
        """Start a fresh playback session."""
        return CurveCursor(self._points)

    def bounds(self) -> List[float]:
        return list(self._bounds)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"PointsCurve({len(self._points)} points, length={self._total_length:.2f})"


class Line(PointsCurve):
    """Straight segment between two points."""

    def __init__(self, start: Point, end: Point):
        super().__init__((start, end))

    @property
    def start(self) -> Point:
        return self._points[0]

    @property
    def end(self) -> Point:
        return self._points[-1]


def total_length(points: Sequence[Point]) -> float:
    """Sum of the Euclidean lengths of consecutive segments."""
    return sum(
        math.hypot(x1 - x0, y1 - y0)
        for (x0, y0), (x1, y1) in zip(points, points[1:])
    )


def _bounds(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    return (min(xs), min(ys), max(xs), max(ys))


# --- Binary persistence ---


def write_points_curve(stream: BinaryIO, curve: Curve) -> None:
    """Write a curve as a big-endian point count followed by float64 x, y pairs."""
    points = curve.points
    stream.write(_COUNT.pack(len(points)))
    for x, y in points:
        stream.write(_XY.pack(x, y))


def read_points_curve(stream: BinaryIO) -> PointsCurve:
    """Read a curve written by write_points_curve().

    Raises:
        ValueError: If the stream is truncated or holds fewer than 2 points
    """
    header = stream.read(_COUNT.size)
    if len(header) != _COUNT.size:
        raise ValueError("Truncated curve header")
    (count,) = _COUNT.unpack(header)
    if count < 0:
        raise ValueError(f"Invalid point count {count}")

    body = stream.read(_XY.size * count)
    if len(body) != _XY.size * count:
        raise ValueError(f"Truncated curve body, expected {count} points")
    return PointsCurve(_XY.iter_unpack(body))
