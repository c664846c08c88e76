"""Test kernel factories, greedy selection and stroke ordering.

Tests for scribbler.kernels and scribbler.selector:
    - LineKernelFactory bounds, chaining, dimension precondition
    - darkness() normalization
    - select_and_apply(): best-mean choice, earliest tie wins, saturating subtract
    - StrokeCollection ordering, ties and early-exit filtering

Run:
    pytest tests/test_selector.py -v
"""

import numpy as np
import pytest

from scribbler import (
    KernelFactory,
    KernelInstance,
    LineKernelFactory,
    StrokeCollection,
    StrokeSelector,
    darkness,
)
from shapes import Line, SingleCurveMultiCurve


class ScriptedFactory(KernelFactory):
    """Hands out a fixed sequence of lines and records the contexts it saw."""

    def __init__(self, lines):
        super().__init__()
        self.lines = list(lines)
        self.contexts = []
        self._next = 0

    def create_instance(self, context=None):
        self.contexts.append(context)
        start, end = self.lines[self._next % len(self.lines)]
        self._next += 1
        return KernelInstance(SingleCurveMultiCurve(Line(start, end)), context=self._next)


# --- LineKernelFactory ---


def test_line_factory_requires_dimensions():
    with pytest.raises(RuntimeError):
        LineKernelFactory().create_instance()


def test_line_factory_stays_inside_grid(line_factory):
    line_factory.set_dimensions(30, 12)
    for _ in range(200):
        box = line_factory.create_instance().shape.bounds()
        assert box[0] >= 0 and box[1] >= 0
        assert box[2] <= 29 and box[3] <= 11


def test_unchained_lines_ignore_context(line_factory):
    line_factory.set_dimensions(50, 50)
    first = line_factory.create_instance()
    starts = {next(line_factory.create_instance(first.context).shape.curves()).points[0]
              for _ in range(5)}
    assert len(starts) == 5


def test_chained_lines_start_at_previous_end():
    factory = LineKernelFactory(chained=True, rng=np.random.default_rng(7))
    factory.set_dimensions(50, 50)
    first = factory.create_instance()
    end = next(first.shape.curves()).points[-1]

    follow = factory.create_instance(first.context)
    assert next(follow.shape.curves()).points[0] == end


def test_chained_factory_without_context_starts_anywhere():
    factory = LineKernelFactory(chained=True, rng=np.random.default_rng(7))
    factory.set_dimensions(50, 50)
    assert factory.create_instance(None).context is not None


# --- darkness ---


def test_darkness_normalization():
    residue = np.full((4, 5), 128, dtype=np.int16)
    assert darkness(residue) == pytest.approx(1.0)
    residue[:2] = 0
    assert darkness(residue) == pytest.approx(0.5)
    assert darkness(residue, gray_resolution=64) == pytest.approx(1.0)


# --- select_and_apply ---


def test_selects_line_with_highest_mean():
    residue = np.zeros((6, 10), dtype=np.int16)
    residue[4, :] = 200
    factory = ScriptedFactory([((0, 1), (9, 1)), ((0, 4), (9, 4)), ((0, 5), (9, 5))])
    selector = StrokeSelector(factory)

    chosen = selector.select_and_apply(residue, 3)

    assert next(chosen.shape.curves()).points == ((0.0, 4.0), (9.0, 4.0))
    assert chosen.context == 2
    assert np.all(residue[4] == 72)


def test_mean_beats_total():
    residue = np.zeros((10, 10), dtype=np.int16)
    residue[0, :] = 50  # long, weak
    residue[9, 0:2] = 120  # short, strong
    factory = ScriptedFactory([((0, 0), (9, 0)), ((0, 9), (1, 9))])

    chosen = StrokeSelector(factory).select_and_apply(residue, 2)
    assert next(chosen.shape.curves()).points == ((0.0, 9.0), (1.0, 9.0))


def test_earliest_attempt_wins_ties():
    residue = np.full((5, 5), 100, dtype=np.int16)
    factory = ScriptedFactory([((0, 0), (4, 0)), ((0, 2), (4, 2)), ((0, 4), (4, 4))])

    chosen = StrokeSelector(factory).select_and_apply(residue, 3)
    assert chosen.context == 1
    assert np.all(residue[0] == 0)
    assert np.all(residue[1:] == 100)


def test_subtract_saturates_at_zero():
    residue = np.full((3, 3), 40, dtype=np.int16)
    factory = ScriptedFactory([((0, 1), (2, 1))])

    StrokeSelector(factory).select_and_apply(residue, 1)
    assert residue.min() == 0
    assert np.all(residue[1] == 0)
    assert np.all(residue[0] == 40)


def test_passes_context_to_every_attempt():
    residue = np.full((3, 3), 10, dtype=np.int16)
    factory = ScriptedFactory([((0, 0), (2, 2))])
    StrokeSelector(factory).select_and_apply(residue, 4, context="prev")
    assert factory.contexts == ["prev"] * 4


def test_rejects_nonpositive_attempts():
    factory = ScriptedFactory([((0, 0), (1, 1))])
    with pytest.raises(ValueError):
        StrokeSelector(factory).select_and_apply(np.zeros((2, 2), np.int16), 0)


def test_rejects_out_of_range_ink():
    with pytest.raises(ValueError):
        StrokeSelector(ScriptedFactory([((0, 0), (1, 1))]), gray_resolution=300)


def test_darkness_never_increases(line_factory):
    residue = np.random.default_rng(3).integers(0, 256, size=(20, 30)).astype(np.int16)
    line_factory.set_dimensions(30, 20)
    selector = StrokeSelector(line_factory)

    previous = darkness(residue)
    context = None
    for _ in range(60):
        context = selector.select_and_apply(residue, 10, context).context
        current = darkness(residue)
        assert current <= previous
        assert residue.min() >= 0
        previous = current


# --- StrokeCollection ---


def _instance(tag):
    return KernelInstance(SingleCurveMultiCurve(Line((0, 0), (1, 1))), context=tag)


def test_collection_orders_by_descending_darkness():
    strokes = StrokeCollection()
    for value in [0.4, 0.9, 0.1, 0.5]:
        strokes.add(value, _instance(value))

    keys = [record.sort_key for record in strokes]
    assert keys == sorted(keys)
    assert [record.darkness for record in strokes] == [0.9, 0.5, 0.4, 0.1]
    assert strokes.weakest().context == 0.1


def test_equal_darkness_keeps_insertion_order():
    strokes = StrokeCollection()
    for tag in ["a", "b", "c"]:
        strokes.add(0.3, _instance(tag))

    assert len(strokes) == 3
    assert [record.context for record in strokes] == ["a", "b", "c"]
    assert strokes.weakest().context == "c"


def test_above_is_strict_and_ordered():
    strokes = StrokeCollection()
    for value in [0.8, 0.6, 0.5, 0.5, 0.2]:
        strokes.add(value, _instance(value))

    assert [r.darkness for r in strokes.above(0.5)] == [0.8, 0.6]
    assert [r.darkness for r in strokes.above(0.0)] == [0.8, 0.6, 0.5, 0.5, 0.2]
    assert list(strokes.above(0.9)) == []


def test_clear():
    strokes = StrokeCollection()
    strokes.add(0.5, _instance(1))
    strokes.clear()
    assert len(strokes) == 0
    assert strokes.weakest() is None
