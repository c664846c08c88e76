"""Greedy stroke selection against a residue buffer.

Each step samples random candidates, scores every candidate by the mean
remaining ink under its footprint, keeps the best, and subtracts it from
the residue.
"""

import bisect
import itertools
import logging
from typing import Any, Iterator, Optional

import numpy as np

from models import GRAY_RESOLUTION, StrokeRecord
from shapes import stroke_mask

from .kernels import KernelFactory, KernelInstance

logger = logging.getLogger(__name__)


def darkness(residue: np.ndarray, gray_resolution: int = GRAY_RESOLUTION) -> float:
    """Mean remaining ink, in units of one full stroke pixel."""
    height, width = residue.shape
    total = float(residue.sum(dtype=np.int64))
    return total / width / height / gray_resolution


class StrokeSelector:
    """Picks the best of several candidate strokes and applies it."""

    def __init__(self, kernel_factory: KernelFactory, gray_resolution: int = GRAY_RESOLUTION):
        if not 0 < gray_resolution <= 255:
            raise ValueError(f"gray_resolution must be in 1..255, got {gray_resolution}")
        self.kernel_factory = kernel_factory
        self.gray_resolution = gray_resolution

    def score(self, residue: np.ndarray, mask: np.ndarray) -> float:
        """Mean residue under the mask footprint (-inf for an empty mask)."""
        footprint = mask > 0
        if not footprint.any():
            return float("-inf")
        return float(residue[footprint].mean())

    def select_and_apply(
        self,
        residue: np.ndarray,
        num_attempts: int,
        context: Any = None,
    ) -> KernelInstance:
        """Choose the best of `num_attempts` candidates and subtract it.

        Args:
            residue: int16 residue buffer, modified in place
            num_attempts: Number of candidates to sample
            context: Attachment context of the previous stroke (opaque)

        Returns:
            The winning KernelInstance (shape and new context)
        """
        if num_attempts < 1:
            raise ValueError(f"num_attempts must be positive, got {num_attempts}")

        height, width = residue.shape
        best_instance: Optional[KernelInstance] = None
        best_mask: Optional[np.ndarray] = None
        best_score = float("-inf")

        for _ in range(num_attempts):
            instance = self.kernel_factory.create_instance(context)
            mask = stroke_mask(instance.shape, (width, height), self.gray_resolution)
            score = self.score(residue, mask)
            # Strict comparison: the earliest of equally good candidates wins
            if best_instance is None or score > best_score:
                best_score = score
                best_mask = mask
                best_instance = instance

        self.subtract(residue, best_mask)
        return best_instance

    @staticmethod
    def subtract(residue: np.ndarray, mask: np.ndarray):
        """Saturating residue -= mask, restricted to the mask footprint."""
        footprint = mask > 0
        if not footprint.any():
            return
        remaining = residue[footprint].astype(np.int32) - mask[footprint]
        residue[footprint] = np.maximum(remaining, 0)


class StrokeCollection:
    """Accepted strokes ordered by decreasing darkness at creation.

    AIDEV-NOTE: Keys are (negated darkness, insertion sequence) so equal
    darkness values keep insertion order instead of colliding.
    """

    def __init__(self):
        self._records: "list[StrokeRecord]" = []
        self._keys: "list[tuple[float, int]]" = []
        self._sequence = itertools.count()

    def add(self, stroke_darkness: float, instance: KernelInstance) -> StrokeRecord:
        record = StrokeRecord(
            sort_key=-stroke_darkness,
            sequence=next(self._sequence),
            shape=instance.shape,
            context=instance.context,
        )
        index = bisect.bisect_right(self._keys, record.key)
        self._keys.insert(index, record.key)
        self._records.insert(index, record)
        return record

    def weakest(self) -> Optional[StrokeRecord]:
        """The stroke with the least darkness at creation (last in order)."""
        return self._records[-1] if self._records else None

    def above(self, threshold: float) -> Iterator[StrokeRecord]:
        """Strokes whose darkness at creation is strictly above `threshold`.

        Iteration stops at the first stroke at or below the threshold; the
        ordering guarantees every later stroke is weaker.
        """
        for record in self._records:
            if record.darkness <= threshold:
                break
            yield record

    def clear(self):
        self._records.clear()
        self._keys.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[StrokeRecord]:
        return iter(list(self._records))
