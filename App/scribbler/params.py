"""Live job parameters shared between caller threads and the worker.

Every field lives behind one QMutex. Setters wake the worker
through a QWaitCondition; the worker only ever reads a consistent
ParameterSnapshot, never individual fields.

AIDEV-NOTE: Message delivery and stop() share a second, recursive mutex.
stop() cannot return while a message is being delivered, and nothing is
delivered once it has returned. A sink may call back into the block from
the delivering thread.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, TypeVar

from PyQt6.QtCore import QMutex, QMutexLocker, QRecursiveMutex, QWaitCondition

from models import PreviewMode

from .residue import MAX_BLUR

T = TypeVar("T")


@dataclass(frozen=True)
class ParameterSnapshot:
    """Parameter values observed at one instant."""

    blur: float
    threshold: float
    mode: PreviewMode
    result_requested: bool = False
    stopped: bool = False


def validate_blur(blur: float) -> float:
    blur = float(blur)
    if not 0 < blur <= MAX_BLUR:
        raise ValueError(f"blur must be in (0, {MAX_BLUR}], got {blur}")
    return blur


def validate_threshold(threshold: float) -> float:
    threshold = float(threshold)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be in [0, 1], got {threshold}")
    return threshold


class ParameterBlock:
    """Synchronized blur/threshold/mode plus stop and result-request flags."""

    def __init__(self, blur: float, threshold: float, mode: PreviewMode):
        self._mutex = QMutex()
        self._changed = QWaitCondition()
        self._delivery = QRecursiveMutex()
        self._blur = validate_blur(blur)
        self._threshold = validate_threshold(threshold)
        self._mode = PreviewMode(mode)
        self._result_requested = False
        self._stopped = False

    # -------------------------------------------------------------
    # Setters (any thread)
    # -------------------------------------------------------------

    def set_blur(self, blur: float):
        blur = validate_blur(blur)
        with QMutexLocker(self._mutex):
            self._blur = blur
            self._changed.wakeAll()

    def set_threshold(self, threshold: float):
        threshold = validate_threshold(threshold)
        with QMutexLocker(self._mutex):
            self._threshold = threshold
            self._changed.wakeAll()

    def set_mode(self, mode: PreviewMode):
        mode = PreviewMode(mode)
        with QMutexLocker(self._mutex):
            self._mode = mode
            self._changed.wakeAll()

    def request_result(self):
        with QMutexLocker(self._mutex):
            self._result_requested = True
            self._changed.wakeAll()

    def clear_result_request(self):
        with QMutexLocker(self._mutex):
            self._result_requested = False

    def stop(self):
        with QMutexLocker(self._delivery):
            with QMutexLocker(self._mutex):
                self._stopped = True
                self._changed.wakeAll()

    # -------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------

    @property
    def stopped(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._stopped

    def snapshot(self) -> ParameterSnapshot:
        with QMutexLocker(self._mutex):
            return self._snapshot_locked()

    def _snapshot_locked(self) -> ParameterSnapshot:
        return ParameterSnapshot(
            blur=self._blur,
            threshold=self._threshold,
            mode=self._mode,
            result_requested=self._result_requested,
            stopped=self._stopped,
        )

    def wait_for(
        self, evaluate: Callable[[ParameterSnapshot], Optional[T]]
    ) -> Tuple[ParameterSnapshot, Optional[T]]:
        """Block until `evaluate` returns something truthy or stop() is called.

        `evaluate` runs with the mutex held, once per wake-up, and must not
        call back into this block.

        Returns:
            The snapshot that satisfied the wait and what `evaluate` returned
            for it (None when woken by stop()).
        """
        with QMutexLocker(self._mutex):
            while True:
                snapshot = self._snapshot_locked()
                if snapshot.stopped:
                    return snapshot, None
                outcome = evaluate(snapshot)
                if outcome:
                    return snapshot, outcome
                self._changed.wait(self._mutex)

    # -------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------

    def deliver(self, sink: Callable[[Any], None], message: Any) -> bool:
        """Hand `message` to `sink` unless stop() has been called.

        Returns:
            True if the message was delivered
        """
        with QMutexLocker(self._delivery):
            if self.stopped:
                return False
            sink(message)
            return True
