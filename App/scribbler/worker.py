"""Background scheduling loop that drives the greedy stroke fit.

AIDEV-NOTE: The worker wakes whenever a parameter changes, decides what is
out of date, does that work without holding the parameter mutex, then
re-evaluates. New parameter values are observed between iterations, never
in the middle of a rebuild, stroke or render.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from PyQt6.QtCore import QThread, pyqtSignal
from PyQt6.QtGui import QImage

from image_source import load_grayscale
from models import (
    PreviewFrame,
    PreviewMode,
    Progress,
    Result,
    ScribblerConfig,
    ScribblerMessage,
)

from .kernels import KernelFactory, LineKernelFactory
from .params import ParameterBlock, ParameterSnapshot
from .preview import (
    build_thumbnail,
    composite_stroke,
    render_raster_preview,
    render_vector_preview,
    to_qimage,
)
from .residue import ResidualImageModel
from .selector import StrokeSelector

logger = logging.getLogger(__name__)

MessageSink = Callable[[ScribblerMessage], None]


@dataclass(frozen=True)
class WorkPlan:
    """What one loop iteration has to do."""

    rebuild: bool = False
    add_stroke: bool = False
    refresh_preview: bool = False
    send_result: bool = False

    def __bool__(self) -> bool:
        return self.rebuild or self.add_stroke or self.refresh_preview or self.send_result


class ScribblerEngine:
    """One job's state plus the rules deciding the next unit of work.

    The residue, strokes and preview buffer belong to whichever thread
    calls step(); other threads talk to the engine only through `params`.
    """

    def __init__(
        self,
        model: ResidualImageModel,
        params: ParameterBlock,
        sink: MessageSink,
        config: Optional[ScribblerConfig] = None,
        selector: Optional[StrokeSelector] = None,
    ):
        self.model = model
        self.params = params
        self.sink = sink
        self.config = config or model.config
        self.selector = selector or StrokeSelector(
            model.kernel_factory, self.config.gray_resolution
        )

        self.preview_image: Optional[np.ndarray] = None
        self.current_blur: Optional[float] = None
        self.current_threshold: Optional[float] = None
        self.current_mode: Optional[PreviewMode] = None

    @property
    def strokes(self):
        return self.model.strokes

    # -------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------

    def needs_more_strokes(self, threshold: float) -> bool:
        weakest = self.strokes.weakest()
        if weakest is None:
            return True
        return weakest.darkness > threshold and len(self.strokes) < self.config.max_strokes

    def plan(self, params: ParameterSnapshot) -> WorkPlan:
        """Evaluate the staleness predicates against a parameter snapshot."""
        rebuild = self.model.residue is None or self.current_blur != params.blur
        add_stroke = self.needs_more_strokes(params.threshold)
        refresh_preview = (
            (add_stroke and params.mode is PreviewMode.VECTOR)
            or self.preview_image is None
            or self.current_blur != params.blur
            or self.current_threshold != params.threshold
            or self.current_mode is not params.mode
        )
        return WorkPlan(
            rebuild=rebuild,
            add_stroke=add_stroke,
            refresh_preview=refresh_preview,
            send_result=params.result_requested,
        )

    def step(self, block: bool = True) -> bool:
        """Run one loop iteration.

        Args:
            block: Wait for a parameter change when nothing is out of date

        Returns:
            False when stopped, or when not blocking and there is no work
        """
        if block:
            params, plan = self.params.wait_for(self.plan)
            if plan is None:
                return False
        else:
            params = self.params.snapshot()
            if params.stopped:
                return False
            plan = self.plan(params)
            if not plan:
                return False

        self.perform(plan, params)
        return True

    def perform(self, plan: WorkPlan, params: ParameterSnapshot):
        if plan.rebuild:
            self.model.rebuild(params.blur)
        if plan.add_stroke:
            self.add_stroke(params.blur)
        if plan.refresh_preview:
            self.generate_preview(params.blur, params.threshold, params.mode)
        # A rebuild empties the stroke set, so more strokes are pending
        if plan.send_result and not plan.add_stroke and not plan.rebuild:
            self.send_result(params.blur, params.threshold)
        self.current_mode = params.mode
        self.current_blur = params.blur
        self.current_threshold = params.threshold

    def run(self):
        """Loop until stopped. Failing iterations are logged and retried."""
        while not self.params.stopped:
            try:
                self.step(block=True)
            except Exception:
                logger.exception("Scribbler iteration failed")

    # -------------------------------------------------------------
    # Units of work
    # -------------------------------------------------------------

    def add_stroke(self, blur: float):
        weakest = self.strokes.weakest()
        context = weakest.context if weakest is not None else None
        instance = self.selector.select_and_apply(
            self.model.residue, self.config.num_attempts, context
        )
        residual_darkness = self.model.darkness() / blur
        self.strokes.add(residual_darkness, instance)
        logger.debug("Strokes: %d, darkness: %f", len(self.strokes), residual_darkness)
        self.publish(Progress(residual_darkness, len(self.strokes)))

    def render_preview(self, blur: float, threshold: float, mode: PreviewMode) -> np.ndarray:
        if mode is PreviewMode.RASTER:
            return render_raster_preview(self.model.preview, blur, threshold)
        return render_vector_preview(self.model.preview_size, self.strokes, blur, threshold)

    def generate_preview(self, blur: float, threshold: float, mode: PreviewMode):
        self.preview_image = self.render_preview(blur, threshold, mode)
        self.publish(PreviewFrame(self.preview_image.copy()))

    def send_result(self, blur: float, threshold: float):
        rendered = self.render_preview(blur, threshold, PreviewMode.VECTOR)
        thumbnail = build_thumbnail(self.model.preview, rendered)
        curve = composite_stroke(self.strokes, threshold)
        logger.info("Sending result with %d strokes", len(curve))

        self.params.clear_result_request()
        self.publish(Result(curve, thumbnail))

    def publish(self, message: ScribblerMessage) -> bool:
        return self.params.deliver(self.sink, message)


class ScribblerThread(QThread):
    """Runs a scribble job in the background.

    Messages are re-published as Qt signals unless a custom sink (for
    example queue.Queue.put) is supplied.
    """

    preview_frame = pyqtSignal(QImage)
    progress = pyqtSignal(float, int)  # darkness, number of strokes
    result = pyqtSignal(object, QImage)  # MultiCurve, thumbnail
    message = pyqtSignal(object)  # ScribblerMessage
    failed = pyqtSignal(str)  # load error

    def __init__(
        self,
        source: Union[str, Path, np.ndarray],
        config: Optional[ScribblerConfig] = None,
        kernel_factory: Optional[KernelFactory] = None,
        sink: Optional[MessageSink] = None,
    ):
        super().__init__()
        self.source = source
        self.config = config or ScribblerConfig()
        self.params = ParameterBlock(self.config.blur, self.config.threshold, self.config.mode)
        self.kernel_factory = kernel_factory or LineKernelFactory(
            chained=self.config.chained_kernels
        )
        self.sink = sink or self._emit_signals
        self.engine: Optional[ScribblerEngine] = None

    # -------------------------------------------------------------

    def run(self):
        try:
            source = self._load_source()
            model = ResidualImageModel(source, self.kernel_factory, self.config)
        except Exception as e:
            logger.exception("Failed to load %s", self._describe_source())
            self.failed.emit(str(e))
            return

        self.engine = ScribblerEngine(model, self.params, self.sink, self.config)
        self.engine.run()
        logger.info("Scribbler stopped")

    def _load_source(self) -> np.ndarray:
        if isinstance(self.source, np.ndarray):
            return self.source
        return load_grayscale(self.source)

    def _describe_source(self) -> str:
        if isinstance(self.source, np.ndarray):
            return f"image array {self.source.shape}"
        return str(self.source)

    def _emit_signals(self, message: ScribblerMessage):
        self.message.emit(message)
        if isinstance(message, PreviewFrame):
            self.preview_frame.emit(to_qimage(message.image))
        elif isinstance(message, Progress):
            self.progress.emit(message.darkness, message.num_strokes)
        elif isinstance(message, Result):
            self.result.emit(message.curve, to_qimage(message.thumbnail))

    # -------------------------------------------------------------
    # API methods
    # -------------------------------------------------------------

    def set_blur(self, blur: float):
        self.params.set_blur(blur)

    def set_threshold(self, threshold: float):
        self.params.set_threshold(threshold)

    def set_mode(self, mode: PreviewMode):
        self.params.set_mode(mode)

    def request_result(self):
        self.params.request_result()

    def stop(self):
        self.params.stop()
