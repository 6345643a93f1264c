# processor.py
"""Glue logic that wires contours → targets → pairs → overlay + telemetry,
and the worker thread that runs it once per camera frame."""
from __future__ import annotations

import threading
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

import cv2
import numpy as np

from target_vision.common import Side
from target_vision.config import TargetConfig
from target_vision.output import VideoOutput
from target_vision.pairing import (
    form_pairs,
    rank_pairs,
    sort_targets,
    validate_alternation,
)
from target_vision.pipeline import ContourPipeline
from target_vision.target import Target
from target_vision.target_pair import TargetPair
from target_vision.telemetry import (
    KEY_IMAGE_CENTER_X,
    KEY_IS_ORDERED,
    KEY_POST_PROCESS_TIME,
    KEY_PROCESS_TIME,
    KEY_TARGET_PAIRS,
    TelemetrySink,
)

# BGR
BLUE_COLOR = (255, 0, 0)
RED_COLOR = (0, 0, 255)
GREEN_COLOR = (0, 255, 0)
PURPLE_COLOR = (255, 0, 255)

CENTER_MARK_RADIUS = 5
SELECTED_MARK_RADIUS = 10
SELECTED_MARK_THICKNESS = 2


@dataclass
class FrameResult:
    """Everything one frame cycle produced."""
    targets: List[Target]
    is_ordered: bool
    pairs: List[TargetPair]          # nearest-to-center first
    selected: Optional[TargetPair]
    image: np.ndarray
    post_process_ms: float = 0.0
    records: List[str] = field(default_factory=list)


def _px(point: Tuple[float, float]) -> Tuple[int, int]:
    return int(round(point[0])), int(round(point[1]))


def annotate(
    image: np.ndarray,
    targets: Sequence[Target],
    image_center: Tuple[float, float],
    selected_center: Optional[Tuple[float, float]] = None,
) -> np.ndarray:
    """Draw the overlay in place and return the same buffer."""
    for target in targets:
        if len(target.points) == 0:
            continue
        # Binary choice: anything that isn't LEFT is drawn blue
        color = RED_COLOR if target.side is Side.LEFT else BLUE_COLOR
        cv2.fillConvexPoly(image, target.to_contour(), color)
    cv2.circle(image, _px(image_center), CENTER_MARK_RADIUS, GREEN_COLOR, -1)
    if selected_center is not None:
        cv2.circle(
            image,
            _px(selected_center),
            SELECTED_MARK_RADIUS,
            PURPLE_COLOR,
            SELECTED_MARK_THICKNESS,
        )
    return image


class FrameProcessor:
    """
    One full frame cycle: classify, order, pair, select, draw, publish.

    ``is_inverted`` is read exactly once per frame; nothing else survives
    from one frame to the next.
    """

    def __init__(
        self,
        image_size: Tuple[int, int],
        telemetry: TelemetrySink,
        is_inverted: Callable[[], bool] = lambda: False,
        output: Optional[VideoOutput] = None,
        target_cfg: Optional[TargetConfig] = None,
    ) -> None:
        width, height = image_size
        self.image_center = (width // 2, height // 2)
        self.telemetry = telemetry
        self.is_inverted = is_inverted
        self.output = output
        self.target_cfg = target_cfg or TargetConfig()

    def publish(
        self,
        records: Sequence[str],
        process_time_ns: int,
        post_process_ns: int,
        is_ordered: bool,
    ) -> None:
        self.telemetry.publish(KEY_TARGET_PAIRS, list(records))
        self.telemetry.publish(KEY_PROCESS_TIME, process_time_ns / 1_000_000.0)
        self.telemetry.publish(KEY_POST_PROCESS_TIME, post_process_ns / 1_000_000.0)
        self.telemetry.publish(KEY_IMAGE_CENTER_X, self.image_center[0])
        self.telemetry.publish(KEY_IS_ORDERED, is_ordered)

    def process(self, contours: Sequence[Any], image: np.ndarray, process_time_ns: int = 0) -> FrameResult:
        tic = time.perf_counter_ns()

        inverted = bool(self.is_inverted())
        targets = [Target(c, inverted, self.target_cfg) for c in contours]
        targets = sort_targets(targets, inverted)
        is_ordered = validate_alternation(targets)

        pairs = rank_pairs(form_pairs(targets), self.image_center[0])
        selected = pairs[0] if pairs else None

        annotate(image, targets, self.image_center, selected.center if selected else None)
        if self.output is not None:
            self.output.put_frame(image)

        records = [p.to_json() for p in pairs]
        post_ns = time.perf_counter_ns() - tic

        self.publish(records, process_time_ns, post_ns, is_ordered)
        return FrameResult(
            targets=targets,
            is_ordered=is_ordered,
            pairs=pairs,
            selected=selected,
            image=image,
            post_process_ms=post_ns / 1_000_000.0,
            records=records,
        )


# ────────────────────────────────────────────────────────────────────────────
#   W O R K E R   T H R E A D
# ────────────────────────────────────────────────────────────────────────────
class FrameSource(Protocol):
    def read(self) -> Optional[np.ndarray]: ...
    def is_opened(self) -> bool: ...
    def open(self) -> bool: ...


class VisionThread(threading.Thread):
    """Runs the frame cycle back to back on its own thread, one frame at a time."""

    def __init__(
        self,
        source: FrameSource,
        pipeline: ContourPipeline,
        processor: FrameProcessor,
        max_reopens: int = 5,
        retry_sleep_s: float = 0.05,
    ) -> None:
        super().__init__(name="VisionThread", daemon=True)
        self.source = source
        self.pipeline = pipeline
        self.processor = processor
        self.max_reopens = max_reopens
        self.retry_sleep_s = retry_sleep_s

        self.frames_processed = 0
        self.frames_skipped = 0
        self.cam_reopens = 0
        self.last_result: Optional[FrameResult] = None
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _recover_source(self) -> None:
        if self.source.is_opened() or self.cam_reopens >= self.max_reopens:
            return
        if self.source.open():
            self.cam_reopens = 0
        else:
            self.cam_reopens += 1

    def step(self) -> bool:
        """Process one frame. Returns False when the frame was skipped."""
        frame = self.source.read()
        if frame is None:
            self.frames_skipped += 1
            self._recover_source()
            return False

        result = self.pipeline.process(frame)
        self.last_result = self.processor.process(
            result.contours, result.image, result.process_time_ns
        )
        self.frames_processed += 1
        return True

    def run(self) -> None:
        print("[Vision] Frame loop started")
        while not self._stop_event.is_set():
            try:
                if not self.step():
                    self._stop_event.wait(self.retry_sleep_s)
            except Exception as exc:  # noqa: BLE001
                # Abandon this frame only; the next one starts clean
                print(f"[Vision] Frame error: {exc}")
                traceback.print_exc()
                self.frames_skipped += 1
        print(
            f"[Vision] Frame loop stopped. processed={self.frames_processed} "
            f"skipped={self.frames_skipped}"
        )
