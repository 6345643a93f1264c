# pipeline.py
"""HSV-threshold contour extractor feeding the frame processor."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

from target_vision.config import PipelineConfig


@dataclass
class PipelineResult:
    contours: List[np.ndarray]   # int32 (N, 1, 2) convex polygons
    image: np.ndarray            # the frame that was processed (same buffer)
    process_time_ns: int


class ContourPipeline:
    def __init__(self, config: PipelineConfig):
        self.config = config
        self.hsv_lower = np.array(config.hsv_lower, dtype=np.uint8)
        self.hsv_upper = np.array(config.hsv_upper, dtype=np.uint8)

    def threshold(self, frame_bgr: np.ndarray) -> np.ndarray:
        hsv = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2HSV)
        return cv2.inRange(hsv, self.hsv_lower, self.hsv_upper)

    def filter_contours(self, contours) -> List[np.ndarray]:
        """
        Drop specks, then reduce each survivor to a convex polygon so the
        classifier sees a clean quadrilateral-ish outline.
        """
        out: List[np.ndarray] = []
        for cnt in contours:
            if cv2.contourArea(cnt) < self.config.min_area_px:
                continue
            perimeter = cv2.arcLength(cnt, True)
            if perimeter < self.config.min_perimeter_px:
                continue
            hull = cv2.convexHull(cnt)
            eps = self.config.approx_epsilon_frac * cv2.arcLength(hull, True)
            out.append(cv2.approxPolyDP(hull, eps, True))
        return out

    def process(self, frame_bgr: np.ndarray) -> PipelineResult:
        tic = time.perf_counter_ns()
        mask = self.threshold(frame_bgr)
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        filtered = self.filter_contours(contours)
        return PipelineResult(
            contours=filtered,
            image=frame_bgr,
            process_time_ns=time.perf_counter_ns() - tic,
        )
