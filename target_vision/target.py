# target.py
"""One strip of retro-reflective tape, classified as the left or right half
of a target pair from the direction its contour leans."""
from __future__ import annotations

import math
from typing import Any, Tuple

import cv2
import numpy as np

from target_vision.common import Side
from target_vision.config import TargetConfig

Point = Tuple[float, float]


def as_points(contour: Any) -> np.ndarray:
    """Coerce an OpenCV contour / point list into a float ``(N, 2)`` array.

    Anything that can't be read as 2-D points comes back empty.
    """
    try:
        pts = np.array(contour, dtype=np.float64)
        if pts.size == 0:
            return np.empty((0, 2), dtype=np.float64)
        # (N, 2) and OpenCV (N, 1, 2) keep their pairs; flat input must pair up
        if pts.ndim > 1 and pts.shape[-1] != 2:
            return np.empty((0, 2), dtype=np.float64)
        return pts.reshape(-1, 2)
    except (TypeError, ValueError):
        return np.empty((0, 2), dtype=np.float64)


class Target:
    """
    Immutable per-frame detection.

    ``side`` is fixed at construction from the contour shape and the
    camera-inverted flag; nothing carries over between frames.
    """

    def __init__(
        self,
        contour: Any,
        inverted: bool = False,
        cfg: TargetConfig | None = None,
    ) -> None:
        self._cfg = cfg or TargetConfig()
        self._points = as_points(contour)
        self._points.setflags(write=False)
        self._inverted = bool(inverted)

        moments = self._moments()
        self._center = self._centroid(moments)
        self._min_x = self._leftmost()
        side = self._classify(moments)
        self._side = side.flipped() if self._inverted else side

    # ------------------------------------------------------------------ #
    #   I N T E R N A L   H E L P E R S
    # ------------------------------------------------------------------ #
    def _moments(self) -> dict | None:
        pts = self._points
        if len(pts) < 3 or not np.all(np.isfinite(pts)):
            return None
        try:
            return cv2.moments(pts.reshape(-1, 1, 2).astype(np.float32))
        except cv2.error:
            return None

    def _centroid(self, m: dict | None) -> Point:
        if m is not None and abs(m["m00"]) > 1e-9:
            return (m["m10"] / m["m00"], m["m01"] / m["m00"])
        if len(self._points) == 0:
            return (0.0, 0.0)
        cx, cy = self._points.mean(axis=0)
        return (float(cx), float(cy))

    def _leftmost(self) -> Point:
        if len(self._points) == 0:
            return (0.0, 0.0)
        # argmin keeps the first vertex on ties
        i = int(np.argmin(self._points[:, 0]))
        return (float(self._points[i, 0]), float(self._points[i, 1]))

    def _classify(self, m: dict | None) -> Side:
        """
        Side from the major axis of the contour's second moments.

        Image y grows downwards, so a strip leaning "/" has a negative
        major-axis angle and is the LEFT half; "\\" is the RIGHT half.
        """
        if m is None or abs(m["m00"]) <= 1e-9:
            return Side.UNKNOWN

        mu20, mu02, mu11 = m["mu20"], m["mu02"], m["mu11"]
        half_trace = (mu20 + mu02) / 2.0
        spread = math.hypot((mu20 - mu02) / 2.0, mu11)
        major = half_trace + spread
        minor = half_trace - spread
        if not (major > 0.0):
            return Side.UNKNOWN
        if minor > 0.0 and math.sqrt(major / minor) < self._cfg.min_elongation:
            return Side.UNKNOWN  # blob too round/square to have a lean

        theta = math.degrees(0.5 * math.atan2(2.0 * mu11, mu20 - mu02))
        tilt_from_vertical = 90.0 - abs(theta)
        # Near vertical or near horizontal the lean sign is noise
        if tilt_from_vertical < self._cfg.min_skew_deg or abs(theta) < self._cfg.min_skew_deg:
            return Side.UNKNOWN
        if theta < 0.0:
            return Side.LEFT
        if theta > 0.0:
            return Side.RIGHT
        return Side.UNKNOWN

    # ------------------------------------------------------------------ #
    #   P U B L I C   A P I
    # ------------------------------------------------------------------ #
    @property
    def side(self) -> Side:
        return self._side

    @property
    def inverted(self) -> bool:
        return self._inverted

    @property
    def min_x(self) -> Point:
        """Leftmost vertex, the sort key for ordering targets."""
        return self._min_x

    @property
    def center(self) -> Point:
        return self._center

    @property
    def points(self) -> np.ndarray:
        return self._points

    def to_contour(self) -> np.ndarray:
        """int32 ``(N, 1, 2)`` array suitable for OpenCV drawing calls."""
        return np.round(self._points).astype(np.int32).reshape(-1, 1, 2)

    def __repr__(self) -> str:
        return (
            f"Target(side={self._side.name}, min_x=({self._min_x[0]:.1f}, "
            f"{self._min_x[1]:.1f}), n={len(self._points)})"
        )


def classify(contour: Any, inverted: bool = False, cfg: TargetConfig | None = None) -> Target:
    """Build a :class:`Target` from one contour. Never raises."""
    return Target(contour, inverted, cfg)
