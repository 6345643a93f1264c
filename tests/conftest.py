import math
from typing import Tuple

import numpy as np
import pytest

from target_vision.target import Target


def strip(cx: float, cy: float, lean_deg: float, length: float = 40.0, width: float = 10.0) -> np.ndarray:
    """
    Rotated rectangle as an int32 OpenCV contour. Positive ``lean_deg``
    tips the top to the right ("/"), negative to the left ("\\").
    """
    a = math.radians(lean_deg)
    ux, uy = math.sin(a), -math.cos(a)      # long axis, pointing up
    vx, vy = math.cos(a), math.sin(a)       # short axis
    hl, hw = length / 2.0, width / 2.0
    corners = [
        (cx + ux * hl + vx * hw, cy + uy * hl + vy * hw),
        (cx + ux * hl - vx * hw, cy + uy * hl - vy * hw),
        (cx - ux * hl - vx * hw, cy - uy * hl - vy * hw),
        (cx - ux * hl + vx * hw, cy - uy * hl + vy * hw),
    ]
    return np.round(np.array(corners)).astype(np.int32).reshape(-1, 1, 2)


def left_strip(cx: float, cy: float = 120.0) -> np.ndarray:
    return strip(cx, cy, 15.0)


def right_strip(cx: float, cy: float = 120.0) -> np.ndarray:
    return strip(cx, cy, -15.0)


def vertical_strip(cx: float, cy: float = 120.0) -> np.ndarray:
    return strip(cx, cy, 0.0)


class Shapes:
    strip = staticmethod(strip)
    left = staticmethod(left_strip)
    right = staticmethod(right_strip)
    vertical = staticmethod(vertical_strip)

    @staticmethod
    def targets(*specs: Tuple[str, float], inverted: bool = False):
        """``("L", 30), ("R", 80)`` -> list of Targets in the given order."""
        makers = {"L": left_strip, "R": right_strip, "U": vertical_strip}
        return [Target(makers[kind](x), inverted) for kind, x in specs]


@pytest.fixture
def shapes() -> Shapes:
    return Shapes()


@pytest.fixture
def blank_frame() -> np.ndarray:
    return np.zeros((240, 320, 3), dtype=np.uint8)
