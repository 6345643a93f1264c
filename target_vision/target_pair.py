# target_pair.py
"""A LEFT strip and the RIGHT strip next to it, taken as one physical target."""
from __future__ import annotations

from typing import Tuple

from target_vision.common import PairRecord, Side
from target_vision.target import Target


class TargetPair:
    def __init__(self, left: Target, right: Target) -> None:
        if left.side is not Side.LEFT or right.side is not Side.RIGHT:
            raise ValueError(
                f"pair needs (LEFT, RIGHT), got ({left.side.name}, {right.side.name})"
            )
        self.left = left
        self.right = right
        lx, ly = left.center
        rx, ry = right.center
        self._center = ((lx + rx) / 2.0, (ly + ry) / 2.0)

    @property
    def center(self) -> Tuple[float, float]:
        """Midpoint of the two strips' centroids."""
        return self._center

    def to_record(self) -> PairRecord:
        return PairRecord(
            center_x=self._center[0],
            center_y=self._center[1],
            left_x=self.left.center[0],
            left_y=self.left.center[1],
            right_x=self.right.center[0],
            right_y=self.right.center[1],
            left_min_x=self.left.min_x[0],
            right_min_x=self.right.min_x[0],
        )

    def to_json(self) -> str:
        return self.to_record().to_json()

    def __repr__(self) -> str:
        return f"TargetPair(center=({self._center[0]:.1f}, {self._center[1]:.1f}))"
