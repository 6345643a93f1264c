# common.py
"""Objects that are shared across multiple modules."""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum


class Side(Enum):
    """Which half of a target pair a strip of tape represents."""
    LEFT = "left"
    RIGHT = "right"
    UNKNOWN = "unknown"

    def flipped(self) -> "Side":
        if self is Side.LEFT:
            return Side.RIGHT
        if self is Side.RIGHT:
            return Side.LEFT
        return Side.UNKNOWN


# Dashboard field names, in the order they are serialised
_RECORD_KEYS = (
    ("center_x", "centerX"),
    ("center_y", "centerY"),
    ("left_x", "leftX"),
    ("left_y", "leftY"),
    ("right_x", "rightX"),
    ("right_y", "rightY"),
    ("left_min_x", "leftMinX"),
    ("right_min_x", "rightMinX"),
)


@dataclass(frozen=True)
class PairRecord:
    """
    Flat telemetry record of one target pair.
    All coordinates are in *pixel* space of the source frame.
    """
    center_x: float
    center_y: float
    left_x: float
    left_y: float
    right_x: float
    right_y: float
    left_min_x: float
    right_min_x: float

    def to_json(self) -> str:
        return json.dumps(
            {wire: getattr(self, attr) for attr, wire in _RECORD_KEYS},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, text: str) -> "PairRecord":
        data = json.loads(text)
        return cls(**{attr: float(data[wire]) for attr, wire in _RECORD_KEYS})
