# pairing.py
"""Ordering, alternation check, pair formation and best-pair selection.

Every sort here has an explicit tie-break on the position an item came in
(contour order for targets, scan order for pairs), so results never depend
on incidental sort stability.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from target_vision.common import Side
from target_vision.target import Target
from target_vision.target_pair import TargetPair


def sort_targets(targets: Sequence[Target], inverted: bool = False) -> List[Target]:
    """
    Order targets by the x of their leftmost vertex: ascending normally,
    descending when the camera is mounted upside down so the first element
    is always the physical leading edge. Equal x keeps contour order.
    """
    sign = -1.0 if inverted else 1.0
    order = sorted(
        range(len(targets)),
        key=lambda i: (sign * targets[i].min_x[0], i),
    )
    return [targets[i] for i in order]


def validate_alternation(targets: Sequence[Target]) -> bool:
    """True when sides strictly alternate along the sorted targets."""
    if len(targets) < 2:
        return True
    side = targets[0].side
    for target in targets[1:]:
        if target.side is side or target.side is Side.UNKNOWN:
            return False
        side = target.side
    return True


def form_pairs(targets: Sequence[Target]) -> List[TargetPair]:
    """
    Greedy scan of sorted targets: a LEFT immediately followed by a RIGHT
    becomes a pair and both are consumed. Pairs come out in scan order.
    """
    pairs: List[TargetPair] = []
    i = 0
    while i < len(targets) - 1:
        current, nxt = targets[i], targets[i + 1]
        if current.side is Side.LEFT and nxt.side is Side.RIGHT:
            pairs.append(TargetPair(current, nxt))
            i += 2
        else:
            i += 1
    return pairs


def rank_pairs(pairs: Sequence[TargetPair], image_center_x: float) -> List[TargetPair]:
    """
    Pairs by horizontal distance of their center from the image center,
    nearest first. Equal distances keep scan order (earlier pair first).
    """
    order = sorted(
        range(len(pairs)),
        key=lambda i: (abs(pairs[i].center[0] - image_center_x), i),
    )
    return [pairs[i] for i in order]


def select_best(pairs: Sequence[TargetPair], image_center_x: float) -> Optional[TargetPair]:
    """Pair nearest the image center, or ``None`` when nothing paired."""
    if not pairs:
        return None
    return rank_pairs(pairs, image_center_x)[0]
