import numpy as np
import pytest

from target_vision.common import PairRecord, Side
from target_vision.config import OutputConfig
from target_vision.output import VideoOutput
from target_vision.processor import (
    BLUE_COLOR,
    GREEN_COLOR,
    PURPLE_COLOR,
    RED_COLOR,
    FrameProcessor,
    annotate,
)
from target_vision.target import Target
from target_vision.telemetry import (
    KEY_IMAGE_CENTER_X,
    KEY_IS_ORDERED,
    KEY_POST_PROCESS_TIME,
    KEY_PROCESS_TIME,
    KEY_TARGET_PAIRS,
    MemoryTelemetry,
)


def _pixel(image, x, y):
    return tuple(int(v) for v in image[y, x])


def test_empty_frame_only_draws_center(blank_frame) -> None:
    telemetry = MemoryTelemetry()
    proc = FrameProcessor((320, 240), telemetry)
    result = proc.process([], blank_frame, 0)

    assert result.targets == []
    assert result.pairs == []
    assert result.selected is None
    assert result.is_ordered is True
    assert telemetry.get(KEY_TARGET_PAIRS) == []
    assert telemetry.get(KEY_IMAGE_CENTER_X) == 160
    assert _pixel(blank_frame, 160, 120) == GREEN_COLOR

    drawn = np.argwhere(blank_frame.any(axis=2))
    assert np.abs(drawn - [120, 160]).max() <= 5


def test_full_cycle_selects_pair_near_center(shapes, blank_frame) -> None:
    telemetry = MemoryTelemetry()
    proc = FrameProcessor((320, 240), telemetry)
    contours = [shapes.right(180), shapes.left(40), shapes.left(140), shapes.right(80)]

    result = proc.process(contours, blank_frame, 2_500_000)

    assert [t.side for t in result.targets] == [Side.LEFT, Side.RIGHT, Side.LEFT, Side.RIGHT]
    assert result.is_ordered is True
    assert len(result.pairs) == 2
    assert result.selected is result.pairs[0]
    assert result.selected.center == pytest.approx((160.0, 120.0))

    published = telemetry.get(KEY_TARGET_PAIRS)
    assert len(published) == 2
    centers = [PairRecord.from_json(s).center_x for s in published]
    assert centers == pytest.approx([160.0, 60.0])
    assert telemetry.get(KEY_PROCESS_TIME) == pytest.approx(2.5)
    assert telemetry.get(KEY_POST_PROCESS_TIME) >= 0.0
    assert telemetry.get(KEY_IS_ORDERED) is True

    # LEFT red, RIGHT blue, selection ring purple
    assert _pixel(blank_frame, 140, 120) == RED_COLOR
    assert _pixel(blank_frame, 180, 120) == BLUE_COLOR
    assert _pixel(blank_frame, 160, 110) == PURPLE_COLOR
    assert _pixel(blank_frame, 160, 120) == GREEN_COLOR


def test_unordered_frame_still_pairs(shapes, blank_frame) -> None:
    telemetry = MemoryTelemetry()
    proc = FrameProcessor((320, 240), telemetry)
    result = proc.process([shapes.left(40), shapes.left(100), shapes.right(150)], blank_frame)

    assert result.is_ordered is False
    assert telemetry.get(KEY_IS_ORDERED) is False
    assert len(result.pairs) == 1
    assert result.selected.left is result.targets[1]


def test_unknown_targets_drawn_with_right_color(shapes, blank_frame) -> None:
    target = Target(shapes.vertical(100))
    assert target.side is Side.UNKNOWN
    annotate(blank_frame, [target], (160, 120))
    assert _pixel(blank_frame, 100, 120) == BLUE_COLOR


def test_inverted_flag_flips_next_frame(shapes) -> None:
    state = {"inverted": False}
    proc = FrameProcessor((320, 240), MemoryTelemetry(), is_inverted=lambda: state["inverted"])
    contours = [shapes.left(60), shapes.right(160), shapes.left(260)]

    first = proc.process(contours, np.zeros((240, 320, 3), np.uint8))
    state["inverted"] = True
    second = proc.process(contours, np.zeros((240, 320, 3), np.uint8))

    by_x_first = {round(t.center[0]): t.side for t in first.targets}
    by_x_second = {round(t.center[0]): t.side for t in second.targets}
    assert by_x_first == {60: Side.LEFT, 160: Side.RIGHT, 260: Side.LEFT}
    assert by_x_second == {x: s.flipped() for x, s in by_x_first.items()}

    # Inverted frames are walked right-to-left, so a different strip leads the pair
    assert [round(t.center[0]) for t in second.targets] == [260, 160, 60]
    assert round(first.selected.left.center[0]) == 60
    assert round(first.selected.right.center[0]) == 160
    assert round(second.selected.left.center[0]) == 160
    assert round(second.selected.right.center[0]) == 60


def test_inverted_flag_read_once_per_frame(shapes, blank_frame) -> None:
    calls = []

    def flag() -> bool:
        calls.append(1)
        return False

    proc = FrameProcessor((320, 240), MemoryTelemetry(), is_inverted=flag)
    proc.process([shapes.left(40), shapes.right(90)], blank_frame)
    assert len(calls) == 1


def test_annotated_frame_is_handed_to_output(shapes) -> None:
    output = VideoOutput(OutputConfig(width=160, height=120))
    proc = FrameProcessor((640, 480), MemoryTelemetry(), output=output)
    frame = np.zeros((480, 640, 3), np.uint8)

    proc.process([shapes.left(300, 240), shapes.right(340, 240)], frame)

    assert output.frames_out == 1
    assert output.latest.shape == (120, 160, 3)
    assert output.latest.any()


def test_pair_record_round_trip_keeps_center(shapes) -> None:
    proc = FrameProcessor((320, 240), MemoryTelemetry())
    result = proc.process([shapes.left(101), shapes.right(157)], np.zeros((240, 320, 3), np.uint8))
    pair = result.selected
    record = PairRecord.from_json(pair.to_json())
    assert (record.center_x, record.center_y) == pair.center
    assert record == pair.to_record()
