import pytest

from verlet_net.emitter import SegmentRecorder


def test_recorder_collects_one_frame():
    rec = SegmentRecorder()
    rec.clear()
    rec.begin_frame()
    rec.move_to(0.0, 0.0)
    rec.line_to(1.0, 2.0)
    rec.move_to(5.0, 5.0)
    rec.line_to(6.0, 5.0)
    rec.stroke_all(4.0)

    assert rec.clears == 1
    assert rec.frames == 1
    assert rec.line_width == 4.0
    assert rec.segments.tolist() == [[[0.0, 0.0], [1.0, 2.0]], [[5.0, 5.0], [6.0, 5.0]]]


def test_begin_frame_drops_previous_segments():
    rec = SegmentRecorder()
    rec.begin_frame()
    rec.move_to(0.0, 0.0)
    rec.line_to(1.0, 1.0)
    rec.stroke_all(1.0)

    rec.begin_frame()
    rec.stroke_all(1.0)
    assert rec.segments.shape == (0, 2, 2)
    assert rec.frames == 2


def test_line_to_requires_move_to():
    rec = SegmentRecorder()
    rec.begin_frame()
    with pytest.raises(RuntimeError):
        rec.line_to(1.0, 1.0)
