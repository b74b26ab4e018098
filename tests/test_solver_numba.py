import numpy as np
import pytest

from verlet_net.config import NetConfig
from verlet_net.emitter import SegmentRecorder
from verlet_net.models import PointerState
from verlet_net.net import Net
from verlet_net.solver_numba import NumbaNetSolver

SMALL = NetConfig(cols=3, rows=4, accuracy=20)


def drag_sequence(net):
    """A pointer that grabs the bottom corner and swings it right for a while."""
    corner = net.points[-1]
    pointer = PointerState(x=corner.x, y=corner.y, influence=40.0).pressed(True)
    frames = []
    for i in range(30):
        pointer = pointer.moved_to(pointer.x + 3.0, pointer.y + (1.0 if i % 2 else -1.0))
        frames.append(pointer)
    frames.extend([None] * 30)
    return frames


def test_matches_object_model():
    net = Net(SMALL)
    solver = NumbaNetSolver(Net(SMALL))

    for pointer in drag_sequence(net):
        net.step(SMALL.delta, pointer)
        solver.step(SMALL.delta, pointer)

    np.testing.assert_allclose(solver.positions(), net.positions(), rtol=1e-9, atol=1e-9)


def test_emits_same_segments_as_object_model():
    net = Net()
    solver = NumbaNetSolver(Net())
    rec_net, rec_solver = SegmentRecorder(), SegmentRecorder()

    for _ in range(5):
        net.step(0.02, emitter=rec_net)
        solver.step(0.02, emitter=rec_solver)

    assert rec_solver.frames == rec_net.frames == 5
    assert rec_solver.line_width == rec_net.line_width
    np.testing.assert_allclose(rec_solver.segments, rec_net.segments, rtol=1e-9, atol=1e-9)


def test_default_net_sags_and_settles():
    net = Net()
    start = net.positions()
    mask = net.pinned_mask()
    solver = NumbaNetSolver(net)

    solver.run(3000)
    settled = solver.positions()

    np.testing.assert_array_equal(settled[mask], start[mask])
    assert np.all(settled[~mask, 1] > start[~mask, 1])
    assert solver.step(0.02) < 1e-3


def test_write_back_updates_points():
    net = Net(SMALL)
    solver = NumbaNetSolver(net)
    solver.run(10)
    solver.write_back()
    np.testing.assert_array_equal(net.positions(), solver.positions())


def test_add_force_and_bounds():
    solver = NumbaNetSolver(Net(SMALL))
    before = solver.positions()
    solver.add_force(len(before) - 1, 1e5, 0.0)
    solver.step(SMALL.delta)
    assert solver.positions()[-1, 0] > before[-1, 0]
    assert np.all(solver.force == 0.0)

    for bad in (-1, len(before)):
        with pytest.raises(IndexError):
            solver.add_force(bad, 1.0, 1.0)


def test_explosion_freezes_solver():
    solver = NumbaNetSolver(Net(SMALL))
    solver.pos[-1, 0] = np.inf
    solver.step(SMALL.delta)
    assert solver.is_exploded
    assert solver.step(SMALL.delta) == 0.0
