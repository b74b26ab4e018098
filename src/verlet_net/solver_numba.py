# solver_numba.py
"""
Array-backed solver with numba kernels.

Reproduces the object model of ``Net`` (same ordering, same arithmetic) on
flat numpy arrays so that large nets stay interactive.
"""

from __future__ import annotations

import logging
import math

from numba import njit, prange  # type: ignore
import numpy as np

from verlet_net.emitter import LineEmitter
from verlet_net.models import PointerState
from verlet_net.net import Net
from verlet_net.types import INDEX, MASK, POSITIONS

logger = logging.getLogger(__name__)

# ===============================
# PHYSICS KERNELS
# ===============================


@njit(cache=True)  # type: ignore
def relax_constraints(
    pos: POSITIONS,
    pinned_mask: MASK,
    pin_pos: POSITIONS,
    con_start: INDEX,
    con_other: INDEX,
    rest_lengths: POSITIONS,
    iterations: int,
) -> None:
    """
    Gauss-Seidel relaxation of one-sided distance links.

    Links are stored CSR style: the links owned by point ``i`` are
    ``con_start[i]:con_start[i + 1]``. Must stay sequential, every link
    reads positions written by the previous one.
    """
    n = len(pos)
    for _ in range(iterations):
        for i in range(n):
            if pinned_mask[i]:
                pos[i, 0] = pin_pos[i, 0]
                pos[i, 1] = pin_pos[i, 1]
                continue

            for k in range(con_start[i], con_start[i + 1]):
                j = con_other[k]
                rest = rest_lengths[k]

                dx = pos[i, 0] - pos[j, 0]
                dy = pos[i, 1] - pos[j, 1]
                distance = math.sqrt(dx * dx + dy * dy)

                if distance <= rest or not math.isfinite(distance):
                    continue

                diff = (rest - distance) / distance
                mul = diff * 0.5 * (1.0 - rest / distance)

                off_x = dx * mul
                off_y = dy * mul

                if pinned_mask[j]:
                    pos[i, 0] += 2.0 * off_x
                    pos[i, 1] += 2.0 * off_y
                else:
                    pos[i, 0] += off_x
                    pos[i, 1] += off_y
                    pos[j, 0] -= off_x
                    pos[j, 1] -= off_y


@njit(cache=True, parallel=True)  # type: ignore
def integrate_verlet(
    pos: POSITIONS,
    prev_pos: POSITIONS,
    force: POSITIONS,
    pinned_mask: MASK,
    pin_pos: POSITIONS,
    gravity: float,
    friction: float,
    delta_sq: float,
    mouse_x: float,
    mouse_y: float,
    mouse_dx: float,
    mouse_dy: float,
    mouse_down: bool,
    influence: float,
) -> None:
    """Verlet integration with pointer drag. Points are independent here."""
    for i in prange(len(pos)):
        if pinned_mask[i]:
            pos[i, 0] = pin_pos[i, 0]
            pos[i, 1] = pin_pos[i, 1]
            continue

        if mouse_down:
            if math.hypot(pos[i, 0] - mouse_x, pos[i, 1] - mouse_y) < influence:
                prev_pos[i, 0] = pos[i, 0] - mouse_dx
                prev_pos[i, 1] = pos[i, 1] - mouse_dy

        fx = force[i, 0]
        fy = force[i, 1] + gravity

        nx = pos[i, 0] + (pos[i, 0] - prev_pos[i, 0]) * friction + fx * delta_sq
        ny = pos[i, 1] + (pos[i, 1] - prev_pos[i, 1]) * friction + fy * delta_sq

        prev_pos[i, 0] = pos[i, 0]
        prev_pos[i, 1] = pos[i, 1]
        pos[i, 0] = nx
        pos[i, 1] = ny

        force[i, 0] = 0.0
        force[i, 1] = 0.0


# ===============================
# SOLVER CLASS
# ===============================


class NumbaNetSolver:
    """
    Flat-array twin of a ``Net``:
    - positions, previous positions and forces as (N, 2) arrays
    - links as a CSR table keyed by owning point
    - explosion detection that freezes the solver
    """

    def __init__(self, net: Net) -> None:
        self.net = net
        self.config = net.config
        points = net.points

        self.pos = np.array([[p.x, p.y] for p in points], dtype=np.float64).reshape(-1, 2)
        self.prev_pos = np.array([[p.px, p.py] for p in points], dtype=np.float64).reshape(-1, 2)
        self.force = np.array([[p.vx, p.vy] for p in points], dtype=np.float64).reshape(-1, 2)

        self.pinned_mask = np.array([p.pinned for p in points], dtype=np.bool_)
        self.pin_pos = self.pos.copy()
        for i, p in enumerate(points):
            if p.pin_pos is not None:
                self.pin_pos[i] = p.pin_pos

        counts = [len(p.constraints) for p in points]
        self.con_start = np.zeros(len(points) + 1, dtype=np.int32)
        self.con_start[1:] = np.cumsum(counts, dtype=np.int32)
        links = [c for p in points for c in p.constraints]
        self.con_owner = np.array([c.p1 for c in links], dtype=np.int32)
        self.con_other = np.array([c.p2 for c in links], dtype=np.int32)
        self.rest_lengths = np.array([c.rest_length for c in links], dtype=np.float64)

        self.is_exploded = False
        self.steps_stable = 0

        logger.info(
            "Solver initialized: %d points, %d constraints, %d relaxation passes",
            len(points),
            len(links),
            self.config.accuracy,
        )

    def positions(self) -> POSITIONS:
        return self.pos.copy()

    def add_force(self, index: int, fx: float, fy: float) -> None:
        if not 0 <= index < len(self.pos):
            raise IndexError(f"point index {index} out of range")
        self.force[index, 0] += fx
        self.force[index, 1] += fy

    def write_back(self) -> None:
        """Copy array state into the Points of the source net."""
        for i, p in enumerate(self.net.points):
            p.x, p.y = float(self.pos[i, 0]), float(self.pos[i, 1])
            p.px, p.py = float(self.prev_pos[i, 0]), float(self.prev_pos[i, 1])
            p.vx, p.vy = float(self.force[i, 0]), float(self.force[i, 1])

    def emit_lines(self, emitter: LineEmitter) -> None:
        pos = self.pos
        for a, b in zip(self.con_owner, self.con_other):
            emitter.move_to(float(pos[a, 0]), float(pos[a, 1]))
            emitter.line_to(float(pos[b, 0]), float(pos[b, 1]))

    def draw(self, emitter: LineEmitter) -> None:
        emitter.clear()
        emitter.begin_frame()
        self.emit_lines(emitter)
        emitter.stroke_all(self.config.line_width)

    def step(
        self,
        delta: float,
        pointer: PointerState | None = None,
        emitter: LineEmitter | None = None,
    ) -> float:
        """Update simulation by one frame. Same contract as ``Net.step``."""
        if self.is_exploded:
            return 0.0

        cfg = self.config
        if emitter is not None:
            emitter.clear()
            emitter.begin_frame()

        old_pos = self.pos.copy()

        relax_constraints(
            self.pos,
            self.pinned_mask,
            self.pin_pos,
            self.con_start,
            self.con_other,
            self.rest_lengths,
            cfg.accuracy,
        )

        if pointer is None:
            pointer = PointerState(down=False)
        mouse_dx, mouse_dy = pointer.delta
        integrate_verlet(
            self.pos,
            self.prev_pos,
            self.force,
            self.pinned_mask,
            self.pin_pos,
            float(cfg.gravity),
            float(cfg.friction),
            delta * delta,
            float(pointer.x),
            float(pointer.y),
            float(mouse_dx),
            float(mouse_dy),
            bool(pointer.down),
            float(pointer.influence),
        )

        if emitter is not None:
            self.emit_lines(emitter)
            emitter.stroke_all(cfg.line_width)

        if not np.isfinite(self.pos).all():
            self.is_exploded = True
            logger.error(
                "Solver became unstable after %d stable steps; freezing simulation",
                self.steps_stable,
            )
            return math.inf

        self.steps_stable += 1
        if self.steps_stable % 600 == 0:
            logger.debug("Stable for %d steps", self.steps_stable)

        if len(self.pos) == 0:
            return 0.0
        return float(np.max(np.hypot(*(self.pos - old_pos).T)))

    def run(
        self,
        frames: int,
        delta: float | None = None,
        pointer: PointerState | None = None,
        emitter: LineEmitter | None = None,
    ) -> float:
        delta = self.config.delta if delta is None else delta
        displacement = 0.0
        for _ in range(frames):
            displacement = self.step(delta, pointer, emitter)
            if self.is_exploded:
                break
        return displacement
