# net.py
"""
Object-model net: a list of Points used as an arena, links addressed by
integer handle, advanced one frame at a time by ``step``.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from verlet_net.config import NetConfig
from verlet_net.emitter import LineEmitter
from verlet_net.mesh.grid import generate_grid
from verlet_net.models import Constraint, Point, PointerState
from verlet_net.types import MASK, POSITIONS

logger = logging.getLogger(__name__)


class Net:
    def __init__(self, config: NetConfig | None = None) -> None:
        self.config = config or NetConfig()
        self.points: list[Point] = []
        self.reset()

    def reset(self) -> None:
        """Rebuild the grid in its initial, unstretched layout."""
        cfg = self.config
        self.points = generate_grid(
            cols=cfg.cols,
            rows=cfg.rows,
            spacing=cfg.spacing,
            origin=cfg.origin,
            strand_rows=cfg.strand_rows,
        )
        self.is_exploded = False
        self.steps_stable = 0

    @property
    def cols(self) -> int:
        return self.config.cols

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def constraints(self) -> list[Constraint]:
        return [c for p in self.points for c in p.constraints]

    def positions(self) -> POSITIONS:
        return np.array([[p.x, p.y] for p in self.points], dtype=np.float64).reshape(-1, 2)

    def pinned_mask(self) -> MASK:
        return np.array([p.pinned for p in self.points], dtype=np.bool_)

    def add_force(self, index: int, fx: float, fy: float) -> None:
        if not 0 <= index < len(self.points):
            raise IndexError(f"point index {index} out of range")
        self.points[index].add_force(fx, fy)

    def relax(self) -> None:
        """Run ``accuracy`` full resolve passes over every point."""
        points = self.points
        for _ in range(self.config.accuracy):
            for point in points:
                point.resolve_constraints(points)

    def draw(self, emitter: LineEmitter) -> None:
        """Emit the current frame without advancing the simulation."""
        emitter.clear()
        emitter.begin_frame()
        for point in self.points:
            point.emit_lines(self.points, emitter)
        emitter.stroke_all(self.config.line_width)

    def step(
        self,
        delta: float,
        pointer: PointerState | None = None,
        emitter: LineEmitter | None = None,
    ) -> float:
        """
        Advance the net by one frame and emit its segments.

        Returns the largest distance any point moved during the frame.
        """
        if self.is_exploded:
            return 0.0

        cfg = self.config
        if emitter is not None:
            emitter.clear()
            emitter.begin_frame()

        old = self.positions()

        self.relax()

        delta_sq = delta * delta
        points = self.points
        for point in points:
            point.integrate(delta_sq, cfg.friction, cfg.gravity, pointer)
            if emitter is not None:
                point.emit_lines(points, emitter)

        if emitter is not None:
            emitter.stroke_all(cfg.line_width)

        return self._check(old)

    def run(
        self,
        frames: int,
        delta: float | None = None,
        pointer: PointerState | None = None,
        emitter: LineEmitter | None = None,
    ) -> float:
        """Host-style driver: call ``step`` ``frames`` times at a fixed delta."""
        delta = self.config.delta if delta is None else delta
        displacement = 0.0
        for _ in range(frames):
            displacement = self.step(delta, pointer, emitter)
            if self.is_exploded:
                break
        return displacement

    def _check(self, old: POSITIONS) -> float:
        pos = self.positions()
        if not np.isfinite(pos).all():
            self.is_exploded = True
            logger.error(
                "Net became unstable after %d stable steps; freezing simulation",
                self.steps_stable,
            )
            return math.inf

        self.steps_stable += 1
        if self.steps_stable % 600 == 0:
            logger.debug("Stable for %d steps", self.steps_stable)

        if len(pos) == 0:
            return 0.0
        return float(np.max(np.hypot(*(pos - old).T)))
