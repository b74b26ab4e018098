# models.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
import math

from verlet_net.emitter import LineEmitter


@dataclass(frozen=True)
class PointerState:
    """Snapshot of the pointer as seen by one step."""

    x: float = 0.0
    y: float = 0.0
    px: float = 0.0
    py: float = 0.0
    down: bool = False
    influence: float = 100.0

    def moved_to(self, x: float, y: float) -> PointerState:
        return replace(self, x=x, y=y, px=self.x, py=self.y)

    def pressed(self, down: bool) -> PointerState:
        return replace(self, down=down)

    @property
    def delta(self) -> tuple[float, float]:
        return self.x - self.px, self.y - self.py

    def influences(self, x: float, y: float) -> bool:
        if not self.down:
            return False
        return math.hypot(x - self.x, y - self.y) < self.influence


class Constraint:
    """One-sided distance link between two points of an arena.

    The link never pushes its points apart; it only pulls them back once
    they are further than ``rest_length`` from each other.
    """

    __slots__ = ["p1", "p2", "rest_length"]

    def __init__(self, p1: int, p2: int, rest_length: float) -> None:
        self.p1 = p1
        self.p2 = p2
        self.rest_length = float(rest_length)

    def __repr__(self) -> str:
        return f"Constraint({self.p1}, {self.p2}, rest_length={self.rest_length})"

    def length(self, points: Sequence[Point]) -> float:
        a, b = points[self.p1], points[self.p2]
        return math.hypot(a.x - b.x, a.y - b.y)

    def resolve(self, points: Sequence[Point]) -> None:
        a = points[self.p1]
        b = points[self.p2]

        dx = a.x - b.x
        dy = a.y - b.y
        distance = math.sqrt(dx * dx + dy * dy)

        # Covers distance == 0 as long as rest_length >= 0
        if distance <= self.rest_length or not math.isfinite(distance):
            return

        diff = (self.rest_length - distance) / distance
        mul = diff * 0.5 * (1.0 - self.rest_length / distance)

        off_x = dx * mul
        off_y = dy * mul

        if a.pinned and b.pinned:
            return
        if a.pinned:
            b.x -= 2.0 * off_x
            b.y -= 2.0 * off_y
        elif b.pinned:
            a.x += 2.0 * off_x
            a.y += 2.0 * off_y
        else:
            a.x += off_x
            a.y += off_y
            b.x -= off_x
            b.y -= off_y

    def emit_line(self, points: Sequence[Point], emitter: LineEmitter) -> None:
        a, b = points[self.p1], points[self.p2]
        emitter.move_to(a.x, a.y)
        emitter.line_to(b.x, b.y)


class Point:
    def __init__(self, index: int, x: float, y: float) -> None:
        self.index = index
        self.x, self.y = float(x), float(y)
        self.px, self.py = self.x, self.y
        self.vx = 0.0
        self.vy = 0.0
        self.pin_pos: tuple[float, float] | None = None
        self.constraints: list[Constraint] = []

    def __repr__(self) -> str:
        return f"Point({self.index}, x={self.x:.3f}, y={self.y:.3f}, pinned={self.pinned})"

    @property
    def pinned(self) -> bool:
        return self.pin_pos is not None

    def pin(self) -> None:
        if self.pin_pos is None:
            self.pin_pos = (self.x, self.y)

    def _snap_to(self, pin_pos: tuple[float, float]) -> None:
        self.x, self.y = pin_pos

    def add_force(self, fx: float, fy: float) -> None:
        self.vx += fx
        self.vy += fy

    def attach(self, other: Point, rest_length: float) -> Constraint:
        constraint = Constraint(self.index, other.index, rest_length)
        self.constraints.append(constraint)
        return constraint

    def detach(self, constraint: Constraint) -> None:
        try:
            self.constraints.remove(constraint)
        except ValueError:
            raise ValueError(f"{constraint!r} is not attached to point {self.index}") from None

    def integrate(
        self,
        delta_sq: float,
        friction: float,
        gravity: float,
        pointer: PointerState | None = None,
    ) -> None:
        """Advance one Verlet step. Forces accumulated so far are consumed."""
        if self.pin_pos is not None:
            self._snap_to(self.pin_pos)
            return

        # Dragging: pretend the point moved by the pointer's last delta
        if pointer is not None and pointer.influences(self.x, self.y):
            mdx, mdy = pointer.delta
            self.px = self.x - mdx
            self.py = self.y - mdy

        self.add_force(0.0, gravity)

        nx = self.x + (self.x - self.px) * friction + self.vx * delta_sq
        ny = self.y + (self.y - self.py) * friction + self.vy * delta_sq

        self.px, self.py = self.x, self.y
        self.x, self.y = nx, ny

        self.vx = self.vy = 0.0

    def resolve_constraints(self, points: Sequence[Point]) -> None:
        if self.pin_pos is not None:
            self._snap_to(self.pin_pos)
            return
        for constraint in self.constraints:
            constraint.resolve(points)

    def emit_lines(self, points: Sequence[Point], emitter: LineEmitter) -> None:
        for constraint in self.constraints:
            constraint.emit_line(points, emitter)
