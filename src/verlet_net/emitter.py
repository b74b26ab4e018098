# emitter.py
"""
Line output seam between the simulation and whatever draws it.

The net only ever talks to a ``LineEmitter``; the moderngl renderer is one
implementation, ``SegmentRecorder`` is the headless one used by tests and
``--frames`` runs.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from verlet_net.types import SEGMENTS


class LineEmitter(Protocol):
    def clear(self) -> None: ...

    def begin_frame(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def stroke_all(self, line_width: float) -> None: ...


class SegmentRecorder:
    """Collects the segments of each frame into a numpy array."""

    def __init__(self) -> None:
        self.frames = 0
        self.clears = 0
        self.line_width: float | None = None
        self.segments: SEGMENTS = np.empty((0, 2, 2), dtype=np.float64)
        self._pending: list[tuple[float, float, float, float]] = []
        self._cursor: tuple[float, float] | None = None

    def clear(self) -> None:
        self.clears += 1

    def begin_frame(self) -> None:
        self._pending = []
        self._cursor = None

    def move_to(self, x: float, y: float) -> None:
        self._cursor = (x, y)

    def line_to(self, x: float, y: float) -> None:
        if self._cursor is None:
            raise RuntimeError("line_to() called before move_to()")
        x0, y0 = self._cursor
        self._pending.append((x0, y0, x, y))
        self._cursor = (x, y)

    def stroke_all(self, line_width: float) -> None:
        self.line_width = line_width
        self.segments = np.array(self._pending, dtype=np.float64).reshape(-1, 2, 2)
        self._pending = []
        self.frames += 1
