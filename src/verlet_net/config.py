# config.py
"""Fixed tunables for a net. Values mirror the classic canvas demo."""

from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class NetConfig:
    accuracy: int = 100  # relaxation passes per step
    gravity: float = 1000.0
    cols: int = 6
    rows: int = 8
    spacing: float = 50.0
    friction: float = 0.95
    influence: float = 100.0  # pointer drag radius
    delta: float = 0.02  # nominal seconds per frame
    width: int = 1100
    height: int = 1100
    line_width: float = 4.0
    strand_rows: int = 2  # rows 0..strand_rows get no horizontal links

    def __post_init__(self) -> None:
        for name in ("gravity", "spacing", "friction", "influence", "delta", "line_width"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.accuracy < 1:
            raise ValueError("accuracy must be >= 1")
        if self.cols < 0 or self.rows < 0:
            raise ValueError("cols and rows must be >= 0")
        if self.spacing <= 0:
            raise ValueError("spacing must be positive")
        if not 0.0 <= self.friction <= 1.0:
            raise ValueError("friction must be in the range [0, 1]")
        if self.influence < 0:
            raise ValueError("influence must be >= 0")
        if self.delta <= 0:
            raise ValueError("delta must be positive")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.line_width <= 0:
            raise ValueError("line_width must be positive")
        if self.strand_rows < 0:
            raise ValueError("strand_rows must be >= 0")

    @property
    def origin(self) -> tuple[float, float]:
        """Top-left point of the grid, centred on the drawing surface."""
        return (
            self.width / 2 - self.cols * self.spacing / 2,
            self.height / 2 - self.rows * self.spacing / 2,
        )

    @property
    def point_count(self) -> int:
        return (self.cols + 1) * (self.rows + 1)

    @property
    def expected_constraint_count(self) -> int:
        vertical = (self.cols + 1) * self.rows
        linked_rows = max(0, self.rows - self.strand_rows)
        horizontal = self.cols * linked_rows
        return vertical + horizontal
