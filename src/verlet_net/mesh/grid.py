# grid.py
"""
Grid topology for the hanging net:
1. Row 0 pinned (the rail the net hangs from)
2. Vertical links everywhere below the rail
3. Horizontal links only below the strand rows, so the top hangs as loose strands
"""

import logging

from verlet_net.models import Point

logger = logging.getLogger(__name__)


def generate_grid(
    cols: int = 6,
    rows: int = 8,
    spacing: float = 50.0,
    origin: tuple[float, float] = (0.0, 0.0),
    strand_rows: int = 2,
) -> list[Point]:
    """
    Lay out a (cols + 1) x (rows + 1) grid of points in row-major order.

    Each point links to its left neighbour (when below the strand rows) and
    then to the point above it. Every link gets ``spacing`` as rest length.

    Args:
        cols: Number of cells across (points per row is cols + 1)
        rows: Number of cells down (point rows is rows + 1)
        spacing: Distance between neighbouring points
        origin: Position of the top-left point
        strand_rows: Rows 0..strand_rows are left without horizontal links

    Returns:
        The points; constraints hang off each point's ``constraints`` list
    """
    start_x, start_y = origin
    points: list[Point] = []

    for y in range(rows + 1):
        for x in range(cols + 1):
            point = Point(len(points), start_x + x * spacing, start_y + y * spacing)

            if y == 0:
                point.pin()

            if x != 0 and y > strand_rows:
                point.attach(points[-1], spacing)

            if y != 0:
                point.attach(points[x + (y - 1) * (cols + 1)], spacing)

            points.append(point)

    constraint_count = sum(len(p.constraints) for p in points)
    pinned_count = sum(1 for p in points if p.pinned)
    logger.info(
        "Generated grid: %d points (%d pinned), %d constraints",
        len(points),
        pinned_count,
        constraint_count,
    )
    return points
