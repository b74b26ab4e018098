"""
Verlet Net Simulation Package

A hanging net of mass points pinned along its top row, advanced with
position-based Verlet integration and iterative distance-constraint
relaxation, and draggable with a pointer.
"""

from .config import NetConfig
from .emitter import LineEmitter, SegmentRecorder
from .models import Constraint, Point, PointerState
from .net import Net

__version__ = "0.1.0"

__all__ = [
    "NetConfig",
    "LineEmitter",
    "SegmentRecorder",
    "Point",
    "Constraint",
    "PointerState",
    "Net",
]
