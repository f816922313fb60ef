"""
World state for the tactical decision engine.

This module provides:
- Board: terrain grid and geometry
- TurnSnapshot: read-only per-turn view of all agents
"""

from .board import Board, NEIGHBOR_OFFSETS
from .snapshot import TurnSnapshot

__all__ = [
    "Board",
    "NEIGHBOR_OFFSETS",
    "TurnSnapshot",
]
