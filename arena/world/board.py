"""
Board - Spatial logic for the arena.

The Board handles:
- Coordinate validation
- Terrain lookups and walkability
- Distance calculations
- Neighbour enumeration

Coordinate System:
- X increases to the RIGHT
- Y increases DOWNWARD (the match feed's convention)
- Origin (0, 0) is at TOP-LEFT
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.types import GridPos, TerrainType
from ..mechanics.combat import manhattan

# Neighbour order used for tie-breaking: cardinal first, then diagonals.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (-1, 1), (1, -1), (-1, -1),
)


class Board:
    """
    An immutable 2D terrain grid (Y+ = DOWN).

    Provides spatial queries without any agent state.

    Attributes:
        width: Board width (X dimension)
        height: Board height (Y dimension)
    """

    def __init__(self, width: int, height: int, terrain: Optional[Dict[GridPos, TerrainType]] = None):
        """
        Initialize a board.

        Args:
            width: Board width (must be positive)
            height: Board height (must be positive)
            terrain: Sparse mapping of non-open tiles; missing tiles are OPEN

        Raises:
            ValueError: If dimensions are invalid or a terrain tile is out of bounds
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive: {width}x{height}")

        self.width = width
        self.height = height
        self._terrain: Dict[GridPos, TerrainType] = {}

        for pos, kind in (terrain or {}).items():
            if not self.in_bounds(pos):
                raise ValueError(f"Terrain tile {pos} outside {self}")
            if kind.is_cover:
                self._terrain[pos] = kind

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> Board:
        """
        Build a board from a row-major list of tile codes (rows[y][x]).

        Args:
            rows: Non-empty rectangular list of rows with codes 0, 1, 2

        Returns:
            Board instance
        """
        if not rows or not rows[0]:
            raise ValueError("Board rows must be non-empty")
        width = len(rows[0])
        terrain: Dict[GridPos, TerrainType] = {}
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has {len(row)} tiles, expected {width}")
            for x, code in enumerate(row):
                terrain[(x, y)] = TerrainType(code)
        return cls(width, len(rows), terrain)

    # ------------------------------------------------------------------
    # Terrain
    # ------------------------------------------------------------------
    def in_bounds(self, pos: GridPos) -> bool:
        """
        Check if a position is within board boundaries.

        Args:
            pos: Position to check (x, y)

        Returns:
            True if position is valid, False otherwise
        """
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def terrain_at(self, pos: GridPos) -> TerrainType:
        """Terrain of a tile; out-of-bounds tiles raise ValueError."""
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} outside {self}")
        return self._terrain.get(pos, TerrainType.OPEN)

    def is_walkable(self, pos: GridPos) -> bool:
        """In-bounds and not a cover tile."""
        return self.in_bounds(pos) and not self.terrain_at(pos).is_cover

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def clamp(self, pos: GridPos) -> GridPos:
        """Clamp a position onto the board."""
        x = min(max(pos[0], 0), self.width - 1)
        y = min(max(pos[1], 0), self.height - 1)
        return (x, y)

    def get_neighbors(self, pos: GridPos, include_diagonals: bool = True) -> List[GridPos]:
        """
        Get in-bounds neighbouring positions (4 or 8 directions).

        Args:
            pos: Center position
            include_diagonals: If True, include diagonal neighbours (8 total)

        Returns:
            List of in-bounds neighbours in NEIGHBOR_OFFSETS order
        """
        x, y = pos
        offsets = NEIGHBOR_OFFSETS if include_diagonals else NEIGHBOR_OFFSETS[:4]
        return [(x + dx, y + dy) for dx, dy in offsets if self.in_bounds((x + dx, y + dy))]

    def positions_within(self, center: GridPos, radius: int) -> List[GridPos]:
        """
        All in-bounds positions within a Chebyshev radius, excluding the center.

        Positions are ordered by Manhattan distance from the center, then by (y, x).
        """
        cx, cy = center
        positions = []
        for y in range(max(0, cy - radius), min(self.height, cy + radius + 1)):
            for x in range(max(0, cx - radius), min(self.width, cx + radius + 1)):
                if (x, y) != center:
                    positions.append((x, y))
        positions.sort(key=lambda p: (manhattan(center, p), p[1], p[0]))
        return positions

    def step_toward(self, start: GridPos, goal: GridPos) -> GridPos:
        """One king-move step from start toward goal (start itself if equal)."""
        dx = (goal[0] > start[0]) - (goal[0] < start[0])
        dy = (goal[1] > start[1]) - (goal[1] < start[1])
        return (start[0] + dx, start[1] + dy)

    def __str__(self) -> str:
        """String representation."""
        return f"Board({self.width}x{self.height})"

    def __repr__(self) -> str:
        """Detailed representation."""
        return f"Board(width={self.width}, height={self.height}, cover={len(self._terrain)})"
