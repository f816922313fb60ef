"""
Core type definitions for the tactical decision engine.

This module contains the fundamental types, enums, and constants used
throughout the system. No logic, just pure data structures.
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Tuple
from dataclasses import dataclass

# ============================================================================
# SPATIAL TYPES
# ============================================================================

# Grid position: (x, y) where:
# - X increases to the RIGHT
# - Y increases DOWNWARD (screen convention used by the match feed)
# - Origin (0, 0) is at TOP-LEFT
GridPos = Tuple[int, int]


class TerrainType(Enum):
    """Terrain classification of a board cell."""
    OPEN = 0
    LIGHT_COVER = 1
    HEAVY_COVER = 2

    def __str__(self) -> str:
        return self.name

    @property
    def is_cover(self) -> bool:
        """Whether this cell shields agents standing next to it."""
        return self != TerrainType.OPEN

    @property
    def protection(self) -> float:
        """Damage multiplier granted to a target sheltered by this cell."""
        return {
            TerrainType.OPEN: 1.0,
            TerrainType.LIGHT_COVER: 0.5,
            TerrainType.HEAVY_COVER: 0.25,
        }[self]


# ============================================================================
# AGENT CLASSES
# ============================================================================

class AgentClass(Enum):
    """Tactical archetype derived from an agent's static stats."""
    GUNNER = "gunner"
    SNIPER = "sniper"
    BOMBER = "bomber"
    ASSAULT = "assault"
    BERSERKER = "berserker"

    def __str__(self) -> str:
        return self.name


# ============================================================================
# DECISIONS
# ============================================================================

class DecisionKind(Enum):
    """Types of decisions the engine can emit for an agent."""
    HUNKER = auto()  # Defensive stance, no movement
    MOVE = auto()  # Move toward a tile
    ATTACK = auto()  # Shoot at an enemy agent
    THROW = auto()  # Throw a splash bomb at a tile
    MOVE_ATTACK = auto()  # Move, then shoot from the new tile
    MOVE_THROW = auto()  # Move, then throw from the new tile

    def __str__(self) -> str:
        return self.name

    @property
    def moves(self) -> bool:
        """Whether this decision relocates the agent."""
        return self in (DecisionKind.MOVE, DecisionKind.MOVE_ATTACK, DecisionKind.MOVE_THROW)

    @property
    def attacks(self) -> bool:
        """Whether this decision shoots at an agent."""
        return self in (DecisionKind.ATTACK, DecisionKind.MOVE_ATTACK)

    @property
    def throws(self) -> bool:
        """Whether this decision spends a bomb."""
        return self in (DecisionKind.THROW, DecisionKind.MOVE_THROW)

    @property
    def is_offensive(self) -> bool:
        """Whether this decision starts the agent's cooldown."""
        return self.attacks or self.throws


class StrategyMode(Enum):
    """How a turn's decisions were produced."""
    HEURISTIC = "heuristic"
    SEARCH = "search"
    CACHED = "cached"
    FALLBACK = "fallback"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# DECISION VALIDATION
# ============================================================================

@dataclass
class DecisionValidation:
    """
    Structured result of validating a decision.

    Attributes:
        valid: Whether the decision is valid
        error_code: Machine-readable error code (None if valid)
        message: Human-readable message explaining the result

    Error codes:
        - "AGENT_DEAD": Acting agent is not alive
        - "OUT_OF_BOUNDS": A referenced tile lies outside the board
        - "NOT_WALKABLE": Move destination is a cover tile
        - "OCCUPIED": Move destination holds another living agent
        - "COOLING_DOWN": Agent cannot act offensively yet
        - "NO_BOMBS": Throw requested without bombs
        - "INVALID_TARGET": Target id unknown or target is dead
        - "OUT_OF_RANGE": Bomb landing tile beyond throw distance
    """
    valid: bool
    error_code: str | None = None
    message: str = ""

    @staticmethod
    def success(message: str = "") -> DecisionValidation:
        """Create a validation success result."""
        return DecisionValidation(valid=True, error_code=None, message=message)

    @staticmethod
    def fail(error_code: str, message: str) -> DecisionValidation:
        """Create a validation failure result."""
        return DecisionValidation(valid=False, error_code=error_code, message=message)
