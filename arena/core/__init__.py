"""
Core types and constants for the tactical decision engine.
"""

# Instead of from arena.core.types import GridPos, you can do: from arena.core import GridPos
from .types import (
    GridPos,
    TerrainType,
    AgentClass,
    DecisionKind,
    StrategyMode,
    DecisionValidation,
)
from .decision import Decision
from .errors import UnknownAgentError, MalformedInputError


__all__ = [
    "GridPos",
    "TerrainType",
    "AgentClass",
    "DecisionKind",
    "StrategyMode",
    "DecisionValidation",
    "Decision",
    "UnknownAgentError",
    "MalformedInputError",
]
