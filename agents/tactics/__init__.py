"""
Per-agent tactics: scoring constants and the action generator.
"""

from .generator import ActionGenerator, best_of
from .weights import CLASS_TACTICS, ClassTactics, tactics_for

__all__ = [
    "ActionGenerator",
    "best_of",
    "CLASS_TACTICS",
    "ClassTactics",
    "tactics_for",
]
