"""
Agent definitions.

- AgentProfile / ProfileTable: static per-match stats
- AgentState: per-turn mutable state
"""

from .profile import AgentProfile, ProfileTable, derive_agent_class
from .state import AgentState

__all__ = [
    "AgentProfile",
    "ProfileTable",
    "derive_agent_class",
    "AgentState",
]
