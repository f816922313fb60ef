"""
Agent interface for the tactical decision engine.

An agent owns one side of the match. Each turn it receives a read-only
TurnSnapshot and answers with one Decision per living agent of its side.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from arena.core.decision import Decision
from arena.entities.state import AgentState
from arena.world.snapshot import TurnSnapshot


class BaseAgent(ABC):
    """
    Base class for everything the runner can drive.

    Attributes:
        player: Side this agent decides for
        name: Label used in logs and status output
    """

    def __init__(self, player: int, name: str = None):
        self.player = player
        self.name = name or self.__class__.__name__

    @abstractmethod
    def get_decisions(self, snapshot: TurnSnapshot) -> Tuple[Dict[int, Decision], Dict[str, Any]]:
        """
        Decide this turn.

        Args:
            snapshot: Board, profiles and agent states for the current turn

        Returns:
            Tuple of (Decision by own agent id, metadata dict). Every living
            own agent must appear exactly once; dead ones never do.
        """

    def controlled(self, snapshot: TurnSnapshot) -> List[AgentState]:
        """Living agents of this side, in snapshot order."""
        return [
            s for s in snapshot.alive_states()
            if snapshot.owner_of(s.agent_id) == self.player
        ]

    def hunker_all(self, snapshot: TurnSnapshot, rationale: str = "") -> Dict[int, Decision]:
        """Safe answer for every living own agent."""
        return {s.agent_id: Decision.hunker(rationale=rationale) for s in self.controlled(snapshot)}

    def reset(self) -> None:
        """Drop any state kept across turns. Stateless agents need not override."""

    def __str__(self) -> str:
        return f"{self.name} (player {self.player})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(player={self.player}, name='{self.name}')"
