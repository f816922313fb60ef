"""
TurnSnapshot - read-only view of one turn.

The snapshot bundles the static pieces of a match (board, profiles,
controlling player) with the agent states observed at the start of a turn.
It:
- Partitions agents into controlled and opposing sides
- Answers occupancy queries
- Produces independent copies for simulation
- Produces a canonical key for memoization
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple, Any

from .board import Board
from ..core.types import GridPos
from ..entities.profile import AgentProfile, ProfileTable
from ..entities.state import AgentState


class TurnSnapshot:
    """
    Agent states for one turn plus the match constants needed to read them.

    The snapshot never mutates the states handed to it after construction;
    simulations call `clone()` and work on the copy.

    Attributes:
        turn: Turn counter (1-based)
        my_player: Side controlled by the engine
        board: Terrain grid
        profiles: Static profile table
    """

    def __init__(
            self,
            turn: int,
            my_player: int,
            board: Board,
            profiles: ProfileTable,
            states: Iterable[AgentState],
    ):
        """
        Initialize a snapshot.

        Args:
            turn: Turn counter
            my_player: Side controlled by the engine
            board: Terrain grid
            profiles: Static profile table
            states: Observed agent states

        Raises:
            ValueError: If a state lies outside the board or ids repeat
        """
        self.turn = turn
        self.my_player = my_player
        self.board = board
        self.profiles = profiles
        self._states: Dict[int, AgentState] = {}

        for state in states:
            if not board.in_bounds(state.pos):
                raise ValueError(f"Agent {state.agent_id} position out of bounds: {state.pos}")
            if state.agent_id in self._states:
                raise ValueError(f"Duplicate state for agent {state.agent_id}")
            self._states[state.agent_id] = state

    # ========================================================================
    # AGENT ACCESS
    # ========================================================================

    def get_state(self, agent_id: int) -> Optional[AgentState]:
        """Agent state by id, or None when the agent is not on the board."""
        return self._states.get(agent_id)

    def profile(self, agent_id: int) -> AgentProfile:
        """Static profile for an agent (raises UnknownAgentError)."""
        return self.profiles.get(agent_id)

    def all_states(self) -> List[AgentState]:
        """All states (including eliminated agents), in input order."""
        return list(self._states.values())

    def alive_states(self) -> List[AgentState]:
        return [s for s in self._states.values() if s.alive]

    def owner_of(self, agent_id: int) -> Optional[int]:
        """Owning side of an agent, or None when no profile is registered."""
        if agent_id not in self.profiles:
            return None
        return self.profiles.get(agent_id).player

    def is_mine(self, agent_id: int) -> bool:
        return self.owner_of(agent_id) == self.my_player

    def is_enemy(self, agent_id: int) -> bool:
        owner = self.owner_of(agent_id)
        return owner is not None and owner != self.my_player

    def mine(self, alive_only: bool = True) -> List[AgentState]:
        """Controlled agents, in input order."""
        return [
            s for s in self._states.values()
            if self.is_mine(s.agent_id) and (s.alive or not alive_only)
        ]

    def enemies(self, alive_only: bool = True) -> List[AgentState]:
        """Opposing agents, in input order."""
        return [
            s for s in self._states.values()
            if self.is_enemy(s.agent_id) and (s.alive or not alive_only)
        ]

    # ========================================================================
    # OCCUPANCY
    # ========================================================================

    def occupied_positions(self, ignore_ids: Optional[Set[int]] = None) -> Set[GridPos]:
        """Tiles held by living agents."""
        ignore = ignore_ids or set()
        return {s.pos for s in self._states.values() if s.alive and s.agent_id not in ignore}

    # ========================================================================
    # COPIES AND KEYS
    # ========================================================================

    def clone(self) -> TurnSnapshot:
        """Copy with independent agent states; board and profiles are shared."""
        return TurnSnapshot(
            turn=self.turn,
            my_player=self.my_player,
            board=self.board,
            profiles=self.profiles,
            states=[s.copy() for s in self.all_states()],
        )

    def canonical_key(self, wetness_bucket: int = 1) -> Tuple[Any, ...]:
        """
        Hashable key identifying the tactical situation.

        States are sorted by id and wetness is quantised into buckets so
        near-identical situations share a key.
        """
        bucket = max(1, wetness_bucket)
        return (self.my_player,) + tuple(
            (s.agent_id, s.x, s.y, s.cooldown, s.bombs, s.wetness // bucket)
            for s in sorted(self.alive_states(), key=lambda s: s.agent_id)
        )

    def __repr__(self) -> str:
        return (
            f"TurnSnapshot(turn={self.turn}, mine={len(self.mine())}, "
            f"enemies={len(self.enemies())}, board={self.board})"
        )
