from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from arena.core.types import GridPos
from arena.entities.profile import AgentProfile, ProfileTable
from arena.entities.state import AgentState
from arena.mechanics import manhattan, tactical_advantage
from arena.world.board import Board
from arena.world.snapshot import TurnSnapshot

from .tactics.weights import (
    PRIORITY_BOMB_WEIGHT,
    PRIORITY_DISTANCE_HORIZON,
    PRIORITY_DISTANCE_WEIGHT,
    PRIORITY_READY_BONUS,
    PRIORITY_WETNESS_WEIGHT,
    WOUNDED_WETNESS,
)


@dataclass(frozen=True)
class TeamIntel:
    """
    Per-side view of a turn for agent decision-making.

    - friendlies: living agents of the side the view is built for
    - enemies: living agents of every other side
    """

    board: Board
    profiles: ProfileTable
    player: int
    friendlies: List[AgentState]
    enemies: List[AgentState]

    def profile(self, agent_id: int) -> AgentProfile:
        return self.profiles.get(agent_id)

    # ------------------------------------------------------------------
    # Targeting helpers
    # ------------------------------------------------------------------
    def priority_score(self, enemy: AgentState) -> int:
        """
        How urgently an enemy should be focused.

        Bomb carriers dominate, then wounded enemies, then proximity to our
        side and whether the enemy can act again soon.
        """
        score = enemy.bombs * PRIORITY_BOMB_WEIGHT
        if enemy.wetness > WOUNDED_WETNESS:
            score += (enemy.wetness - WOUNDED_WETNESS) * PRIORITY_WETNESS_WEIGHT
        if self.friendlies:
            min_dist = min(manhattan(enemy.pos, a.pos) for a in self.friendlies)
            score += (PRIORITY_DISTANCE_HORIZON - min_dist) * PRIORITY_DISTANCE_WEIGHT
        if enemy.cooldown <= 1:
            score += PRIORITY_READY_BONUS
        return score

    def priority_target(self) -> Optional[AgentState]:
        """Highest-priority living enemy; the first one listed wins ties."""
        best: Optional[AgentState] = None
        best_score = 0
        for enemy in self.enemies:
            score = self.priority_score(enemy)
            if best is None or score > best_score:
                best, best_score = enemy, score
        return best

    # ------------------------------------------------------------------
    # Side-level signals
    # ------------------------------------------------------------------
    def tactical_advantage(self) -> float:
        return tactical_advantage(
            len(self.friendlies),
            len(self.enemies),
            sum(a.health for a in self.friendlies),
            sum(a.health for a in self.enemies),
        )

    def territory(self) -> Dict[str, int]:
        """
        Count tiles each side reaches first.

        Wounded agents (wetness >= 50) project half as far. Ties count as
        contested.
        """
        counts = {"mine": 0, "theirs": 0, "contested": 0}
        for y in range(self.board.height):
            for x in range(self.board.width):
                mine = self._control_distance((x, y), self.friendlies)
                theirs = self._control_distance((x, y), self.enemies)
                if mine < theirs:
                    counts["mine"] += 1
                elif theirs < mine:
                    counts["theirs"] += 1
                else:
                    counts["contested"] += 1
        return counts

    @staticmethod
    def _control_distance(pos: GridPos, agents: List[AgentState]) -> float:
        best = float("inf")
        for agent in agents:
            factor = 2.0 if agent.wetness >= WOUNDED_WETNESS else 1.0
            best = min(best, manhattan(pos, agent.pos) * factor)
        return best

    @classmethod
    def build(cls, snapshot: TurnSnapshot, player: Optional[int] = None) -> TeamIntel:
        """
        Construct a per-side view from a turn snapshot.

        Args:
            snapshot: Current turn
            player: Side to build for (defaults to the controlled side)
        """
        side = snapshot.my_player if player is None else player
        friendlies: List[AgentState] = []
        enemies: List[AgentState] = []
        for state in snapshot.alive_states():
            owner = snapshot.owner_of(state.agent_id)
            if owner is None:
                continue
            if owner == side:
                friendlies.append(state)
            else:
                enemies.append(state)
        return cls(
            board=snapshot.board,
            profiles=snapshot.profiles,
            player=side,
            friendlies=friendlies,
            enemies=enemies,
        )
