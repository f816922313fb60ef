"""
Joint-turn simulation and state evaluation for the search.

A simulated turn resolves in the game's phase order:
1. Movement: every mover takes one king-step toward its destination.
   Steps into cover, onto occupied tiles, or onto a tile another mover
   also claims are blocked.
2. Combat: shots and bombs are resolved against post-move positions;
   damage is accumulated first and applied at once, so simultaneous
   eliminations trade.
3. Cooldowns: agents that acted offensively restart their cooldown;
   everyone else ticks down by one.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Mapping, Set

from arena.core.decision import Decision
from arena.core.types import DecisionKind, GridPos
from arena.entities.profile import ProfileTable
from arena.entities.state import AgentState
from arena.mechanics import (
    chebyshev,
    effective_attack_damage,
    manhattan,
    splash_damage,
    THROW_DISTANCE_MAX,
)
from arena.world.board import Board

from ..tactics.weights import (
    ALIVE_WEIGHT,
    BOMB_WEIGHT,
    HEALTH_WEIGHT,
    POSITION_BONUS,
    WIPE_REWARD,
)

AgentStates = Dict[int, AgentState]


def copy_states(states: Iterable[AgentState]) -> AgentStates:
    """Independent copies keyed by agent id."""
    return {s.agent_id: s.copy() for s in states}


class JointSimulator:
    """
    Applies joint decisions to a set of agent states.

    Attributes:
        board: Terrain grid
        profiles: Static profile table
    """

    def __init__(self, board: Board, profiles: ProfileTable):
        self.board = board
        self.profiles = profiles

    def step(self, states: AgentStates, joint: Mapping[int, Decision]) -> AgentStates:
        """
        Resolve one simulated turn in place.

        Args:
            states: Agent states keyed by id (mutated)
            joint: Decision per acting agent; missing agents hold position

        Returns:
            The same states mapping
        """
        self._resolve_movement(states, joint)
        actors = self._resolve_combat(states, joint)
        for agent_id, state in states.items():
            if agent_id in actors:
                state.start_cooldown(self.profiles.get(agent_id).cooldown_period)
            else:
                state.tick_cooldown()
        return states

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _resolve_movement(self, states: AgentStates, joint: Mapping[int, Decision]) -> None:
        occupied: Set[GridPos] = {s.pos for s in states.values() if s.alive}
        intents: Dict[int, GridPos] = {}
        for agent_id, decision in joint.items():
            state = states.get(agent_id)
            if state is None or not state.alive or not decision.kind.moves:
                continue
            nxt = self.board.step_toward(state.pos, decision.destination)
            if nxt == state.pos or not self.board.is_walkable(nxt) or nxt in occupied:
                continue
            intents[agent_id] = nxt

        claims = Counter(intents.values())
        for agent_id, nxt in intents.items():
            if claims[nxt] == 1:
                states[agent_id].move_to(nxt)

    def _resolve_combat(self, states: AgentStates, joint: Mapping[int, Decision]) -> Set[int]:
        damage: Dict[int, int] = {}
        actors: Set[int] = set()
        hunkered = {a for a, d in joint.items() if d.kind == DecisionKind.HUNKER}

        for agent_id, decision in joint.items():
            state = states.get(agent_id)
            if state is None or not state.ready or not decision.kind.is_offensive:
                continue

            if decision.kind.attacks:
                target = states.get(decision.target_id)
                if target is None or not target.alive:
                    continue
                profile = self.profiles.get(agent_id)
                dealt = effective_attack_damage(profile.power, profile.optimal_range, state.pos, target.pos, self.board)
                if dealt > 0:
                    damage[target.agent_id] = damage.get(target.agent_id, 0) + dealt
                actors.add(agent_id)

            elif decision.kind.throws:
                landing = decision.landing
                if state.bombs <= 0 or manhattan(state.pos, landing) > THROW_DISTANCE_MAX:
                    continue
                state.bombs -= 1
                for victim in states.values():
                    if not victim.alive:
                        continue
                    dealt = splash_damage(chebyshev(landing, victim.pos), victim.agent_id in hunkered)
                    if dealt > 0:
                        damage[victim.agent_id] = damage.get(victim.agent_id, 0) + dealt
                actors.add(agent_id)

        for agent_id, amount in damage.items():
            states[agent_id].take_damage(amount)
        return actors


# ============================================================================
# EVALUATION
# ============================================================================

def is_terminal(states: AgentStates, profiles: ProfileTable) -> bool:
    """True when at most one side still has living agents."""
    sides = {profiles.get(s.agent_id).player for s in states.values() if s.alive}
    return len(sides) <= 1


def evaluate(states: AgentStates, profiles: ProfileTable, player: int) -> float:
    """
    Score a simulated position from one side's point of view.

    A wiped-out side scores -WIPE_REWARD (the survivor +WIPE_REWARD).
    Otherwise the score combines health, head count and bomb differences
    with a bonus for each own agent that has an enemy inside its optimal
    range.
    """
    own = [s for s in states.values() if s.alive and profiles.get(s.agent_id).player == player]
    opp = [s for s in states.values() if s.alive and profiles.get(s.agent_id).player != player]

    if not own and not opp:
        return 0.0
    if not own:
        return -float(WIPE_REWARD)
    if not opp:
        return float(WIPE_REWARD)

    score = (sum(s.health for s in own) - sum(s.health for s in opp)) * HEALTH_WEIGHT
    score += (len(own) - len(opp)) * ALIVE_WEIGHT
    score += (sum(s.bombs for s in own) - sum(s.bombs for s in opp)) * BOMB_WEIGHT
    for agent in own:
        reach = profiles.get(agent.agent_id).optimal_range
        if any(manhattan(agent.pos, e.pos) <= reach for e in opp):
            score += POSITION_BONUS
    return float(score)
