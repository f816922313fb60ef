"""
Movement collision resolution among own agents.

Agents are processed in order. The first agent to claim a tile keeps it;
later claimants are redirected to the first free neighbour of the tile
they asked for (cardinal neighbours first, then diagonals), or hunker if
none is free. A redirected step-then-act decision keeps its follow-up
only when the new tile is one step from the agent and the follow-up is
still valid from it.
"""

from __future__ import annotations

from typing import Dict, Optional, Set

from arena.core.decision import Decision
from arena.core.types import DecisionKind, GridPos
from arena.core.validation import validate_decision
from arena.mechanics import chebyshev, effective_attack_damage, in_splash
from arena.world.snapshot import TurnSnapshot
from infra.logger import get_logger

log = get_logger(__name__)


def resolve_collisions(
    snapshot: TurnSnapshot,
    decisions: Dict[int, Decision],
    enabled: bool = True,
) -> Dict[int, Decision]:
    """
    Make every move destination distinct and free.

    Args:
        snapshot: Current turn
        decisions: Decision per own agent, in processing order
        enabled: When False, decisions are returned unchanged

    Returns:
        New mapping with the same keys and order
    """
    if not enabled:
        return dict(decisions)

    board = snapshot.board
    claimed: Set[GridPos] = set()
    resolved: Dict[int, Decision] = {}

    for agent_id, decision in decisions.items():
        if not decision.kind.moves:
            resolved[agent_id] = decision
            continue

        occupied = snapshot.occupied_positions({agent_id})
        blocked = claimed | occupied
        requested = decision.destination

        if board.is_walkable(requested) and requested not in blocked:
            claimed.add(requested)
            resolved[agent_id] = decision
            continue

        alternative = _free_neighbour(snapshot, requested, blocked)
        if alternative is None:
            log.debug("agent %d: %s blocked, hunkering", agent_id, requested)
            resolved[agent_id] = Decision.hunker(rationale=f"blocked at {requested}")
            continue

        claimed.add(alternative)
        resolved[agent_id] = _redirect(snapshot, agent_id, decision, alternative)
        log.debug("agent %d: %s blocked, redirected to %s", agent_id, requested, alternative)

    return resolved


def _free_neighbour(snapshot: TurnSnapshot, pos: GridPos, blocked: Set[GridPos]) -> Optional[GridPos]:
    for candidate in snapshot.board.get_neighbors(pos):
        if snapshot.board.is_walkable(candidate) and candidate not in blocked:
            return candidate
    return None


def _redirect(snapshot: TurnSnapshot, agent_id: int, decision: Decision, dest: GridPos) -> Decision:
    moved = decision.with_destination(dest)
    if decision.kind == DecisionKind.MOVE:
        return moved

    agent = snapshot.get_state(agent_id)
    # The follow-up fires from the tile reached this turn, one king step away.
    follow_up_ok = (
        agent is not None
        and chebyshev(agent.pos, dest) <= 1
        and validate_decision(snapshot, agent, moved).valid
    )
    if follow_up_ok and moved.kind == DecisionKind.MOVE_ATTACK:
        profile = snapshot.profile(agent_id)
        target = snapshot.get_state(moved.target_id)
        follow_up_ok = effective_attack_damage(profile.power, profile.optimal_range, dest, target.pos, snapshot.board) > 0
    elif follow_up_ok and moved.kind == DecisionKind.MOVE_THROW:
        friendly = [s.pos for s in snapshot.mine() if s.agent_id != agent_id] + [dest]
        follow_up_ok = not any(in_splash(moved.landing, pos) for pos in friendly)

    if follow_up_ok:
        return moved
    return Decision.move(dest[0], dest[1], value=decision.expected_value, rationale=f"redirected to {dest}")
