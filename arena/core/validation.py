"""
Shared decision validation helpers.

The generator, the collision resolver and the protocol writer all ask the
same question, "is this decision executable right now?", so the rules
live in one place.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Set

from .types import DecisionValidation, GridPos
from ..mechanics.combat import THROW_DISTANCE_MAX, manhattan

if TYPE_CHECKING:
    from ..world.board import Board
    from ..world.snapshot import TurnSnapshot
    from ..entities.state import AgentState
    from .decision import Decision


def validate_destination(
    board: Board,
    pos: GridPos,
    occupied: Set[GridPos],
) -> DecisionValidation:
    """
    Check that a tile can be entered.

    Args:
        board: Terrain grid
        pos: Requested destination
        occupied: Tiles held by other living agents

    Returns:
        DecisionValidation
    """
    if not board.in_bounds(pos):
        return DecisionValidation.fail("OUT_OF_BOUNDS", f"Destination {pos} outside {board}")
    if not board.is_walkable(pos):
        return DecisionValidation.fail("NOT_WALKABLE", f"Destination {pos} is cover")
    if pos in occupied:
        return DecisionValidation.fail("OCCUPIED", f"Destination {pos} is occupied")
    return DecisionValidation.success()


def validate_decision(
    snapshot: TurnSnapshot,
    agent: AgentState,
    decision: Decision,
    occupied: Optional[Set[GridPos]] = None,
) -> DecisionValidation:
    """
    Validate a decision against the board and current occupancy.

    Args:
        snapshot: Current turn
        agent: Acting agent
        decision: Decision to check
        occupied: Tiles to treat as taken; defaults to all living agents but the actor

    Returns:
        DecisionValidation
    """
    if not agent.alive:
        return DecisionValidation.fail("AGENT_DEAD", f"Agent {agent.agent_id} is eliminated")

    origin = agent.pos
    if decision.kind.moves:
        taken = snapshot.occupied_positions({agent.agent_id}) if occupied is None else occupied
        result = validate_destination(snapshot.board, decision.destination, taken)
        if not result.valid:
            return result
        origin = decision.destination

    if decision.kind.is_offensive and agent.cooldown > 0:
        return DecisionValidation.fail(
            "COOLING_DOWN", f"Agent {agent.agent_id} cooling down ({agent.cooldown})"
        )

    if decision.kind.attacks:
        target = snapshot.get_state(decision.target_id)
        if target is None or not target.alive:
            return DecisionValidation.fail(
                "INVALID_TARGET", f"Agent {agent.agent_id} target {decision.target_id} invalid or dead"
            )

    if decision.kind.throws:
        if agent.bombs <= 0:
            return DecisionValidation.fail("NO_BOMBS", f"Agent {agent.agent_id} has no bombs")
        landing = decision.landing
        if not snapshot.board.in_bounds(landing):
            return DecisionValidation.fail("OUT_OF_BOUNDS", f"Landing {landing} outside {snapshot.board}")
        if manhattan(origin, landing) > THROW_DISTANCE_MAX:
            return DecisionValidation.fail("OUT_OF_RANGE", f"Landing {landing} too far from {origin}")

    return DecisionValidation.success()
