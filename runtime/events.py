from __future__ import annotations

from typing import Any, Dict, List, Optional

from arena.world.snapshot import TurnSnapshot

CRITICAL_WETNESS = 70


def extract_events(
    *,
    prev_snapshot: Optional[TurnSnapshot],
    snapshot: TurnSnapshot,
) -> List[Dict[str, Any]]:
    """
    Turn-over-turn events worth surfacing in the logs.

    An agent that was alive last turn and is missing or soaked now counts
    as lost (own side) or eliminated (opposing side). Own agents crossing
    CRITICAL_WETNESS are reported once, on the turn they cross it.
    """
    if prev_snapshot is None:
        return []

    events: List[Dict[str, Any]] = []
    current = {s.agent_id: s for s in snapshot.alive_states()}

    # ---------------------------------------------------------
    # 1. LOSSES
    # ---------------------------------------------------------
    for prev in prev_snapshot.alive_states():
        owner = prev_snapshot.owner_of(prev.agent_id)
        if owner is None or prev.agent_id in current:
            continue
        mine = owner == prev_snapshot.my_player
        events.append({
            "type": "ALLY_LOST" if mine else "ENEMY_ELIMINATED",
            "turn": snapshot.turn,
            "agent_id": prev.agent_id,
            "last_position": prev.pos,
            "severity": "HIGH" if mine else "INFO",
        })

    # ---------------------------------------------------------
    # 2. CRITICAL HEALTH
    # ---------------------------------------------------------
    for agent in snapshot.mine():
        before = prev_snapshot.get_state(agent.agent_id)
        if before is None or before.wetness >= CRITICAL_WETNESS:
            continue
        if agent.wetness >= CRITICAL_WETNESS:
            events.append({
                "type": "CRITICAL_HEALTH",
                "turn": snapshot.turn,
                "agent_id": agent.agent_id,
                "wetness": agent.wetness,
                "severity": "MEDIUM",
            })

    return events
