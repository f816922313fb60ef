"""HTTP API entrypoint for driving the engine turn by turn."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from arena.core.errors import MalformedInputError
from arena.entities.profile import AgentProfile, ProfileTable
from arena.entities.state import AgentState
from infra.config import EngineConfig
from infra.logger import get_logger
from infra.trace import MemorySink
from runtime.protocol import MatchSetup, TurnInput, build_board
from runtime.runner import MatchSession

log = get_logger(__name__)

app = FastAPI(title="tactics-engine")
session: MatchSession | None = None
sink: MemorySink | None = None


class AgentData(BaseModel):
    agent_id: int
    player: int
    cooldown: int = Field(ge=0)
    optimal_range: int = Field(ge=0)
    power: int = Field(ge=0)
    bombs: int = Field(ge=0)


class Tile(BaseModel):
    x: int
    y: int
    tile_type: int = 0


class StartRequest(BaseModel):
    my_id: int
    agents: List[AgentData]
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    # Open tiles may be omitted; only cover needs listing.
    tiles: List[Tile] = Field(default_factory=list)
    agent_type: str = "tactical"
    config: Optional[Dict[str, Any]] = None


class AgentStateData(BaseModel):
    agent_id: int
    x: int
    y: int
    cooldown: int = 0
    bombs: int = 0
    wetness: int = 0


class TurnRequest(BaseModel):
    agents: List[AgentStateData]
    my_agent_count: Optional[int] = None


@app.post("/start")
def start(request: StartRequest):
    global session, sink
    try:
        profiles = ProfileTable()
        for data in request.agents:
            profiles.add(
                AgentProfile(data.agent_id, data.player, data.cooldown, data.optimal_range, data.power, data.bombs)
            )
        board = build_board(request.width, request.height, [(t.x, t.y, t.tile_type) for t in request.tiles])
        config = EngineConfig.model_validate(request.config or {})
        sink = MemorySink(limit=100)
        session = MatchSession(
            MatchSetup(my_id=request.my_id, profiles=profiles, board=board),
            agent_type=request.agent_type,
            config=config,
            sink=sink,
        )
    except (ValueError, KeyError) as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"success": True, "my_agents": session.setup.my_agent_ids}


@app.post("/turn")
def turn(request: TurnRequest):
    if session is None:
        raise HTTPException(400, "No active match")

    expected = request.my_agent_count
    if expected is None:
        expected = len(session.setup.my_agent_ids)
    try:
        states = [AgentState(**a.model_dump()) for a in request.agents]
        lines = session.play(TurnInput(states=states, expected_lines=expected))
    except (MalformedInputError, ValueError) as exc:
        log.warning("Rejected turn: %s", exc)
        raise HTTPException(400, str(exc)) from exc

    record = sink.last if sink is not None else None
    return {
        "turn": session.turn,
        "lines": lines,
        "metadata": session.last_metadata,
        "record": record.to_dict() if record is not None else None,
    }


@app.post("/stop")
def stop():
    global session, sink
    if session is None:
        raise HTTPException(400, "No active match")
    turns = session.turn
    session.agent.reset()
    session = None
    sink = None
    log.info("Match stopped after %d turns", turns)
    return {"success": True, "turns": turns}


@app.get("/status")
def status():
    if session is None:
        return {"active": False}
    return {"active": True, **session.status()}
