"""
Per-turn agent state.

AgentState is the mutable part of an agent: where it stands, how wet it
is, how long until it can act again and how many bombs it holds. Rollouts
copy states freely, so the class stays a plain dataclass.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict

from ..core.types import GridPos
from ..mechanics.combat import MAX_WETNESS


@dataclass
class AgentState:
    """
    Observed state of one agent at the start of a turn.

    Attributes:
        agent_id: Agent id (links to an AgentProfile)
        x, y: Current tile
        cooldown: Turns until the agent can attack or throw again
        bombs: Remaining bombs
        wetness: Accumulated damage in [0, 100]; 100 means eliminated
    """

    agent_id: int
    x: int
    y: int
    cooldown: int = 0
    bombs: int = 0
    wetness: int = 0

    def __post_init__(self):
        if self.cooldown < 0:
            raise ValueError(f"Cooldown cannot be negative: {self.cooldown}")
        if self.bombs < 0:
            raise ValueError(f"Bombs cannot be negative: {self.bombs}")
        self.wetness = min(max(self.wetness, 0), MAX_WETNESS)

    @property
    def pos(self) -> GridPos:
        return (self.x, self.y)

    @property
    def alive(self) -> bool:
        return self.wetness < MAX_WETNESS

    @property
    def health(self) -> int:
        return MAX_WETNESS - self.wetness

    @property
    def ready(self) -> bool:
        """Off cooldown and alive."""
        return self.alive and self.cooldown == 0

    def copy(self) -> AgentState:
        """Independent copy for simulation."""
        return replace(self)

    def move_to(self, pos: GridPos) -> None:
        self.x, self.y = pos

    def take_damage(self, amount: int) -> None:
        self.wetness = min(max(self.wetness + amount, 0), MAX_WETNESS)

    def tick_cooldown(self) -> None:
        self.cooldown = max(0, self.cooldown - 1)

    def start_cooldown(self, period: int) -> None:
        self.cooldown = max(0, period)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "x": self.x,
            "y": self.y,
            "cooldown": self.cooldown,
            "bombs": self.bombs,
            "wetness": self.wetness,
        }
