"""
Static agent profiles.

A profile holds everything about an agent that never changes during a
match: owner, cooldown period, optimal range, soaking power and starting
bomb count. The tactical class is derived once from those stats.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from ..core.errors import UnknownAgentError
from ..core.types import AgentClass


def derive_agent_class(optimal_range: int, power: int, bombs: int) -> AgentClass:
    """
    Map raw stats onto a tactical archetype.

    Rules are checked in priority order; the first match wins.

    Args:
        optimal_range: Optimal shooting range
        power: Soaking power
        bombs: Starting bomb count

    Returns:
        AgentClass for the stats
    """
    if optimal_range == 6 and power == 24:
        return AgentClass.SNIPER
    if optimal_range == 2 and bombs >= 3:
        return AgentClass.BOMBER
    if optimal_range == 2 and power == 32:
        return AgentClass.BERSERKER
    if optimal_range == 4 and bombs >= 2:
        return AgentClass.ASSAULT
    return AgentClass.GUNNER


@dataclass(frozen=True)
class AgentProfile:
    """
    Immutable per-match stats of one agent.

    Attributes:
        agent_id: Unique agent id
        player: Owning side
        cooldown_period: Turns an agent must wait after acting offensively
        optimal_range: Maximum distance at which shots deal damage
        power: Damage at distance 1
        bombs: Starting bomb count
        agent_class: Derived archetype (computed when omitted)
    """

    agent_id: int
    player: int
    cooldown_period: int
    optimal_range: int
    power: int
    bombs: int
    agent_class: Optional[AgentClass] = None

    def __post_init__(self):
        """Validate stats and derive the class."""
        if self.cooldown_period < 0:
            raise ValueError(f"Cooldown period cannot be negative: {self.cooldown_period}")
        if self.optimal_range <= 0:
            raise ValueError(f"Optimal range must be positive: {self.optimal_range}")
        if self.power < 0:
            raise ValueError(f"Power cannot be negative: {self.power}")
        if self.bombs < 0:
            raise ValueError(f"Bombs cannot be negative: {self.bombs}")
        if self.agent_class is None:
            object.__setattr__(
                self,
                "agent_class",
                derive_agent_class(self.optimal_range, self.power, self.bombs),
            )

    def label(self) -> str:
        """Short label for logs, e.g. 'SNIPER#3'."""
        return f"{self.agent_class}#{self.agent_id}"


class ProfileTable:
    """
    Lookup of static profiles by agent id.

    Lookups of unknown ids raise UnknownAgentError so callers can scope
    the failure to the one agent that triggered it.
    """

    def __init__(self, profiles: Iterable[AgentProfile] = ()):
        self._profiles: Dict[int, AgentProfile] = {}
        for profile in profiles:
            self.add(profile)

    def add(self, profile: AgentProfile) -> None:
        if profile.agent_id in self._profiles:
            raise ValueError(f"Duplicate profile for agent {profile.agent_id}")
        self._profiles[profile.agent_id] = profile

    def get(self, agent_id: int) -> AgentProfile:
        try:
            return self._profiles[agent_id]
        except KeyError:
            raise UnknownAgentError(agent_id) from None

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._profiles

    def __iter__(self) -> Iterator[AgentProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def owned_by(self, player: int) -> List[AgentProfile]:
        """Profiles of one side, ordered by id."""
        return sorted((p for p in self._profiles.values() if p.player == player), key=lambda p: p.agent_id)
