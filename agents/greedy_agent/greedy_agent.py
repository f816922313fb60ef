"""
Greedy agent that selects locally optimal actions.

Decision logic:
- Shoot the target giving the best immediate value when off cooldown
- Otherwise throw a bomb if one lands on an enemy without splashing allies
- Otherwise step toward the nearest enemy
- Hunker when nothing else is possible

The same rule doubles as the opponent model inside the cooperative search.
"""

from typing import Any, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

from arena.core.decision import Decision
from arena.entities.state import AgentState
from ..base_agent import BaseAgent
from ..registry import register_agent
from ..tactics.generator import ActionGenerator, best_of
from ..tactics.weights import HUNKER_VALUE
from ..team_intel import TeamIntel

if TYPE_CHECKING:
    from arena.world.snapshot import TurnSnapshot


def greedy_decision(
    generator: ActionGenerator,
    agent: AgentState,
    opponents: Sequence[AgentState],
    allies: Sequence[AgentState] = (),
) -> Decision:
    """
    Fixed greedy rule for one agent.

    Args:
        generator: Candidate generator for the match
        agent: Acting agent
        opponents: Agents of the other side
        allies: Agents of the acting agent's side (may include the agent)

    Returns:
        The chosen decision (never None)
    """
    if not agent.alive:
        return Decision.hunker(0.0, "eliminated")

    shot = generator.best_attack(agent, opponents)
    throw = best_of(generator.throw_candidates(agent, opponents, allies))
    # Shots win ties.
    if throw is not None and (not shot.kind.is_offensive or throw.expected_value > shot.expected_value):
        return throw
    if shot.kind.is_offensive:
        return shot

    step = _step_toward_nearest(generator, agent, opponents, allies)
    if step is not None:
        return step

    return Decision.hunker(HUNKER_VALUE, "greedy hold")


def _step_toward_nearest(
    generator: ActionGenerator,
    agent: AgentState,
    opponents: Sequence[AgentState],
    allies: Sequence[AgentState],
) -> Optional[Decision]:
    """Pick the enterable neighbour that most reduces distance to the nearest opponent."""
    living = [o for o in opponents if o.alive]
    if not living:
        return None
    nearest = min(living, key=lambda o: abs(o.x - agent.x) + abs(o.y - agent.y))
    current = abs(nearest.x - agent.x) + abs(nearest.y - agent.y)

    best: Optional[Tuple[int, Decision]] = None
    for move in generator.movement_candidates(agent, opponents, allies, focus=nearest):
        dist = abs(move.x - nearest.x) + abs(move.y - nearest.y)
        if dist >= current:
            continue
        if best is None or dist < best[0]:
            best = (dist, move.with_value(move.expected_value, f"close on {nearest.agent_id}"))
    return best[1] if best else None


@register_agent("greedy")
class GreedyAgent(BaseAgent):
    """
    Greedy baseline policy: shoot, else bomb, else advance.
    """

    def __init__(self, player: int, name: str | None = None, **_: Any):
        """
        Initialize the greedy agent.

        Args:
            player: Side to control
            name: Optional agent name (default: "GreedyAgent")
        """
        super().__init__(player, name)

    def get_decisions(self, snapshot: "TurnSnapshot") -> Tuple[Dict[int, Decision], Dict[str, Any]]:
        """
        Apply the greedy rule to every living own agent.
        """
        intel = TeamIntel.build(snapshot, self.player)
        generator = ActionGenerator(snapshot.board, snapshot.profiles)

        decisions: Dict[int, Decision] = {}
        for agent in intel.friendlies:
            decisions[agent.agent_id] = greedy_decision(generator, agent, intel.enemies, intel.friendlies)

        metadata: Dict[str, Any] = {"policy": "greedy", "decisions_count": len(decisions)}
        return decisions, metadata
