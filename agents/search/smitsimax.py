"""
Cooperative multi-agent search.

Every living agent on the board, own and opposing, gets an independent
search tree. Each iteration walks all trees at once: every agent picks a
child in its own tree, the picks form a joint action, the joint action is
simulated, and the resulting position is scored from each agent's side
and backed up along that agent's path only. Own agents are expanded from
the action generator's compact candidate set; opposing agents follow the
fixed greedy rule, so their trees are single-child chains.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from arena.core.decision import Decision
from arena.entities.state import AgentState
from arena.world.snapshot import TurnSnapshot
from infra.config import EngineConfig
from infra.logger import get_logger

from ..greedy_agent.greedy_agent import greedy_decision
from ..tactics.generator import ActionGenerator
from ..tactics.weights import HUNKER_VALUE
from .rollout import AgentStates, JointSimulator, copy_states, evaluate, is_terminal
from .tree import SearchTree

log = get_logger(__name__)


@dataclass
class SearchResult:
    """
    Outcome of one search.

    Attributes:
        decisions: Chosen decision per own agent
        iterations: Iterations completed
        elapsed_ms: Wall time spent
        root_visits: Visits of the chosen root child per own agent
        timed_out: Whether the time budget ended the search
    """

    decisions: Dict[int, Decision] = field(default_factory=dict)
    iterations: int = 0
    elapsed_ms: float = 0.0
    root_visits: Dict[int, int] = field(default_factory=dict)
    timed_out: bool = False


class CooperativeSearch:
    """
    Simultaneous per-agent tree search under a fixed budget.

    Attributes:
        generator: Candidate generator for own agents (and the greedy rule)
        config: Budget and selection parameters
        rng: Seeded random source for warm-up sampling
    """

    def __init__(
        self,
        generator: ActionGenerator,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.generator = generator
        self.config = config or generator.config
        self.rng = rng or random.Random(self.config.rng_seed)
        self.simulator = JointSimulator(generator.board, generator.profiles)

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------
    def _expansion(
        self,
        tree: SearchTree,
        states: AgentStates,
        player: int,
        focus_id: Optional[int],
    ) -> List[Decision]:
        agent = states[tree.agent_id]
        profiles = self.generator.profiles
        allies = [s for s in states.values() if s.alive and profiles.get(s.agent_id).player == player]
        enemies = [s for s in states.values() if s.alive and profiles.get(s.agent_id).player != player]

        if tree.controlled:
            focus = states.get(focus_id) if focus_id is not None else None
            return self.generator.search_candidates(agent, enemies, allies, focus)
        return [greedy_decision(self.generator, agent, enemies, allies)]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def run(self, snapshot: TurnSnapshot, focus: Optional[AgentState] = None) -> SearchResult:
        """
        Search the current turn and pick one decision per own agent.

        Args:
            snapshot: Current turn
            focus: Team focus target passed to the generator (optional)

        Returns:
            SearchResult with a decision for every living own agent
        """
        cfg = self.config
        profiles = self.generator.profiles
        started = time.perf_counter()
        budget = cfg.time_budget_ms / 1000.0
        focus_id = focus.agent_id if focus is not None else None

        root_states = copy_states(s for s in snapshot.alive_states() if snapshot.owner_of(s.agent_id) is not None)
        players = {agent_id: profiles.get(agent_id).player for agent_id in root_states}
        trees: Dict[int, SearchTree] = {}
        for agent_id in root_states:
            tree = SearchTree(agent_id, controlled=players[agent_id] == snapshot.my_player)
            tree.expand(SearchTree.ROOT, self._expansion(tree, root_states, players[agent_id], focus_id))
            trees[agent_id] = tree

        iterations = 0
        timed_out = False
        while iterations < cfg.max_iterations:
            if iterations and iterations % cfg.time_check_interval == 0:
                if time.perf_counter() - started >= budget:
                    timed_out = True
                    break
            self._iterate(trees, root_states, players, focus_id)
            iterations += 1

        result = SearchResult(iterations=iterations, timed_out=timed_out)
        for agent_id, tree in trees.items():
            if not tree.controlled:
                continue
            best = tree.best_root_child()
            if best is None:
                result.decisions[agent_id] = Decision.hunker(HUNKER_VALUE, "search: no candidates")
                result.root_visits[agent_id] = 0
            else:
                result.decisions[agent_id] = best.decision
                result.root_visits[agent_id] = best.visits

        result.elapsed_ms = (time.perf_counter() - started) * 1000.0
        log.debug(
            "search turn=%d iterations=%d elapsed=%.1fms timed_out=%s",
            snapshot.turn, iterations, result.elapsed_ms, timed_out,
        )
        return result

    def _iterate(
        self,
        trees: Dict[int, SearchTree],
        root_states: AgentStates,
        players: Dict[int, int],
        focus_id: Optional[int],
    ) -> None:
        cfg = self.config
        profiles = self.generator.profiles
        states = {agent_id: s.copy() for agent_id, s in root_states.items()}
        current = {agent_id: SearchTree.ROOT for agent_id in trees}
        paths = {agent_id: [SearchTree.ROOT] for agent_id in trees}

        for _ in range(cfg.max_depth):
            acting = [agent_id for agent_id in trees if states[agent_id].alive]

            stalled = False
            for agent_id in acting:
                tree = trees[agent_id]
                node_index = current[agent_id]
                if tree.is_leaf(node_index):
                    node = tree.node(node_index)
                    if node.visits >= 1 and not node.expanded:
                        tree.expand(node_index, self._expansion(tree, states, players[agent_id], focus_id))
                    if tree.is_leaf(node_index):
                        stalled = True
            if stalled:
                break

            joint: Dict[int, Decision] = {}
            for agent_id in acting:
                tree = trees[agent_id]
                child = tree.select_child(current[agent_id], self.rng, cfg.exploration, cfg.warmup_visits)
                current[agent_id] = child
                paths[agent_id].append(child)
                joint[agent_id] = tree.node(child).decision

            self.simulator.step(states, joint)
            if is_terminal(states, profiles):
                break

        scores: Dict[int, float] = {}
        for agent_id, tree in trees.items():
            player = players[agent_id]
            if player not in scores:
                scores[player] = evaluate(states, profiles, player)
            tree.backpropagate(paths[agent_id], scores[player])
