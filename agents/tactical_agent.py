"""
Tactical agent - the per-turn orchestrator.

Each turn the agent:
1. Splits living agents into own and opposing sides
2. Picks the team's priority target
3. Chooses a mode: cooperative search when enough agents are engaged and
   the opening turns are over, per-agent heuristics otherwise
4. Lets each agent switch to the priority target when that costs little
5. Resolves clashing move destinations
6. Emits exactly one decision per own agent

Any unexpected failure degrades the whole turn to hunkering; a missing
profile degrades only the agent it belongs to.
"""

from __future__ import annotations

import random
import time
from typing import Any, Dict, List, Optional, Set, Tuple

from arena.core.decision import Decision
from arena.core.errors import UnknownAgentError
from arena.core.types import StrategyMode
from arena.entities.state import AgentState
from arena.mechanics import in_splash, manhattan
from arena.world.snapshot import TurnSnapshot
from infra.config import EngineConfig
from infra.logger import get_logger
from infra.trace import DecisionSink, NullSink, TurnRecord

from .base_agent import BaseAgent
from .coordination import resolve_collisions
from .registry import register_agent
from .search.cache import SearchCache
from .search.smitsimax import CooperativeSearch
from .tactics.generator import ActionGenerator, best_of
from .tactics.weights import (
    ADVERSARY_CLOSE,
    ADVERSARY_CLOSE_DISTANCE,
    ADVERSARY_IN_RANGE,
    BOMB_OVERRIDE_HEALTH,
    HUNKER_VALUE,
)
from .team_intel import TeamIntel

log = get_logger(__name__)


@register_agent("tactical")
class TacticalAgent(BaseAgent):
    """
    Turn orchestrator combining heuristics, search and arbitration.

    Attributes:
        config: Engine configuration
        sink: Receiver of per-turn diagnostics
        cache: Memoized search results
    """

    def __init__(
        self,
        player: int,
        name: str | None = None,
        *,
        config: EngineConfig | None = None,
        sink: DecisionSink | None = None,
        cache: SearchCache | None = None,
        **_: Any,
    ):
        """
        Initialize the tactical agent.

        Args:
            player: Side to control
            name: Optional agent name (default: "TacticalAgent")
            config: Engine configuration (defaults to EngineConfig())
            sink: Diagnostics sink (defaults to NullSink)
            cache: Search cache (defaults to one sized by config.cache_size)
        """
        super().__init__(player, name)
        self.config = config or EngineConfig()
        self.sink: DecisionSink = sink or NullSink()
        self.cache = cache if cache is not None else SearchCache(self.config.cache_size)

    def reset(self) -> None:
        self.cache.clear()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def get_decisions(self, snapshot: TurnSnapshot) -> Tuple[Dict[int, Decision], Dict[str, Any]]:
        """
        Decide one action per living own agent.

        Never raises: failures fall back to hunkering every own agent.
        """
        started = time.perf_counter()
        try:
            decisions, record = self._decide(snapshot)
        except Exception as exc:
            log.exception("Turn %d: decision failed, hunkering all agents", snapshot.turn)
            decisions = self.hunker_all(snapshot, rationale="recovery")
            record = TurnRecord(turn=snapshot.turn, mode=StrategyMode.FALLBACK, errors=[repr(exc)])

        record.decisions = decisions
        record.elapsed_ms = (time.perf_counter() - started) * 1000.0
        self.sink.record(record)

        log.info(
            "Turn %d: mode=%s target=%s decisions=%s (%.1fms)",
            snapshot.turn,
            record.mode,
            record.priority_target,
            {k: str(d) for k, d in decisions.items()},
            record.elapsed_ms,
        )
        metadata: Dict[str, Any] = {
            "policy": "tactical",
            "mode": str(record.mode),
            "priority_target": record.priority_target,
            "iterations": record.iterations,
            "cache_hit": record.cache_hit,
            "cache": self.cache.stats(),
        }
        return decisions, metadata

    # ------------------------------------------------------------------
    # Turn pipeline
    # ------------------------------------------------------------------
    def _decide(self, snapshot: TurnSnapshot) -> Tuple[Dict[int, Decision], TurnRecord]:
        if snapshot.my_player != self.player:
            raise ValueError(f"Snapshot is for player {snapshot.my_player}, agent controls {self.player}")

        intel = TeamIntel.build(snapshot, self.player)
        generator = ActionGenerator(snapshot.board, snapshot.profiles, self.config)
        target = intel.priority_target()

        record = TurnRecord(
            turn=snapshot.turn,
            mode=self._select_mode(snapshot, intel),
            priority_target=target.agent_id if target is not None else None,
            tactical_advantage=intel.tactical_advantage(),
            territory=intel.territory(),
        )

        failed: Set[int] = set()
        if record.mode == StrategyMode.SEARCH:
            decisions = self._search(snapshot, generator, target, record)
        else:
            decisions = {}
            for agent in intel.friendlies:
                decisions[agent.agent_id] = self._guarded(
                    agent, record, failed, lambda a=agent: self._heuristic(generator, intel, a, target)
                )

        # Heuristic choices already carry the exposure penalty; focus options must too.
        penalize = record.mode == StrategyMode.HEURISTIC
        for agent in intel.friendlies:
            if agent.agent_id in failed:
                continue
            chosen = decisions.get(agent.agent_id) or Decision.hunker(HUNKER_VALUE, "missing")
            decisions[agent.agent_id] = self._guarded(
                agent,
                record,
                failed,
                lambda a=agent, c=chosen: self._focus_fire(generator, intel, a, c, target, penalize),
            )

        ordered = {a.agent_id: decisions[a.agent_id] for a in intel.friendlies}
        return resolve_collisions(snapshot, ordered, self.config.collisions), record

    def _select_mode(self, snapshot: TurnSnapshot, intel: TeamIntel) -> StrategyMode:
        if (
            len(intel.friendlies) >= 2
            and intel.enemies
            and snapshot.turn >= self.config.search_min_turn
        ):
            return StrategyMode.SEARCH
        return StrategyMode.HEURISTIC

    def _guarded(self, agent: AgentState, record: TurnRecord, failed: Set[int], decide) -> Decision:
        """Run one agent's decision step; a missing profile hunkers that agent for the rest of the turn."""
        try:
            return decide()
        except UnknownAgentError as exc:
            log.warning("Turn %d: agent %d hunkers (%s)", record.turn, agent.agent_id, exc)
            record.errors.append(str(exc))
            failed.add(agent.agent_id)
            return Decision.hunker(rationale="unknown profile")

    # ------------------------------------------------------------------
    # Search mode
    # ------------------------------------------------------------------
    def _search(
        self,
        snapshot: TurnSnapshot,
        generator: ActionGenerator,
        target: Optional[AgentState],
        record: TurnRecord,
    ) -> Dict[int, Decision]:
        key = snapshot.canonical_key(self.config.cache_wetness_bucket)
        cached = self.cache.get(key)
        if cached is not None:
            record.mode = StrategyMode.CACHED
            record.cache_hit = True
            return cached

        seed = self.config.rng_seed
        rng = random.Random(None if seed is None else seed + snapshot.turn)
        result = CooperativeSearch(generator, self.config, rng).run(snapshot, target)
        record.iterations = result.iterations
        self.cache.put(key, result.decisions)
        return dict(result.decisions)

    # ------------------------------------------------------------------
    # Heuristic mode
    # ------------------------------------------------------------------
    def _heuristic(
        self,
        generator: ActionGenerator,
        intel: TeamIntel,
        agent: AgentState,
        target: Optional[AgentState],
    ) -> Decision:
        candidates = generator.candidates(agent, intel.enemies, intel.friendlies, focus=target)
        adjusted = [
            c.with_value(c.expected_value - self.adversary_penalty(intel, agent, c))
            for c in candidates
        ]

        chosen = best_of(adjusted)
        if chosen is None or chosen.expected_value < 0:
            chosen = Decision.hunker(HUNKER_VALUE, "too exposed")

        if agent.health <= BOMB_OVERRIDE_HEALTH and not chosen.kind.throws:
            best_throw = best_of(c for c in adjusted if c.kind.throws)
            if best_throw is not None and best_throw.expected_value > self.config.bomb_override_ratio * chosen.expected_value:
                log.debug("agent %d: bomb override %s over %s", agent.agent_id, best_throw, chosen)
                chosen = best_throw

        return chosen

    def adversary_penalty(self, intel: TeamIntel, agent: AgentState, decision: Decision) -> float:
        """
        Exposure cost of ending the turn where a decision leaves the agent.

        Each enemy that could shoot the final tile adds ADVERSARY_IN_RANGE,
        and one standing within ADVERSARY_CLOSE_DISTANCE adds ADVERSARY_CLOSE
        on top.
        """
        future = decision.destination or agent.pos
        penalty = 0
        for enemy in intel.enemies:
            distance = manhattan(future, enemy.pos)
            if distance <= intel.profile(enemy.agent_id).optimal_range:
                penalty += ADVERSARY_IN_RANGE
            if distance <= ADVERSARY_CLOSE_DISTANCE:
                penalty += ADVERSARY_CLOSE
        return penalty * self.config.adversary_penalty_weight

    # ------------------------------------------------------------------
    # Focus fire
    # ------------------------------------------------------------------
    def _focus_fire(
        self,
        generator: ActionGenerator,
        intel: TeamIntel,
        agent: AgentState,
        chosen: Decision,
        target: Optional[AgentState],
        penalize: bool = False,
    ) -> Decision:
        """
        Switch to a shot at the priority target when it is worth at least
        focus_fire_ratio of the chosen decision.

        With penalize set, focus options are scored net of adversary_penalty,
        matching heuristic-mode choices.
        """
        if target is None or not agent.ready:
            return chosen
        if chosen.kind.attacks and chosen.target_id == target.agent_id:
            return chosen
        if chosen.kind.throws and in_splash(chosen.landing, target.pos):
            return chosen

        options: List[Decision] = [
            c for c in generator.attack_candidates(agent, [target])
        ] + [
            c for c in generator.throw_candidates(agent, intel.enemies, intel.friendlies)
            if in_splash(c.landing, target.pos)
        ]
        if penalize:
            options = [c.with_value(c.expected_value - self.adversary_penalty(intel, agent, c)) for c in options]
        focus = best_of(options)
        if focus is None:
            return chosen
        if focus.expected_value >= self.config.focus_fire_ratio * chosen.expected_value:
            log.debug("agent %d: focus fire on %d (%s)", agent.agent_id, target.agent_id, focus)
            return focus.with_value(focus.expected_value, f"focus {target.agent_id}: {focus.rationale}")
        return chosen
