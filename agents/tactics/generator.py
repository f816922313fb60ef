"""
Action generator - scored candidate decisions for a single agent.

The generator looks at one agent at a time and proposes every action that
makes tactical sense from its tile: shots, bomb throws, steps, step-then-act
combinations, retreats into cover and sniper kiting. Each candidate carries
an expected value on one shared scale so callers can simply take the max.

Every method is side-effect free: the same inputs always produce the same
candidates in the same order.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from arena.core.decision import Decision
from arena.core.types import AgentClass, GridPos
from arena.entities.profile import AgentProfile, ProfileTable
from arena.entities.state import AgentState
from arena.mechanics import (
    THROW_DAMAGE,
    THROW_DISTANCE_MAX,
    cover_multiplier,
    effective_attack_damage,
    in_splash,
    kill_probability,
    manhattan,
    movement_cost,
    tactical_advantage,
)
from arena.world.board import Board
from infra.config import EngineConfig
from infra.logger import get_logger

from .weights import (
    ATTACK_BASE_VALUE,
    ATTACK_DAMAGE_WEIGHT,
    BOMB_THREAT_ESTIMATE,
    COVER_BOMB_HEALTH,
    COVER_LOW_HEALTH,
    COVER_SEARCH_RADIUS,
    COVER_VALUE,
    CRITICAL_HEALTH,
    CRITICAL_THROW_MULTIPLIER,
    ENTER_RANGE_BONUS,
    HUNKER_VALUE,
    IN_RANGE_BONUS,
    INCOMING_THRESHOLD,
    KILL_PROB_WEIGHT,
    KITE_BOMB_HEALTH,
    KITE_LOW_HEALTH,
    KITE_TRIGGER_RADIUS,
    KITE_VALUE,
    LETHAL_BONUS,
    MOVE_BASE_VALUE,
    MOVE_COST_PENALTY,
    MOVE_VALUE_CAP,
    MULTI_HIT_BONUS,
    THREAT_ESTIMATE,
    THREAT_RADIUS,
    THROW_DAMAGE_WEIGHT,
    THROW_KILL_WEIGHT,
    WOUNDED_APPROACH_BONUS,
    WOUNDED_WETNESS,
    tactics_for,
)

log = get_logger(__name__)


def best_of(candidates: Iterable[Decision]) -> Optional[Decision]:
    """Highest-valued decision; the earliest one wins ties."""
    best: Optional[Decision] = None
    for candidate in candidates:
        if best is None or candidate.expected_value > best.expected_value:
            best = candidate
    return best


class ActionGenerator:
    """
    Per-agent candidate generator.

    Attributes:
        board: Terrain grid
        profiles: Static profile table
        config: Engine configuration (rule flags, search breadth)
    """

    def __init__(self, board: Board, profiles: ProfileTable, config: Optional[EngineConfig] = None):
        self.board = board
        self.profiles = profiles
        self.config = config or EngineConfig()

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _living(agents: Iterable[AgentState], exclude: Optional[int] = None) -> List[AgentState]:
        return [a for a in agents if a.alive and a.agent_id != exclude]

    def _occupied(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState],
    ) -> Set[GridPos]:
        return {a.pos for a in self._living(list(enemies) + list(allies), exclude=agent.agent_id)}

    def _focus(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        focus: Optional[AgentState],
    ) -> Optional[AgentState]:
        if focus is not None and focus.alive:
            return focus
        living = self._living(enemies)
        if not living:
            return None
        return min(living, key=lambda e: manhattan(agent.pos, e.pos))

    def step_destinations(
        self,
        agent: AgentState,
        occupied: Set[GridPos],
        extended: bool = False,
    ) -> List[GridPos]:
        """
        Enterable tiles around an agent.

        Args:
            agent: Moving agent
            occupied: Tiles held by other living agents
            extended: Also include tiles two king-moves away

        Returns:
            Walkable, unoccupied, in-bounds tiles in stable order
        """
        radius = 2 if extended else 1
        return [
            pos for pos in self.board.positions_within(agent.pos, radius)
            if self.board.is_walkable(pos) and pos not in occupied
        ]

    # ------------------------------------------------------------------
    # Attacks
    # ------------------------------------------------------------------
    def score_attack(
        self,
        profile: AgentProfile,
        origin: GridPos,
        enemy: AgentState,
    ) -> Optional[Tuple[float, int, float]]:
        """
        Value of shooting an enemy from a tile.

        Returns:
            (value, effective damage, kill probability) or None if the shot deals nothing
        """
        raw = effective_attack_damage(profile.power, profile.optimal_range, origin, enemy.pos, self.board)
        if raw <= 0:
            return None

        effective = min(raw, enemy.health)
        kp = kill_probability(enemy.wetness, raw)
        lethal = raw >= enemy.health
        distance = manhattan(origin, enemy.pos)

        value = ATTACK_BASE_VALUE + effective * ATTACK_DAMAGE_WEIGHT
        value += LETHAL_BONUS if lethal else kp * KILL_PROB_WEIGHT
        value += tactics_for(profile.agent_class).attack_bonus_at(distance)
        value *= 1 + enemy.wetness / 100
        return value, effective, kp

    def attack_candidates(self, agent: AgentState, enemies: Sequence[AgentState]) -> List[Decision]:
        """One ATTACK per living enemy the agent can damage from its tile."""
        if not agent.ready:
            return []
        profile = self.profiles.get(agent.agent_id)

        candidates = []
        for enemy in self._living(enemies):
            scored = self.score_attack(profile, agent.pos, enemy)
            if scored is None:
                continue
            value, damage, kp = scored
            log.debug("attack %s -> %d: dmg=%d kp=%.2f value=%.1f", profile.label(), enemy.agent_id, damage, kp, value)
            candidates.append(
                Decision.attack(
                    enemy.agent_id,
                    value=value,
                    damage=damage,
                    kill_probability=kp,
                    rationale=f"shoot {enemy.agent_id} for {damage}",
                )
            )
        return candidates

    def best_attack(self, agent: AgentState, enemies: Sequence[AgentState]) -> Decision:
        """Best attack, or a zero-valued hunker when no shot is available."""
        return best_of(self.attack_candidates(agent, enemies)) or Decision.hunker(0.0, "no shot")

    # ------------------------------------------------------------------
    # Throws
    # ------------------------------------------------------------------
    def score_throw(
        self,
        agent: AgentState,
        origin: GridPos,
        landing: GridPos,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState],
    ) -> Optional[Tuple[float, int, float]]:
        """
        Value of a bomb landing on a tile when thrown from origin.

        Landings that would splash any living ally, the thrower included,
        are rejected.

        Returns:
            (value, total damage, summed kill probability) or None if invalid
        """
        if not self.board.in_bounds(landing) or manhattan(origin, landing) > THROW_DISTANCE_MAX:
            return None
        if in_splash(landing, origin):
            return None
        for ally in self._living(allies, exclude=agent.agent_id):
            if in_splash(landing, ally.pos):
                return None

        hits = [e for e in self._living(enemies) if in_splash(landing, e.pos)]
        if not hits:
            return None

        total = sum(min(THROW_DAMAGE, e.health) for e in hits)
        kp_sum = sum(kill_probability(e.wetness, THROW_DAMAGE) for e in hits)
        value = ATTACK_BASE_VALUE + total * THROW_DAMAGE_WEIGHT + kp_sum * THROW_KILL_WEIGHT
        if len(hits) > 1:
            value += len(hits) * MULTI_HIT_BONUS
        if agent.health <= CRITICAL_HEALTH:
            value *= CRITICAL_THROW_MULTIPLIER
        return value, total, kp_sum

    def _landings(self, enemies: Sequence[AgentState]) -> List[GridPos]:
        seen: Set[GridPos] = set()
        landings = []
        for enemy in self._living(enemies):
            ex, ey = enemy.pos
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    tile = (ex + dx, ey + dy)
                    if tile not in seen and self.board.in_bounds(tile):
                        seen.add(tile)
                        landings.append(tile)
        return landings

    def _throws_from(
        self,
        agent: AgentState,
        origin: GridPos,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState],
    ) -> List[Tuple[GridPos, float, int, float]]:
        if agent.bombs <= 0 or not agent.ready:
            return []
        scored = []
        for landing in self._landings(enemies):
            result = self.score_throw(agent, origin, landing, enemies, allies)
            if result is not None:
                scored.append((landing,) + result)
        return scored

    def throw_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
    ) -> List[Decision]:
        """THROW candidates for every safe landing tile in reach."""
        candidates = []
        for landing, value, damage, kp_sum in self._throws_from(agent, agent.pos, enemies, allies):
            candidates.append(
                Decision.throw(
                    landing[0],
                    landing[1],
                    value=value,
                    damage=damage,
                    kill_probability=min(1.0, kp_sum),
                    rationale=f"bomb {landing} for {damage}",
                )
            )
        return candidates

    def best_throw(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
    ) -> Decision:
        """Best throw, or a zero-valued hunker when none is possible."""
        return best_of(self.throw_candidates(agent, enemies, allies)) or Decision.hunker(0.0, "no throw")

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------
    def movement_value(self, agent: AgentState, dest: GridPos, enemy: Optional[AgentState]) -> float:
        """
        Positional value of standing on a tile relative to a focus enemy.

        The result never exceeds MOVE_VALUE_CAP, so a plain step can not
        outrank a damaging attack.
        """
        profile = self.profiles.get(agent.agent_id)
        cost = movement_cost(agent.wetness, self.config.wetness_affects_distance)
        value = MOVE_BASE_VALUE - (cost - 1) * MOVE_COST_PENALTY

        if enemy is not None:
            before = manhattan(agent.pos, enemy.pos)
            after = manhattan(dest, enemy.pos)
            if after <= profile.optimal_range < before:
                value += ENTER_RANGE_BONUS
            elif after <= profile.optimal_range:
                value += IN_RANGE_BONUS
            value += tactics_for(profile.agent_class).move_bonus_at(after)
            if enemy.wetness > WOUNDED_WETNESS and after < before:
                value += WOUNDED_APPROACH_BONUS

        return min(value, MOVE_VALUE_CAP)

    def movement_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
        focus: Optional[AgentState] = None,
        extended: bool = False,
    ) -> List[Decision]:
        """MOVE candidates to every enterable neighbouring tile."""
        if not agent.alive:
            return []
        occupied = self._occupied(agent, enemies, allies)
        target = self._focus(agent, enemies, focus)

        candidates = []
        for dest in self.step_destinations(agent, occupied, extended=extended):
            value = self.movement_value(agent, dest, target)
            candidates.append(Decision.move(dest[0], dest[1], value=value, rationale="reposition"))
        return candidates

    # ------------------------------------------------------------------
    # Compound (move, then act)
    # ------------------------------------------------------------------
    def compound_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
        focus: Optional[AgentState] = None,
    ) -> List[Decision]:
        """
        Step-then-act candidates.

        A MOVE_ATTACK is proposed only when the shot from the new tile deals
        more effective damage (or turns lethal) compared to the current tile.
        A MOVE_THROW is proposed only when it beats every throw available
        without moving.
        """
        if not agent.ready:
            return []
        living_enemies = self._living(enemies)
        if not living_enemies:
            return []

        profile = self.profiles.get(agent.agent_id)
        occupied = self._occupied(agent, enemies, allies)
        target = self._focus(agent, enemies, focus)
        stay_value = self.movement_value(agent, agent.pos, target)

        current_attacks = {}
        for enemy in living_enemies:
            scored = self.score_attack(profile, agent.pos, enemy)
            current_attacks[enemy.agent_id] = scored

        current_throws = self._throws_from(agent, agent.pos, enemies, allies)
        best_current_throw = max((t[1] for t in current_throws), default=0.0)

        candidates = []
        for dest in self.step_destinations(agent, occupied):
            improvement = max(0.0, self.movement_value(agent, dest, target) - stay_value)

            for enemy in living_enemies:
                scored = self.score_attack(profile, dest, enemy)
                if scored is None or not self._improves(scored, current_attacks[enemy.agent_id], enemy):
                    continue
                value, damage, kp = scored
                candidates.append(
                    Decision.move_attack(
                        dest[0], dest[1], enemy.agent_id,
                        value=value + improvement,
                        damage=damage,
                        kill_probability=kp,
                        rationale=f"step to {dest} and shoot {enemy.agent_id}",
                    )
                )

            for landing, value, damage, kp_sum in self._throws_from(agent, dest, enemies, allies):
                if value <= best_current_throw:
                    continue
                candidates.append(
                    Decision.move_throw(
                        dest[0], dest[1], landing[0], landing[1],
                        value=value + improvement,
                        damage=damage,
                        kill_probability=min(1.0, kp_sum),
                        rationale=f"step to {dest} and bomb {landing}",
                    )
                )
        return candidates

    @staticmethod
    def _improves(
        moved: Tuple[float, int, float],
        current: Optional[Tuple[float, int, float]],
        enemy: AgentState,
    ) -> bool:
        if current is None:
            return True
        moved_lethal = moved[1] >= enemy.health
        current_lethal = current[1] >= enemy.health
        if moved_lethal and not current_lethal:
            return True
        return moved[1] > current[1]

    # ------------------------------------------------------------------
    # Defensive
    # ------------------------------------------------------------------
    def cover_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
    ) -> List[Decision]:
        """
        A retreat into cover when the agent is under pressure.

        Pressure means two or more nearby threats while wounded, a high
        incoming-damage estimate, being outnumbered by more than one, or a
        nearby bomb carrier while hurt.
        """
        if not agent.alive:
            return []
        living_enemies = self._living(enemies)
        threats = [e for e in living_enemies if manhattan(agent.pos, e.pos) <= THREAT_RADIUS]
        if not threats:
            return []

        estimate = sum(THREAT_ESTIMATE + (BOMB_THREAT_ESTIMATE if e.bombs > 0 else 0) for e in threats)
        bomb_threat = any(e.bombs > 0 for e in threats)
        team_size = len(self._living(allies, exclude=agent.agent_id)) + 1

        triggered = (
            (agent.health <= COVER_LOW_HEALTH and len(threats) >= 2)
            or estimate >= INCOMING_THRESHOLD
            or len(living_enemies) > team_size + 1
            or (agent.health <= COVER_BOMB_HEALTH and bomb_threat)
        )
        if not triggered:
            return []

        nearest = min(threats, key=lambda e: manhattan(agent.pos, e.pos))
        if cover_multiplier(nearest.pos, agent.pos, self.board) < 1.0:
            return []

        occupied = self._occupied(agent, enemies, allies)
        for pos in self.board.positions_within(agent.pos, COVER_SEARCH_RADIUS):
            if not self.board.is_walkable(pos) or pos in occupied:
                continue
            if cover_multiplier(nearest.pos, pos, self.board) < 1.0:
                log.debug("cover for %d at %s (estimate=%d)", agent.agent_id, pos, estimate)
                return [Decision.move(pos[0], pos[1], value=COVER_VALUE, rationale=f"cover from {nearest.agent_id}")]
        return []

    def kiting_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
    ) -> List[Decision]:
        """
        Snipers fall back to their preferred distance when pressed.

        Kiting triggers when the team is not ahead and the sniper is hurt
        or a bomb carrier is close, or when a bomb carrier is close and
        the sniper has taken any real damage.
        """
        if not agent.alive:
            return []
        profile = self.profiles.get(agent.agent_id)
        kite_distance = tactics_for(profile.agent_class).kite_distance
        if profile.agent_class != AgentClass.SNIPER or kite_distance is None:
            return []

        living_enemies = self._living(enemies)
        if not living_enemies:
            return []

        team = [agent] + self._living(allies, exclude=agent.agent_id)
        advantage = tactical_advantage(
            len(team),
            len(living_enemies),
            sum(a.health for a in team),
            sum(e.health for e in living_enemies),
        ) > 1.0
        bomber_threat = any(
            e.bombs > 0 and manhattan(agent.pos, e.pos) <= KITE_TRIGGER_RADIUS for e in living_enemies
        )

        triggered = (
            (not advantage and (agent.health <= KITE_LOW_HEALTH or bomber_threat))
            or (bomber_threat and agent.health <= KITE_BOMB_HEALTH)
        )
        if not triggered:
            return []

        nearest = min(living_enemies, key=lambda e: manhattan(agent.pos, e.pos))
        dx = agent.x - nearest.x
        dy = agent.y - nearest.y
        norm = math.hypot(dx, dy)
        if norm == 0:
            return []

        dest = self.board.clamp((
            nearest.x + round(dx / norm * kite_distance),
            nearest.y + round(dy / norm * kite_distance),
        ))
        occupied = self._occupied(agent, enemies, allies)
        if dest == agent.pos or not self.board.is_walkable(dest) or dest in occupied:
            return []
        return [Decision.move(dest[0], dest[1], value=KITE_VALUE, rationale=f"kite from {nearest.agent_id}")]

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
        focus: Optional[AgentState] = None,
    ) -> List[Decision]:
        """Every candidate for an agent, plus a nominal hunker."""
        if not agent.alive:
            return []
        return (
            self.attack_candidates(agent, enemies)
            + self.throw_candidates(agent, enemies, allies)
            + self.movement_candidates(agent, enemies, allies, focus)
            + self.compound_candidates(agent, enemies, allies, focus)
            + self.cover_candidates(agent, enemies, allies)
            + self.kiting_candidates(agent, enemies, allies)
            + [Decision.hunker(HUNKER_VALUE, "hold")]
        )

    def search_candidates(
        self,
        agent: AgentState,
        enemies: Sequence[AgentState],
        allies: Sequence[AgentState] = (),
        focus: Optional[AgentState] = None,
        top_moves: Optional[int] = None,
    ) -> List[Decision]:
        """
        Compact candidate set for search expansion.

        Best attack, best throw, best compound, the defensive move if any,
        the top movement candidates (two-step reach) and a nominal hunker,
        sorted by value.
        """
        if not agent.alive:
            return []
        limit = self.config.search_top_moves if top_moves is None else top_moves

        chosen: List[Decision] = []
        for pool in (
            self.attack_candidates(agent, enemies),
            self.throw_candidates(agent, enemies, allies),
            self.compound_candidates(agent, enemies, allies, focus),
            self.cover_candidates(agent, enemies, allies) + self.kiting_candidates(agent, enemies, allies),
        ):
            best = best_of(pool)
            if best is not None:
                chosen.append(best)

        moves = self.movement_candidates(agent, enemies, allies, focus, extended=True)
        moves.sort(key=lambda d: -d.expected_value)
        chosen.extend(moves[:limit])
        chosen.append(Decision.hunker(HUNKER_VALUE, "hold"))

        chosen.sort(key=lambda d: -d.expected_value)
        return chosen
