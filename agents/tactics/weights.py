"""
Scoring constants for the action generator and arbitration.

All candidate values live on one unnormalized scale. The ordering that
matters most: any damaging attack (>= ATTACK_BASE_VALUE) outranks any
plain movement (<= MOVE_VALUE_CAP), while cover and kiting moves are
allowed to beat weak attacks when an agent is in danger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from arena.core.types import AgentClass

# ============================================================================
# ATTACKS
# ============================================================================

ATTACK_BASE_VALUE = 1600
ATTACK_DAMAGE_WEIGHT = 100
LETHAL_BONUS = 5000
KILL_PROB_WEIGHT = 3000

# ============================================================================
# THROWS
# ============================================================================

THROW_DAMAGE_WEIGHT = 40
THROW_KILL_WEIGHT = 1500
MULTI_HIT_BONUS = 1200
CRITICAL_HEALTH = 40
CRITICAL_THROW_MULTIPLIER = 5

# ============================================================================
# MOVEMENT
# ============================================================================

MOVE_BASE_VALUE = 150
MOVE_COST_PENALTY = 50
ENTER_RANGE_BONUS = 1000
IN_RANGE_BONUS = 500
WOUNDED_WETNESS = 50
WOUNDED_APPROACH_BONUS = 300
MOVE_VALUE_CAP = 1500

# ============================================================================
# DEFENSIVE
# ============================================================================

COVER_VALUE = 3000
COVER_SEARCH_RADIUS = 2
THREAT_RADIUS = 4
THREAT_ESTIMATE = 20
BOMB_THREAT_ESTIMATE = 30
INCOMING_THRESHOLD = 60
COVER_LOW_HEALTH = 50
COVER_BOMB_HEALTH = 70

KITE_VALUE = 2500
KITE_TRIGGER_RADIUS = 6
KITE_LOW_HEALTH = 60
KITE_BOMB_HEALTH = 80

HUNKER_VALUE = 50

# ============================================================================
# ARBITRATION
# ============================================================================

ADVERSARY_IN_RANGE = 100
ADVERSARY_CLOSE = 200
ADVERSARY_CLOSE_DISTANCE = 2

PRIORITY_BOMB_WEIGHT = 3000
PRIORITY_WETNESS_WEIGHT = 60
PRIORITY_DISTANCE_WEIGHT = 100
PRIORITY_DISTANCE_HORIZON = 10
PRIORITY_READY_BONUS = 1500

BOMB_OVERRIDE_HEALTH = 50

# ============================================================================
# SEARCH EVALUATION
# ============================================================================

WIPE_REWARD = 10000
HEALTH_WEIGHT = 5
ALIVE_WEIGHT = 500
BOMB_WEIGHT = 300
POSITION_BONUS = 200


# ============================================================================
# CLASS TABLE
# ============================================================================

@dataclass(frozen=True)
class ClassTactics:
    """
    Per-class adjustments to the shared scoring.

    Attributes:
        attack_bonus: Added to attack values when the distance falls in attack_band
        attack_band: Inclusive (min, max) Manhattan distance for attack_bonus
        move_band: Inclusive (min, max) distance to the focus enemy the class prefers
        move_band_bonus: Added to movement values landing inside move_band
        kite_distance: Distance a kiting agent retreats to (None: never kites)
    """

    attack_bonus: int = 0
    attack_band: Tuple[int, int] = (0, 0)
    move_band: Tuple[int, int] = (1, 4)
    move_band_bonus: int = 400
    kite_distance: Optional[int] = None

    def attack_bonus_at(self, distance: int) -> int:
        lo, hi = self.attack_band
        return self.attack_bonus if lo <= distance <= hi else 0

    def move_bonus_at(self, distance: int) -> int:
        lo, hi = self.move_band
        return self.move_band_bonus if lo <= distance <= hi else 0


CLASS_TACTICS: Dict[AgentClass, ClassTactics] = {
    AgentClass.SNIPER: ClassTactics(
        attack_bonus=2000, attack_band=(4, 99), move_band=(4, 6), move_band_bonus=700, kite_distance=5,
    ),
    AgentClass.GUNNER: ClassTactics(attack_bonus=1000, attack_band=(1, 2)),
    AgentClass.BERSERKER: ClassTactics(
        attack_bonus=1500, attack_band=(1, 2), move_band=(1, 2), move_band_bonus=800,
    ),
    AgentClass.BOMBER: ClassTactics(move_band=(1, 4), move_band_bonus=600),
    AgentClass.ASSAULT: ClassTactics(),
}


def tactics_for(agent_class: AgentClass) -> ClassTactics:
    return CLASS_TACTICS[agent_class]
