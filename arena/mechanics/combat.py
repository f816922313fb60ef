"""
Combat model - pure functions for damage, movement cost and cover.

Every function here is total and deterministic: it never raises for
in-range numeric inputs and never touches shared state. Rollouts in the
search call these functions thousands of times per turn.

Distances:
- Shooting and throw range use Manhattan distance.
- Splash uses Chebyshev distance, so a bomb hits the 3x3 block around
  the landing tile.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

from ..core.types import GridPos

if TYPE_CHECKING:
    from ..world.board import Board


# ============================================================================
# CONSTANTS
# ============================================================================

THROW_DAMAGE = 30
THROW_DISTANCE_MAX = 4
SPLASH_RADIUS = 1
RANGE_FALLOFF = 0.25
MAX_WETNESS = 100


# ============================================================================
# DISTANCES
# ============================================================================

def manhattan(a: GridPos, b: GridPos) -> int:
    """Manhattan (taxicab) distance between two tiles."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def chebyshev(a: GridPos, b: GridPos) -> int:
    """Chebyshev (king-move) distance between two tiles."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


# ============================================================================
# DAMAGE
# ============================================================================

def attack_damage(power: int, optimal_range: int, distance: int) -> int:
    """
    Raw shot damage before cover.

    Damage is full at distance 1 and drops by 25% of power for each tile
    beyond that, up to and including the optimal range. Shots at distance
    0 or beyond the optimal range deal nothing.

    Args:
        power: Shooter's soaking power
        optimal_range: Shooter's optimal range
        distance: Manhattan distance to the target

    Returns:
        Non-negative integer damage
    """
    if distance <= 0 or distance > optimal_range:
        return 0
    multiplier = 1.0 - RANGE_FALLOFF * (distance - 1)
    return max(0, math.floor(power * multiplier))


def splash_damage(splash_distance: int, is_hunkered: bool = False) -> int:
    """
    Bomb damage at a given Chebyshev distance from the landing tile.

    Args:
        splash_distance: Chebyshev distance between landing tile and victim
        is_hunkered: Whether the victim is hunkered down this turn

    Returns:
        THROW_DAMAGE inside the splash footprint (halved when hunkered), else 0
    """
    if splash_distance < 0 or splash_distance > SPLASH_RADIUS:
        return 0
    return THROW_DAMAGE // 2 if is_hunkered else THROW_DAMAGE


def in_splash(landing: GridPos, pos: GridPos) -> bool:
    """Whether a tile lies inside the splash footprint of a landing tile."""
    return chebyshev(landing, pos) <= SPLASH_RADIUS


def movement_cost(wetness: int, enabled: bool = True) -> int:
    """
    Tiles of effort a single step costs a wet agent.

    Args:
        wetness: Agent wetness in [0, 100]
        enabled: When False, wetness does not slow agents down

    Returns:
        Integer cost >= 1
    """
    if not enabled:
        return 1
    return math.ceil(1 + wetness * 0.01)


def kill_probability(wetness: int, damage: int) -> float:
    """
    Linear proxy for the chance that a hit finishes the target.

    Args:
        wetness: Target wetness before the hit
        damage: Damage the hit deals

    Returns:
        1.0 if the hit reaches 100 wetness, else (wetness + damage) / 100
    """
    total = wetness + damage
    if total >= MAX_WETNESS:
        return 1.0
    return max(0.0, total / MAX_WETNESS)


# ============================================================================
# COVER
# ============================================================================

def cover_multiplier(shooter_pos: GridPos, target_pos: GridPos, board: Board) -> float:
    """
    Damage multiplier a target gains from cover between it and a shooter.

    For each axis on which the shooter is more than one tile away, the tile
    next to the target in the shooter's direction is inspected. Light cover
    halves damage and heavy cover quarters it. The lowest multiplier wins.

    Args:
        shooter_pos: Shooter tile
        target_pos: Target tile
        board: Board with terrain information

    Returns:
        One of 1.0, 0.5, 0.25
    """
    sx, sy = shooter_pos
    tx, ty = target_pos
    dx, dy = sx - tx, sy - ty
    best = 1.0

    if abs(dx) > 1:
        step = 1 if dx > 0 else -1
        best = min(best, _cover_at(board, (tx + step, ty)))
    if abs(dy) > 1:
        step = 1 if dy > 0 else -1
        best = min(best, _cover_at(board, (tx, ty + step)))

    return best


def _cover_at(board: Board, pos: GridPos) -> float:
    if not board.in_bounds(pos):
        return 1.0
    return board.terrain_at(pos).protection


def effective_attack_damage(
    power: int,
    optimal_range: int,
    shooter_pos: GridPos,
    target_pos: GridPos,
    board: Board,
) -> int:
    """Shot damage from one tile to another, with range falloff and cover."""
    raw = attack_damage(power, optimal_range, manhattan(shooter_pos, target_pos))
    if raw <= 0:
        return 0
    return math.floor(raw * cover_multiplier(shooter_pos, target_pos, board))


# ============================================================================
# TEAM-LEVEL SIGNALS
# ============================================================================

def tactical_advantage(my_alive: int, enemy_alive: int, my_health: int, enemy_health: int) -> float:
    """
    Weighted ratio of head count and total health between two sides.

    Values above 1.0 mean the first side is ahead.
    """
    count_ratio = my_alive / max(1, enemy_alive)
    health_ratio = my_health / max(1, enemy_health)
    return 0.6 * count_ratio + 0.4 * health_ratio
