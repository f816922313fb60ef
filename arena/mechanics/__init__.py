"""
Mechanics module - combat model.

Stateless, deterministic functions for damage, splash, cover, movement
cost and kill likelihood. Both the action generator and the search
rollouts are built on top of them.
"""

from .combat import (
    THROW_DAMAGE,
    THROW_DISTANCE_MAX,
    SPLASH_RADIUS,
    attack_damage,
    splash_damage,
    in_splash,
    movement_cost,
    cover_multiplier,
    effective_attack_damage,
    kill_probability,
    tactical_advantage,
    manhattan,
    chebyshev,
)

__all__ = [
    "THROW_DAMAGE",
    "THROW_DISTANCE_MAX",
    "SPLASH_RADIUS",
    "attack_damage",
    "splash_damage",
    "in_splash",
    "movement_cost",
    "cover_multiplier",
    "effective_attack_damage",
    "kill_probability",
    "tactical_advantage",
    "manhattan",
    "chebyshev",
]
