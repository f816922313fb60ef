import math

import pytest

from arena.mechanics import (
    attack_damage,
    chebyshev,
    cover_multiplier,
    effective_attack_damage,
    in_splash,
    kill_probability,
    manhattan,
    movement_cost,
    splash_damage,
    tactical_advantage,
)
from arena.world import Board


@pytest.mark.parametrize("power,optimal_range", [(20, 4), (24, 6), (32, 2), (16, 1)])
def test_attack_damage_over_whole_range(power, optimal_range):
    for distance in range(0, optimal_range + 4):
        expected = 0
        if 0 < distance <= optimal_range:
            expected = max(0, math.floor(power * (1 - 0.25 * (distance - 1))))
        assert attack_damage(power, optimal_range, distance) == expected


def test_attack_damage_known_values():
    assert [attack_damage(20, 4, d) for d in range(0, 6)] == [0, 20, 15, 10, 5, 0]


def test_splash_is_nonzero_only_within_one_tile():
    assert splash_damage(0) == 30
    assert splash_damage(1) == 30
    assert splash_damage(2) == 0
    assert splash_damage(-1) == 0


def test_splash_is_halved_for_hunkered_victims():
    assert splash_damage(0, is_hunkered=True) == 15
    assert splash_damage(1, is_hunkered=True) == 15
    assert splash_damage(3, is_hunkered=True) == 0


def test_in_splash_uses_king_distance():
    assert in_splash((2, 2), (3, 3))
    assert not in_splash((2, 2), (4, 2))
    assert chebyshev((0, 0), (2, 1)) == 2
    assert manhattan((0, 0), (2, 1)) == 3


def test_movement_cost():
    assert movement_cost(0) == 1
    assert movement_cost(1) == 2
    assert movement_cost(99) == 2
    assert movement_cost(100) == 2
    assert movement_cost(80, enabled=False) == 1


def test_kill_probability():
    assert kill_probability(90, 10) == 1.0
    assert kill_probability(95, 30) == 1.0
    assert kill_probability(20, 30) == pytest.approx(0.5)
    assert kill_probability(0, 0) == 0.0


def test_cover_multiplier(covered_board):
    # Shooter two or more tiles left of the target: the tile to its left counts.
    assert cover_multiplier((0, 2), (3, 2), covered_board) == 0.5
    assert cover_multiplier((1, 2), (3, 2), covered_board) == 0.5
    # Adjacent shooters ignore cover.
    assert cover_multiplier((2, 3), (3, 2), covered_board) == 1.0
    # Both axes checked; heavy cover wins.
    assert cover_multiplier((0, 0), (3, 2), covered_board) == 0.25
    # Cover on the far side does not help.
    assert cover_multiplier((4, 4), (3, 2), covered_board) == 1.0


def test_effective_attack_damage_applies_cover(covered_board):
    assert effective_attack_damage(20, 4, (0, 2), (3, 2), covered_board) == 5
    assert effective_attack_damage(20, 4, (3, 4), (3, 2), covered_board) == 15
    assert effective_attack_damage(20, 2, (0, 2), (3, 2), covered_board) == 0


def test_cover_multiplier_on_open_board():
    board = Board(3, 3)
    assert cover_multiplier((2, 0), (0, 0), board) == 1.0


def test_tactical_advantage():
    assert tactical_advantage(2, 1, 200, 100) == pytest.approx(2.0)
    assert tactical_advantage(1, 1, 50, 100) == pytest.approx(0.8)
    assert tactical_advantage(1, 0, 100, 0) == pytest.approx(40.6)
