import pytest

from arena.core.types import DecisionKind, TerrainType
from arena.entities import AgentState
from arena.mechanics import in_splash
from arena.world import Board
from agents.tactics import ActionGenerator, best_of
from agents.tactics.weights import COVER_VALUE, HUNKER_VALUE, KITE_VALUE, MOVE_VALUE_CAP

from conftest import make_profiles

GUNNERS = [(1, 0, 1, 4, 20, 0), (2, 0, 1, 4, 20, 0), (3, 1, 1, 4, 20, 0), (4, 1, 1, 4, 20, 0)]


def _generator(rows, board=None):
    return ActionGenerator(board or Board(8, 6), make_profiles(rows))


def test_candidates_are_idempotent():
    rows = [(1, 0, 1, 2, 16, 3), (2, 0, 1, 4, 20, 0), (3, 1, 1, 4, 20, 1), (4, 1, 1, 6, 24, 0)]
    gen = _generator(rows)
    agent = AgentState(1, 1, 2, bombs=3, wetness=30)
    allies = [agent, AgentState(2, 0, 4)]
    enemies = [AgentState(3, 4, 2, bombs=1, wetness=55), AgentState(4, 5, 3)]

    first = gen.candidates(agent, enemies, allies)
    second = gen.candidates(agent, enemies, allies)
    assert first == second
    assert gen.search_candidates(agent, enemies, allies) == gen.search_candidates(agent, enemies, allies)
    assert agent == AgentState(1, 1, 2, bombs=3, wetness=30)


def test_attack_scoring():
    gen = _generator(GUNNERS)
    agent = AgentState(1, 0, 0)
    attacks = gen.attack_candidates(agent, [AgentState(3, 3, 0), AgentState(4, 7, 5)])
    assert len(attacks) == 1
    assert attacks[0].target_id == 3
    assert attacks[0].expected_damage == 10
    assert attacks[0].kill_probability == pytest.approx(0.1)


def test_lethal_shot_has_full_kill_probability():
    gen = _generator(GUNNERS)
    shot = gen.best_attack(AgentState(2, 1, 0), [AgentState(3, 4, 0, wetness=90)])
    assert shot.kind == DecisionKind.ATTACK
    assert shot.expected_damage == 10
    assert shot.kill_probability == 1.0


def test_cooling_down_agent_has_no_offensive_candidates():
    rows = [(1, 0, 2, 2, 16, 3), (3, 1, 1, 4, 20, 0)]
    gen = _generator(rows)
    agent = AgentState(1, 2, 2, cooldown=1, bombs=3)
    enemies = [AgentState(3, 3, 2)]
    kinds = {c.kind for c in gen.candidates(agent, enemies, [agent])}
    assert not any(kind.is_offensive for kind in kinds)


def test_throws_never_splash_allies():
    rows = [(1, 0, 1, 2, 16, 3), (2, 0, 1, 4, 20, 0), (3, 1, 1, 4, 20, 0), (4, 1, 1, 4, 20, 0)]
    gen = _generator(rows)
    agent = AgentState(1, 0, 2, bombs=3)
    ally = AgentState(2, 3, 3)
    enemies = [AgentState(3, 3, 2), AgentState(4, 5, 2)]

    throws = gen.throw_candidates(agent, enemies, [agent, ally])
    assert throws
    for decision in throws:
        assert not in_splash(decision.landing, ally.pos)
        assert not in_splash(decision.landing, agent.pos)

    for decision in gen.compound_candidates(agent, enemies, [agent, ally]):
        if decision.kind == DecisionKind.MOVE_THROW:
            assert not in_splash(decision.landing, ally.pos)
            assert not in_splash(decision.landing, decision.destination)


def test_zero_enemies_yields_only_moves_and_hunker():
    gen = _generator(GUNNERS)
    agent = AgentState(1, 3, 3)
    candidates = gen.candidates(agent, [], [agent])
    assert candidates
    assert {c.kind for c in candidates} <= {DecisionKind.MOVE, DecisionKind.HUNKER}
    assert gen.compound_candidates(agent, [], [agent]) == []
    assert best_of(candidates).kind in (DecisionKind.MOVE, DecisionKind.HUNKER)


def test_moves_are_capped_below_attacks():
    gen = _generator(GUNNERS)
    agent = AgentState(1, 0, 0, wetness=10)
    enemies = [AgentState(3, 4, 0, wetness=90)]
    moves = gen.movement_candidates(agent, enemies, [agent])
    attacks = gen.attack_candidates(agent, enemies)
    assert moves and attacks
    assert max(m.expected_value for m in moves) <= MOVE_VALUE_CAP
    assert min(a.expected_value for a in attacks) > MOVE_VALUE_CAP


def test_step_then_shoot_only_when_it_improves():
    gen = _generator(GUNNERS)

    # Already lethal from the current tile: stepping closer adds nothing.
    shooter = AgentState(2, 1, 0)
    soaked = [AgentState(3, 4, 0, wetness=90)]
    assert not [c for c in gen.compound_candidates(shooter, soaked, [shooter]) if c.kind == DecisionKind.MOVE_ATTACK]

    # Out of range: a step that brings the enemy into range is proposed.
    far = AgentState(1, 0, 0)
    enemy = [AgentState(3, 5, 0)]
    compound = [c for c in gen.compound_candidates(far, enemy, [far]) if c.kind == DecisionKind.MOVE_ATTACK]
    assert compound
    assert all(c.target_id == 3 and c.expected_damage > 0 for c in compound)


def test_cover_when_pressed():
    board = Board(8, 6, {(2, 3): TerrainType.LIGHT_COVER})
    rows = [(1, 0, 1, 4, 20, 0), (2, 1, 1, 4, 20, 0), (3, 1, 1, 4, 20, 0)]
    gen = _generator(rows, board)
    agent = AgentState(1, 3, 3, wetness=60)
    enemies = [AgentState(2, 6, 3), AgentState(3, 6, 4)]

    cover = gen.cover_candidates(agent, enemies, [agent])
    assert len(cover) == 1
    assert cover[0].destination == (1, 3)
    assert cover[0].expected_value == COVER_VALUE


def test_healthy_agent_does_not_seek_cover():
    gen = _generator(GUNNERS)
    agent = AgentState(1, 3, 3)
    assert gen.cover_candidates(agent, [AgentState(3, 6, 3)], [agent]) == []


def test_sniper_kites_when_behind():
    rows = [(1, 0, 1, 6, 24, 0), (3, 1, 1, 4, 20, 0)]
    gen = _generator(rows)
    sniper = AgentState(1, 3, 2, wetness=50)
    kite = gen.kiting_candidates(sniper, [AgentState(3, 4, 2)], [sniper])
    assert len(kite) == 1
    assert kite[0].destination == (0, 2)
    assert kite[0].expected_value == KITE_VALUE


def test_search_candidates_are_compact_and_sorted():
    gen = _generator(GUNNERS)
    agent = AgentState(1, 2, 2)
    enemies = [AgentState(3, 5, 2), AgentState(4, 6, 4)]
    compact = gen.search_candidates(agent, enemies, [agent], top_moves=3)
    values = [c.expected_value for c in compact]
    assert values == sorted(values, reverse=True)
    assert sum(1 for c in compact if c.kind == DecisionKind.MOVE) <= 3
    assert any(c.kind == DecisionKind.HUNKER and c.expected_value == HUNKER_VALUE for c in compact)


@pytest.mark.parametrize("wetness,multiplier", [(0, 1), (59, 1), (60, 5), (90, 5)])
def test_badly_wounded_bomber_values_throws_five_times_higher(wetness, multiplier):
    rows = [(1, 0, 1, 2, 16, 2), (3, 1, 1, 4, 20, 0)]
    gen = _generator(rows)
    enemy = AgentState(3, 3, 0)

    baseline = {t.landing: t.expected_value for t in gen.throw_candidates(AgentState(1, 0, 0, bombs=2), [enemy])}
    wounded = {
        t.landing: t.expected_value
        for t in gen.throw_candidates(AgentState(1, 0, 0, bombs=2, wetness=wetness), [enemy])
    }
    assert baseline and wounded.keys() == baseline.keys()
    for landing, value in baseline.items():
        assert wounded[landing] == pytest.approx(value * multiplier)
