import pytest
from pydantic import ValidationError

from agents import AgentSpec, GreedyAgent, TacticalAgent, available_agents, create_agent_from_spec
from agents.tactics import ActionGenerator, best_of
from agents.team_intel import TeamIntel
from arena.core.decision import Decision
from arena.core.errors import UnknownAgentError
from arena.core.types import DecisionKind, StrategyMode
from arena.entities import AgentState
from infra.config import EngineConfig
from infra.trace import MemorySink

from conftest import make_snapshot


def _agent(config=None, player=0):
    sink = MemorySink()
    return TacticalAgent(player, config=config or EngineConfig(), sink=sink), sink


def test_lethal_shot_is_taken(lethal_snapshot):
    agent, sink = _agent()
    decisions, metadata = agent.get_decisions(lethal_snapshot)

    assert set(decisions) == {1, 2}
    shot = decisions[2]
    assert shot.kind == DecisionKind.ATTACK
    assert shot.target_id == 3
    assert shot.kill_probability == 1.0
    assert metadata["mode"] == "heuristic"
    assert sink.last.priority_target == 3


def test_every_living_own_agent_gets_exactly_one_decision(lethal_rows):
    snapshot = make_snapshot(
        lethal_rows,
        [AgentState(1, 0, 0), AgentState(2, 1, 0, wetness=100), AgentState(3, 4, 0)],
    )
    agent, _ = _agent()
    decisions, _ = agent.get_decisions(snapshot)
    assert set(decisions) == {1}


def test_no_enemies_means_move_or_hunker(lethal_rows):
    snapshot = make_snapshot(lethal_rows, [AgentState(1, 0, 0), AgentState(2, 3, 3)])
    agent, sink = _agent()
    decisions, _ = agent.get_decisions(snapshot)
    assert set(decisions) == {1, 2}
    for decision in decisions.values():
        assert decision.kind in (DecisionKind.MOVE, DecisionKind.HUNKER)
    assert sink.last.priority_target is None


def test_search_mode_after_opening_turns_then_cache(lethal_rows, fast_config):
    states = [AgentState(1, 0, 0), AgentState(2, 0, 4), AgentState(3, 5, 2, wetness=20)]
    snapshot = make_snapshot(lethal_rows, states, turn=fast_config.search_min_turn)
    agent, sink = _agent(fast_config)

    first, meta = agent.get_decisions(snapshot)
    assert meta["mode"] == "search"
    assert meta["iterations"] == fast_config.max_iterations
    assert set(first) == {1, 2}

    second, meta = agent.get_decisions(snapshot)
    assert meta["mode"] == "cached"
    assert meta["cache_hit"] is True
    assert meta["cache"]["hits"] == 1
    assert second == first

    agent.reset()
    assert len(agent.cache) == 0
    assert [r.mode for r in sink.records] == [StrategyMode.SEARCH, StrategyMode.CACHED]


def test_single_agent_stays_heuristic(lethal_rows, fast_config):
    snapshot = make_snapshot(lethal_rows, [AgentState(1, 0, 0), AgentState(3, 5, 2)], turn=10)
    agent, _ = _agent(fast_config)
    _, meta = agent.get_decisions(snapshot)
    assert meta["mode"] == "heuristic"


def test_unexpected_failure_hunkers_every_agent(lethal_snapshot, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(TeamIntel, "build", classmethod(lambda cls, *a, **k: explode()))
    agent, sink = _agent()
    decisions, metadata = agent.get_decisions(lethal_snapshot)

    assert set(decisions) == {1, 2}
    assert all(d.kind == DecisionKind.HUNKER for d in decisions.values())
    assert metadata["mode"] == "fallback"
    assert "boom" in sink.last.errors[0]


def test_wrong_player_snapshot_falls_back(lethal_snapshot):
    agent, sink = _agent(player=1)
    decisions, metadata = agent.get_decisions(lethal_snapshot)
    assert metadata["mode"] == "fallback"
    assert all(d.kind == DecisionKind.HUNKER for d in decisions.values())


def test_missing_profile_hunkers_only_that_agent(lethal_snapshot, monkeypatch):
    original = TacticalAgent._heuristic

    def flaky(self, generator, intel, agent, target):
        if agent.agent_id == 1:
            raise UnknownAgentError(42)
        return original(self, generator, intel, agent, target)

    monkeypatch.setattr(TacticalAgent, "_heuristic", flaky)
    agent, sink = _agent()
    decisions, metadata = agent.get_decisions(lethal_snapshot)

    assert decisions[1].kind == DecisionKind.HUNKER
    assert decisions[2].kind == DecisionKind.ATTACK
    assert metadata["mode"] == "heuristic"
    assert sink.last.errors == ["No profile registered for agent 42"]


def test_agents_without_profiles_are_ignored(lethal_rows):
    snapshot = make_snapshot(
        lethal_rows,
        [AgentState(1, 0, 0), AgentState(2, 1, 0), AgentState(3, 4, 0, wetness=90), AgentState(77, 6, 5)],
    )
    agent, _ = _agent()
    decisions, metadata = agent.get_decisions(snapshot)
    assert set(decisions) == {1, 2}
    assert metadata["mode"] == "heuristic"


def test_move_destinations_never_clash(lethal_rows):
    states = [AgentState(1, 0, 0), AgentState(2, 1, 1), AgentState(3, 7, 5)]
    snapshot = make_snapshot(lethal_rows, states)
    agent, _ = _agent()
    decisions, _ = agent.get_decisions(snapshot)
    targets = [d.destination for d in decisions.values() if d.kind.moves]
    assert len(targets) == len(set(targets))


def test_adversary_penalty(lethal_rows):
    snapshot = make_snapshot(lethal_rows, [AgentState(1, 0, 0), AgentState(3, 2, 0)])
    intel = TeamIntel.build(snapshot)
    agent, _ = _agent()
    me = snapshot.get_state(1)

    assert agent.adversary_penalty(intel, me, Decision.hunker()) == pytest.approx(900.0)
    assert agent.adversary_penalty(intel, me, Decision.move(0, 5)) == 0.0


def test_registry_and_factory():
    assert {"greedy", "tactical"} <= set(available_agents())
    greedy = create_agent_from_spec(AgentSpec(type="greedy", player=1))
    assert isinstance(greedy, GreedyAgent)
    tactical = create_agent_from_spec(AgentSpec.model_validate({"player": 0}), config=EngineConfig(cache_size=3))
    assert isinstance(tactical, TacticalAgent)
    assert tactical.cache.max_size == 3
    with pytest.raises(ValueError):
        create_agent_from_spec(AgentSpec(type="nope", player=0))
    with pytest.raises(ValidationError):
        AgentSpec(player=-1)

    by_path = create_agent_from_spec(
        AgentSpec(type="agents.greedy_agent.greedy_agent.GreedyAgent", player=0, name="baseline")
    )
    assert isinstance(by_path, GreedyAgent)
    assert by_path.name == "baseline"


def test_greedy_agent_shoots_when_it_can(lethal_snapshot):
    decisions, metadata = GreedyAgent(0).get_decisions(lethal_snapshot)
    assert metadata["policy"] == "greedy"
    assert decisions[2].kind == DecisionKind.ATTACK
    assert decisions[2].target_id == 3


# ---------------------------------------------------------------------------
# Priority target
# ---------------------------------------------------------------------------

def test_bomb_carrier_outranks_a_wounded_enemy():
    rows = [(1, 0, 1, 4, 20, 0), (3, 1, 2, 4, 20, 1), (4, 1, 2, 4, 20, 0)]
    snapshot = make_snapshot(
        rows,
        [AgentState(1, 0, 0), AgentState(3, 5, 0, cooldown=2, bombs=1), AgentState(4, 2, 0, cooldown=2, wetness=90)],
    )
    intel = TeamIntel.build(snapshot)
    enemy, wounded = snapshot.get_state(3), snapshot.get_state(4)

    assert intel.priority_score(enemy) == 3000 + 5 * 100
    assert intel.priority_score(wounded) == 40 * 60 + 8 * 100
    assert intel.priority_target().agent_id == 3


def test_ready_enemy_outranks_and_first_listed_wins_ties():
    rows = [(1, 0, 1, 4, 20, 0), (3, 1, 2, 4, 20, 0), (4, 1, 2, 4, 20, 0)]
    cooling = [AgentState(1, 0, 0), AgentState(3, 0, 3, cooldown=2), AgentState(4, 3, 0, cooldown=2)]
    intel = TeamIntel.build(make_snapshot(rows, cooling))
    assert intel.priority_target().agent_id == 3

    ready = [AgentState(1, 0, 0), AgentState(3, 0, 3, cooldown=2), AgentState(4, 3, 0, cooldown=1)]
    intel = TeamIntel.build(make_snapshot(rows, ready))
    assert intel.priority_score(intel.enemies[1]) == 700 + 1500
    assert intel.priority_target().agent_id == 4


# ---------------------------------------------------------------------------
# Focus fire
# ---------------------------------------------------------------------------

def _focus_setup(lethal_rows):
    snapshot = make_snapshot(lethal_rows, [AgentState(1, 0, 0), AgentState(3, 3, 0)])
    intel = TeamIntel.build(snapshot)
    agent, _ = _agent()
    generator = ActionGenerator(snapshot.board, snapshot.profiles, agent.config)
    me, target = snapshot.get_state(1), snapshot.get_state(3)
    shot = best_of(generator.attack_candidates(me, [target]))
    return agent, generator, intel, me, target, shot


def test_focus_fire_switches_at_the_ratio(lethal_rows):
    agent, generator, intel, me, target, shot = _focus_setup(lethal_rows)
    ratio = agent.config.focus_fire_ratio

    worth_switching = Decision.move(0, 1, value=shot.expected_value / ratio - 1)
    switched = agent._focus_fire(generator, intel, me, worth_switching, target)
    assert switched.kind == DecisionKind.ATTACK
    assert switched.target_id == 3

    too_valuable = Decision.move(0, 1, value=shot.expected_value / ratio + 1)
    assert agent._focus_fire(generator, intel, me, too_valuable, target) == too_valuable


def test_focus_fire_keeps_decisions_it_cannot_improve(lethal_rows):
    agent, generator, intel, me, target, shot = _focus_setup(lethal_rows)
    weak = Decision.hunker(1)

    assert agent._focus_fire(generator, intel, me, shot, target) == shot
    assert agent._focus_fire(generator, intel, me, weak, None) == weak
    cooling = AgentState(1, 0, 0, cooldown=1)
    assert agent._focus_fire(generator, intel, cooling, weak, target) == weak


def test_focus_fire_compares_net_of_exposure(lethal_rows):
    agent, generator, intel, me, target, shot = _focus_setup(lethal_rows)
    ratio = agent.config.focus_fire_ratio
    chosen = Decision.move(0, 1, value=shot.expected_value / ratio - 1)

    # Target at distance 3 is within its own range: 100 * weight 3.0.
    assert agent.adversary_penalty(intel, me, shot) == pytest.approx(300.0)
    assert agent._focus_fire(generator, intel, me, chosen, target, penalize=True) == chosen
    assert agent._focus_fire(generator, intel, me, chosen, target, penalize=False).kind == DecisionKind.ATTACK


# ---------------------------------------------------------------------------
# Bomb urgency
# ---------------------------------------------------------------------------

def test_wounded_bomber_overrides_with_a_throw():
    rows = [(1, 0, 1, 4, 20, 1), (2, 0, 1, 4, 20, 0), (3, 1, 1, 4, 20, 0)]
    snapshot = make_snapshot(
        rows,
        [AgentState(1, 0, 0, bombs=1, wetness=55), AgentState(2, 0, 5), AgentState(3, 3, 0, wetness=90)],
    )
    intel = TeamIntel.build(snapshot)
    target = intel.priority_target()

    def decide(ratio, state):
        agent, _ = _agent(EngineConfig(bomb_override_ratio=ratio))
        generator = ActionGenerator(snapshot.board, snapshot.profiles, agent.config)
        return agent._heuristic(generator, intel, state, target)

    wounded = snapshot.get_state(1)
    assert decide(1.0, wounded).kind == DecisionKind.ATTACK
    assert decide(0.0, wounded).kind == DecisionKind.THROW
    assert decide(0.0, AgentState(1, 0, 0, bombs=1, wetness=40)).kind == DecisionKind.ATTACK
