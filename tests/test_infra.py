import json
import logging

import pytest
from pydantic import ValidationError

from arena.core.decision import Decision
from arena.core.types import StrategyMode
from infra.config import EngineConfig
from infra.logger import configure_logging, get_logger
from infra.trace import JsonlSink, LoggingSink, MemorySink, TurnRecord


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def test_defaults_are_valid():
    config = EngineConfig()
    assert config.search_min_turn == 3
    assert config.focus_fire_ratio == pytest.approx(0.8)
    assert config.collisions is True


def test_from_env_reads_prefixed_variables(monkeypatch):
    monkeypatch.setenv("TACTICS_MAX_ITERATIONS", "10")
    monkeypatch.setenv("TACTICS_COLLISIONS", "false")
    monkeypatch.setenv("TACTICS_RNG_SEED", "none")
    monkeypatch.setenv("TACTICS_EXPLORATION", "")

    config = EngineConfig.from_env(env_file=None, time_budget_ms=12.5)
    assert config.max_iterations == 10
    assert config.collisions is False
    assert config.rng_seed is None
    assert config.exploration == pytest.approx(1.4)
    assert config.time_budget_ms == pytest.approx(12.5)


def test_from_env_loads_dotenv_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CFGTEST_CACHE_SIZE=7\nCFGTEST_WARMUP_VISITS=2\n", encoding="utf-8")
    monkeypatch.setenv("CFGTEST_WARMUP_VISITS", "3")

    config = EngineConfig.from_env(env_file=env_file, prefix="CFGTEST_")
    assert config.cache_size == 7
    assert config.warmup_visits == 3


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("TACTICS_EXPLORATION", "-1")
    with pytest.raises(ValidationError):
        EngineConfig.from_env(env_file=None)
    with pytest.raises(ValidationError):
        EngineConfig(focus_fire_ratio=2.0)
    with pytest.raises(ValidationError):
        EngineConfig(unknown_knob=True)


def test_config_is_frozen():
    config = EngineConfig()
    with pytest.raises(ValidationError):
        config.max_depth = 3


# ---------------------------------------------------------------------------
# Trace sinks
# ---------------------------------------------------------------------------

def _record(turn=1):
    return TurnRecord(
        turn=turn,
        mode=StrategyMode.SEARCH,
        priority_target=3,
        tactical_advantage=1.25,
        territory={"mine": 10, "theirs": 5, "contested": 1},
        decisions={1: Decision.attack(3, value=100.0, damage=10, kill_probability=1.0)},
        iterations=64,
    )


def test_jsonl_sink_appends_one_object_per_turn(tmp_path):
    path = tmp_path / "traces" / "match.jsonl"
    sink = JsonlSink(path)
    sink.record(_record(1))
    sink.record(_record(2))
    sink.close()

    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["turn"] for r in rows] == [1, 2]
    assert rows[0]["mode"] == "search"
    assert rows[0]["decisions"]["1"]["kind"] == "ATTACK"
    assert Decision.from_dict(rows[0]["decisions"]["1"]).target_id == 3


def test_memory_sink_keeps_the_latest_records():
    sink = MemorySink(limit=2)
    for turn in range(1, 5):
        sink.record(_record(turn))
    assert [r.turn for r in sink.records] == [3, 4]
    assert sink.last.turn == 4


def test_logging_sink(caplog):
    sink = LoggingSink(logging.getLogger("trace.test"))
    with caplog.at_level(logging.INFO, logger="trace.test"):
        sink.record(_record(5))
    assert "turn=5 mode=search target=3" in caplog.text


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def test_configure_logging_appends_to_file(tmp_path, isolated_logging):
    logfile = tmp_path / "logs" / "engine.log"
    configure_logging("debug", logfile=logfile)
    assert isolated_logging.level == logging.DEBUG

    get_logger("engine.test").info("turn %d answered", 3)
    for handler in isolated_logging.handlers:
        handler.flush()
    assert "turn 3 answered" in logfile.read_text(encoding="utf-8")
