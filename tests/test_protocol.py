import io
import sys

import pytest

import game_runner

from arena.core.decision import Decision
from arena.core.errors import MalformedInputError
from arena.core.types import TerrainType
from arena.entities import AgentState
from runtime.events import extract_events
from runtime.protocol import (
    LineReader,
    TurnInput,
    format_decision,
    format_turn,
    hunker_lines,
    read_setup,
    read_turn,
)
from runtime.runner import MatchRunner, MatchSession

from conftest import make_snapshot


def header_lines():
    lines = ["0", "3", "1 0 1 4 20 0", "2 0 1 4 20 0", "3 1 1 4 20 1", "4 3"]
    for y in range(3):
        for x in range(4):
            lines.append(f"{x} {y} {1 if (x, y) == (2, 1) else 0}")
    return lines


def turn_lines(enemy_wetness=0):
    return ["3", "1 0 0 0 0 0", "2 1 0 0 0 0", f"3 3 2 0 1 {enemy_wetness}", "2"]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def test_read_setup():
    setup = read_setup(LineReader(header_lines()))
    assert setup.my_id == 0
    assert setup.my_agent_ids == [1, 2]
    assert setup.board.width == 4 and setup.board.height == 3
    assert setup.board.terrain_at((2, 1)) == TerrainType.LIGHT_COVER
    assert setup.profiles.get(3).player == 1


def test_read_turn_and_clean_end():
    reader = LineReader(turn_lines(40) + [""])
    turn = read_turn(reader)
    assert turn.expected_lines == 2
    assert [s.agent_id for s in turn.states] == [1, 2, 3]
    assert turn.states[2].wetness == 40
    assert read_turn(reader) is None


@pytest.mark.parametrize(
    "lines",
    [
        ["2", "1 0 0 0 0"],
        ["2", "1 0 zero 0 0 0"],
        ["2", "1 0 0 0 0 0"],
        ["1", "1 0 0 0 -1 0", "1"],
    ],
)
def test_malformed_turns_raise(lines):
    with pytest.raises(MalformedInputError):
        read_turn(LineReader(lines))


def test_bad_line_spoils_only_its_own_turn():
    bad = ["3", "1 0 0 0 0", "2 1 0 0 0 0", "3 3 2 0 1 0", "2"]
    reader = LineReader(bad + turn_lines(30))
    with pytest.raises(MalformedInputError) as excinfo:
        read_turn(reader)
    assert excinfo.value.expected_lines == 2

    turn = read_turn(reader)
    assert [s.agent_id for s in turn.states] == [1, 2, 3]
    assert turn.states[2].wetness == 30
    assert read_turn(reader) is None


def test_truncated_header_raises():
    with pytest.raises(MalformedInputError):
        read_setup(LineReader(header_lines()[:-2]))
    with pytest.raises(MalformedInputError):
        read_setup(LineReader(["0", "1", "1 0 1 4 20 0", "2 2", "0 0 0", "1 0 0", "0 1 7", "1 1 0"]))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def test_format_decision():
    assert format_decision(4, Decision.hunker()) == "4;HUNKER_DOWN"
    assert format_decision(4, Decision.move(2, 3)) == "4;MOVE 2 3; HUNKER_DOWN"
    assert format_decision(4, Decision.attack(7)) == "4;ATTACK 7; HUNKER_DOWN"
    assert format_decision(4, Decision.throw(5, 1)) == "4;THROW 5 1; HUNKER_DOWN"
    assert format_decision(4, Decision.move_attack(2, 3, 7)) == "4;MOVE 2 3; ATTACK 7"
    assert format_decision(4, Decision.move_throw(2, 3, 5, 1)) == "4;MOVE 2 3; THROW 5 1"


def test_format_turn_pads_and_truncates():
    decisions = {2: Decision.attack(9), 5: Decision.move(1, 1)}
    assert format_turn(decisions, 3, [2, 5]) == ["2;ATTACK 9; HUNKER_DOWN", "5;MOVE 1 1; HUNKER_DOWN", "2;HUNKER_DOWN"]
    assert format_turn(decisions, 1, [2, 5]) == ["2;ATTACK 9; HUNKER_DOWN"]
    assert format_turn({}, 2, [8]) == ["8;HUNKER_DOWN", "8;HUNKER_DOWN"]
    assert format_turn({}, 1, []) == ["0;HUNKER_DOWN"]


def test_hunker_lines():
    assert hunker_lines([3, 4]) == ["3;HUNKER_DOWN", "4;HUNKER_DOWN"]
    assert hunker_lines([3, 4], 1) == ["3;HUNKER_DOWN"]


# ---------------------------------------------------------------------------
# Match loop
# ---------------------------------------------------------------------------

def test_runner_answers_every_turn():
    out = io.StringIO()
    answered = MatchRunner(header_lines() + turn_lines() + turn_lines(60), out).run()
    lines = out.getvalue().splitlines()
    assert answered == 2
    assert len(lines) == 4
    assert {line.split(";")[0] for line in lines} == {"1", "2"}


def test_runner_recovers_from_truncated_turn():
    out = io.StringIO()
    answered = MatchRunner(header_lines() + turn_lines() + ["3", "1 0 0 0 0 0"], out).run()
    lines = out.getvalue().splitlines()
    assert answered == 2
    assert lines[-2:] == ["1;HUNKER_DOWN", "2;HUNKER_DOWN"]


def test_runner_answers_a_broken_turn_once_and_plays_the_next():
    bad = ["3", "1 0 0 0 0", "2 1 0 0 0 0", "3 3 2 0 1 0", "2"]
    out = io.StringIO()
    runner = MatchRunner(header_lines() + bad + turn_lines(), out)
    assert runner.run() == 2

    lines = out.getvalue().splitlines()
    assert len(lines) == 4
    assert lines[:2] == ["1;HUNKER_DOWN", "2;HUNKER_DOWN"]
    assert runner.session.turn == 2
    assert runner.session.last_metadata["policy"] == "tactical"


def test_runner_hunkers_on_impossible_positions():
    out = io.StringIO()
    bad_turn = ["2", "1 0 0 0 0 0", "1 1 1 0 0 0", "2"]
    MatchRunner(header_lines() + bad_turn, out).run()
    assert out.getvalue().splitlines() == ["1;HUNKER_DOWN", "2;HUNKER_DOWN"]


def test_runner_rejects_unusable_header():
    with pytest.raises(MalformedInputError):
        MatchRunner(["0"], io.StringIO()).run()


def test_session_tracks_events():
    session = MatchSession(read_setup(LineReader(header_lines())))
    session.play(TurnInput([AgentState(1, 0, 0), AgentState(2, 1, 0, wetness=60), AgentState(3, 3, 2)], 2))
    lines = session.play(TurnInput([AgentState(1, 0, 0), AgentState(2, 1, 0, wetness=75)], 2))
    assert len(lines) == 2
    assert [e["type"] for e in session.events] == ["ENEMY_ELIMINATED", "CRITICAL_HEALTH"]
    assert session.status()["turn"] == 2


def test_extract_events_reports_losses():
    rows = [(1, 0, 1, 4, 20, 0), (2, 0, 1, 4, 20, 0), (3, 1, 1, 4, 20, 0)]
    before = make_snapshot(rows, [AgentState(1, 0, 0), AgentState(2, 1, 1), AgentState(3, 5, 5)])
    after = make_snapshot(
        rows,
        [AgentState(1, 0, 0), AgentState(2, 1, 1, wetness=100), AgentState(3, 5, 5)],
        turn=2,
    )
    events = extract_events(prev_snapshot=before, snapshot=after)
    assert events == [{
        "type": "ALLY_LOST",
        "turn": 2,
        "agent_id": 2,
        "last_position": (1, 1),
        "severity": "HIGH",
    }]
    assert extract_events(prev_snapshot=None, snapshot=after) == []


def test_cli_answers_on_stdout(monkeypatch, capsys, isolated_logging):
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n".join(header_lines() + turn_lines()) + "\n"))
    assert game_runner.main(["--agent", "greedy", "--log-level", "warning"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert all(";" in line for line in lines)


def test_cli_reports_unusable_header(monkeypatch, isolated_logging):
    monkeypatch.setattr(sys, "stdin", io.StringIO("0\n"))
    assert game_runner.main(["--log-level", "error"]) == 1
