from pathlib import Path
import sys

# Add repository root to sys.path so tests can import local modules without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import logging
from typing import Iterable, Optional, Sequence, Tuple

import pytest

from arena.entities import AgentProfile, AgentState, ProfileTable
from arena.world import Board, TurnSnapshot
from infra.config import EngineConfig

# (agent_id, player, cooldown_period, optimal_range, power, bombs)
ProfileRow = Tuple[int, int, int, int, int, int]


def make_profiles(rows: Iterable[ProfileRow]) -> ProfileTable:
    return ProfileTable(AgentProfile(*row) for row in rows)


def make_snapshot(
    rows: Iterable[ProfileRow],
    states: Sequence[AgentState],
    board: Optional[Board] = None,
    turn: int = 1,
    my_player: int = 0,
) -> TurnSnapshot:
    return TurnSnapshot(turn, my_player, board or Board(8, 6), make_profiles(rows), states)


@pytest.fixture
def open_board() -> Board:
    return Board(8, 6)


@pytest.fixture
def covered_board() -> Board:
    # Light cover at (2, 2), heavy cover at (3, 1).
    return Board.from_rows([
        [0, 0, 0, 0, 0],
        [0, 0, 0, 2, 0],
        [0, 0, 1, 0, 0],
        [0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0],
    ])


@pytest.fixture
def lethal_rows():
    """Two gunners against one badly soaked gunner."""
    return [
        (1, 0, 1, 4, 20, 0),
        (2, 0, 1, 4, 20, 0),
        (3, 1, 1, 4, 20, 0),
    ]


@pytest.fixture
def lethal_snapshot(lethal_rows) -> TurnSnapshot:
    states = [
        AgentState(1, 0, 0),
        AgentState(2, 1, 0),
        AgentState(3, 4, 0, wetness=90),
    ]
    return make_snapshot(lethal_rows, states)


@pytest.fixture
def fast_config() -> EngineConfig:
    """Iteration-bounded search so results do not depend on machine speed."""
    return EngineConfig(max_iterations=120, time_budget_ms=60_000, rng_seed=7)


@pytest.fixture
def isolated_logging():
    """Restore the root logger after a test that calls configure_logging()."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
