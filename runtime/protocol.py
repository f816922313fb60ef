"""
Line protocol between the match referee and the engine.

Match start:
    my_id
    agent_data_count
    <agent_id> <player> <cooldown> <optimal_range> <power> <bombs>   (x agent_data_count)
    <width> <height>
    <x> <y> <tile_type>                                           (x width*height)

Every turn:
    agent_count
    <agent_id> <x> <y> <cooldown> <bombs> <wetness>                 (x agent_count)
    my_agent_count

Every turn the engine answers with exactly my_agent_count lines:
    <id>;HUNKER_DOWN
    <id>;MOVE x y; HUNKER_DOWN
    <id>;ATTACK t; HUNKER_DOWN
    <id>;THROW x y; HUNKER_DOWN
    <id>;MOVE x y; ATTACK t
    <id>;MOVE x y; THROW x y
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from arena.core.decision import Decision
from arena.core.errors import MalformedInputError
from arena.core.types import DecisionKind, GridPos, TerrainType
from arena.entities.profile import AgentProfile, ProfileTable
from arena.entities.state import AgentState
from arena.world.board import Board
from arena.world.snapshot import TurnSnapshot


class LineReader:
    """
    Pulls whitespace-separated integers from an iterable of lines.

    Blank lines are skipped. Running out of lines raises EOFError;
    anything that is not the expected number of integers raises
    MalformedInputError.
    """

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)
        self.line_no = 0

    def next_line(self) -> str:
        for raw in self._lines:
            self.line_no += 1
            line = raw.strip()
            if line:
                return line
        raise EOFError("input exhausted")

    def ints(self, count: int) -> List[int]:
        line = self.next_line()
        parts = line.split()
        if len(parts) != count:
            raise MalformedInputError(f"line {self.line_no}: expected {count} integers, got {line!r}")
        try:
            return [int(p) for p in parts]
        except ValueError as exc:
            raise MalformedInputError(f"line {self.line_no}: non-integer value in {line!r}") from exc

    def int(self) -> int:
        return self.ints(1)[0]

    def required(self, count: int) -> List[int]:
        """Like ints(), but a missing line is a truncation, not a clean end."""
        try:
            return self.ints(count)
        except EOFError as exc:
            raise MalformedInputError(f"truncated input after line {self.line_no}") from exc


# ============================================================================
# MATCH SETUP
# ============================================================================

@dataclass
class MatchSetup:
    """Static match data read once before the first turn."""

    my_id: int
    profiles: ProfileTable
    board: Board

    @property
    def my_agent_ids(self) -> List[int]:
        return [p.agent_id for p in self.profiles.owned_by(self.my_id)]

    def snapshot(self, turn: int, states: Iterable[AgentState]) -> TurnSnapshot:
        return TurnSnapshot(turn, self.my_id, self.board, self.profiles, states)


def build_board(width: int, height: int, tiles: Iterable[Sequence[int]]) -> Board:
    """Board from (x, y, tile_type) triples; out-of-board triples are ignored."""
    terrain: Dict[GridPos, TerrainType] = {}
    for x, y, tile_type in tiles:
        if not (0 <= x < width and 0 <= y < height):
            continue
        try:
            terrain[(x, y)] = TerrainType(tile_type)
        except ValueError as exc:
            raise MalformedInputError(f"unknown tile type {tile_type} at ({x}, {y})") from exc
    return Board(width, height, terrain)


def read_setup(reader: LineReader) -> MatchSetup:
    """
    Read the match header.

    Raises:
        MalformedInputError: On any malformed or missing header line
    """
    my_id = reader.required(1)[0]
    count = reader.required(1)[0]

    profiles = ProfileTable()
    for _ in range(count):
        agent_id, player, cooldown, optimal_range, power, bombs = reader.required(6)
        try:
            profiles.add(AgentProfile(agent_id, player, cooldown, optimal_range, power, bombs))
        except ValueError as exc:
            raise MalformedInputError(f"invalid agent data for {agent_id}: {exc}") from exc

    width, height = reader.required(2)
    if width <= 0 or height <= 0:
        raise MalformedInputError(f"invalid board size {width}x{height}")
    tiles = [reader.required(3) for _ in range(width * height)]
    return MatchSetup(my_id=my_id, profiles=profiles, board=build_board(width, height, tiles))


# ============================================================================
# TURNS
# ============================================================================

@dataclass
class TurnInput:
    """Per-turn agent states plus the number of answer lines expected."""

    states: List[AgentState] = field(default_factory=list)
    expected_lines: int = 0


def read_turn(reader: LineReader) -> Optional[TurnInput]:
    """
    Read one turn.

    The whole frame (agent_count state lines plus the my_agent_count line)
    is consumed before anything is parsed, so a bad line spoils only its own
    turn and the next read starts on the next turn's first line.

    Returns:
        TurnInput, or None when the input ended cleanly between turns

    Raises:
        MalformedInputError: On a truncated or unparsable turn; carries
            expected_lines when the my_agent_count line was readable
    """
    try:
        count = reader.int()
    except EOFError:
        return None
    if count < 0:
        raise MalformedInputError(f"line {reader.line_no}: negative agent count {count}")

    try:
        frame = [reader.next_line() for _ in range(count + 1)]
    except EOFError as exc:
        raise MalformedInputError(f"truncated turn after line {reader.line_no}") from exc

    try:
        expected_lines: Optional[int] = _parse_ints(frame[-1], 1)[0]
    except ValueError:
        expected_lines = None

    states = []
    for line in frame[:-1]:
        try:
            agent_id, x, y, cooldown, bombs, wetness = _parse_ints(line, 6)
            states.append(AgentState(agent_id, x, y, cooldown, bombs, wetness))
        except ValueError as exc:
            raise MalformedInputError(f"invalid agent state {line!r}: {exc}", expected_lines) from exc
    if expected_lines is None:
        raise MalformedInputError(f"invalid my_agent_count line {frame[-1]!r}")
    return TurnInput(states=states, expected_lines=expected_lines)


def _parse_ints(line: str, count: int) -> List[int]:
    parts = line.split()
    if len(parts) != count:
        raise ValueError(f"expected {count} integers, got {len(parts)}")
    return [int(p) for p in parts]


# ============================================================================
# OUTPUT
# ============================================================================

HUNKER = "HUNKER_DOWN"


def format_decision(agent_id: int, decision: Decision) -> str:
    """One protocol line for a decision."""
    kind = decision.kind
    if kind == DecisionKind.HUNKER:
        return f"{agent_id};{HUNKER}"
    if kind == DecisionKind.MOVE:
        return f"{agent_id};MOVE {decision.x} {decision.y}; {HUNKER}"
    if kind == DecisionKind.ATTACK:
        return f"{agent_id};ATTACK {decision.target_id}; {HUNKER}"
    if kind == DecisionKind.THROW:
        return f"{agent_id};THROW {decision.x} {decision.y}; {HUNKER}"
    if kind == DecisionKind.MOVE_ATTACK:
        return f"{agent_id};MOVE {decision.x} {decision.y}; ATTACK {decision.target_id}"
    return f"{agent_id};MOVE {decision.x} {decision.y}; THROW {decision.bomb_x} {decision.bomb_y}"


def format_turn(
    decisions: Dict[int, Decision],
    expected_lines: int,
    fallback_ids: Sequence[int],
) -> List[str]:
    """
    Exactly expected_lines protocol lines.

    Decisions are written in their mapping order. Missing lines are padded
    with a hunker for the first decided agent (or the first fallback id).
    """
    lines = [format_decision(agent_id, d) for agent_id, d in decisions.items()][:max(0, expected_lines)]
    if len(lines) < expected_lines:
        if decisions:
            pad_id = next(iter(decisions))
        elif fallback_ids:
            pad_id = fallback_ids[0]
        else:
            pad_id = 0
        lines.extend(f"{pad_id};{HUNKER}" for _ in range(expected_lines - len(lines)))
    return lines


def hunker_lines(agent_ids: Sequence[int], expected_lines: Optional[int] = None) -> List[str]:
    """Recovery answer: every listed agent hunkers."""
    count = len(agent_ids) if expected_lines is None else expected_lines
    return format_turn({agent_id: Decision.hunker() for agent_id in agent_ids}, count, agent_ids)
