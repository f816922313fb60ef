from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, TextIO

from agents import AgentSpec, BaseAgent, create_agent_from_spec
from arena.core.errors import MalformedInputError
from arena.world.snapshot import TurnSnapshot
from infra.config import EngineConfig
from infra.logger import get_logger
from infra.trace import DecisionSink

from .events import extract_events
from .protocol import LineReader, MatchSetup, TurnInput, format_turn, hunker_lines, read_setup, read_turn

log = get_logger(__name__)


class MatchSession:
    """
    One match in progress: the static setup plus the agent deciding for it.

    The session is transport-agnostic; MatchRunner feeds it from a line
    stream and the HTTP driver feeds it from JSON.
    """

    def __init__(
        self,
        setup: MatchSetup,
        agent_type: str = "tactical",
        config: EngineConfig | None = None,
        sink: DecisionSink | None = None,
    ):
        self.setup = setup
        self.config = config or EngineConfig()
        self.agent: BaseAgent = create_agent_from_spec(
            AgentSpec(type=agent_type, player=setup.my_id),
            config=self.config,
            sink=sink,
        )
        self.turn = 0
        self.events: List[Dict[str, Any]] = []
        self.last_metadata: Dict[str, Any] = {}
        self._previous: Optional[TurnSnapshot] = None

        log.info(
            "Match started: player=%d agents=%d board=%dx%d agent=%s",
            setup.my_id, len(setup.profiles), setup.board.width, setup.board.height, self.agent,
        )

    # ------------------------------------------------------------------#
    # Core API
    # ------------------------------------------------------------------#
    def play(self, turn_input: TurnInput) -> List[str]:
        """
        Decide one turn and return exactly turn_input.expected_lines lines.

        Raises:
            MalformedInputError: When the states do not form a valid position
        """
        self.turn += 1
        try:
            snapshot = self.setup.snapshot(self.turn, turn_input.states)
        except ValueError as exc:
            raise MalformedInputError(f"turn {self.turn}: {exc}") from exc

        for event in extract_events(prev_snapshot=self._previous, snapshot=snapshot):
            log.warning("Match event: %s", event)
            self.events.append(event)
        self._previous = snapshot

        decisions, self.last_metadata = self.agent.get_decisions(snapshot)
        return format_turn(decisions, turn_input.expected_lines, self.setup.my_agent_ids)

    def recover(self, expected_lines: Optional[int] = None) -> List[str]:
        """Hunker answer for a turn whose input could not be used."""
        self.turn += 1
        return hunker_lines(self.setup.my_agent_ids, expected_lines)

    def status(self) -> Dict[str, Any]:
        return {
            "player": self.setup.my_id,
            "turn": self.turn,
            "agent": self.agent.name,
            "events": len(self.events),
            "last": self.last_metadata,
        }


class MatchRunner:
    """
    Drives a MatchSession over a line stream until the input runs out.
    """

    def __init__(
        self,
        lines: Iterable[str],
        out: TextIO,
        *,
        agent_type: str = "tactical",
        config: EngineConfig | None = None,
        sink: DecisionSink | None = None,
    ):
        self.reader = LineReader(lines)
        self.out = out
        self.agent_type = agent_type
        self.config = config or EngineConfig()
        self.sink = sink
        self.session: MatchSession | None = None

    def run(self) -> int:
        """
        Play every turn available on the input.

        Returns:
            Number of turns answered

        Raises:
            MalformedInputError: When the match header itself is unusable
        """
        setup = read_setup(self.reader)
        self.session = MatchSession(setup, self.agent_type, self.config, self.sink)

        answered = 0
        while True:
            try:
                turn_input = read_turn(self.reader)
            except MalformedInputError as exc:
                log.warning("Malformed turn input, hunkering: %s", exc)
                self._emit(self.session.recover(exc.expected_lines))
                answered += 1
                continue
            if turn_input is None:
                break

            try:
                lines = self.session.play(turn_input)
            except MalformedInputError as exc:
                log.warning("Unusable turn state, hunkering: %s", exc)
                lines = hunker_lines(setup.my_agent_ids, turn_input.expected_lines)
            self._emit(lines)
            answered += 1

        log.info("Input exhausted after %d turns", answered)
        return answered

    def _emit(self, lines: List[str]) -> None:
        for line in lines:
            self.out.write(line + "\n")
        self.out.flush()
