"""
Command-line bot: reads the match from stdin and answers on stdout.

    python game_runner.py < match.txt
    python game_runner.py --log-level DEBUG --trace --log-file

Logs go to stderr so stdout carries only protocol lines.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from agents import available_agents
from arena.core.errors import MalformedInputError
from infra.config import EngineConfig
from infra.logger import configure_logging, get_logger
from infra.paths import LOG_DIR, TRACE_DIR
from infra.trace import DecisionSink, JsonlSink, NullSink
from runtime.runner import MatchRunner

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tactical decision engine (line protocol on stdin/stdout)")
    parser.add_argument(
        "--agent",
        default="tactical",
        choices=available_agents(),
        help="Registered agent deciding for our side",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides TACTICS_LOG_LEVEL)",
    )
    parser.add_argument(
        "--trace",
        nargs="?",
        const=str(TRACE_DIR / "match.jsonl"),
        default=None,
        help="Append per-turn decision records to this JSON-lines file",
    )
    parser.add_argument(
        "--log-file",
        nargs="?",
        const=str(LOG_DIR / "engine.log"),
        default=None,
        help="Also append logs to this file",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if args.trace:
        overrides["trace_path"] = args.trace
    config = EngineConfig.from_env(**overrides)

    configure_logging(config.log_level, json=args.json_logs, logfile=args.log_file)
    sink: DecisionSink = JsonlSink(config.trace_path) if config.trace_path else NullSink()

    runner = MatchRunner(sys.stdin, sys.stdout, agent_type=args.agent, config=config, sink=sink)
    try:
        runner.run()
    except MalformedInputError as exc:
        log.error("Unusable match header: %s", exc)
        return 1
    finally:
        sink.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
