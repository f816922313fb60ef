"""
Optional observability sinks for per-turn decision records.

Core logic produces a TurnRecord every turn and hands it to whatever sink
is configured. NullSink is the default; nothing in the engine reads a
record back.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, TextIO

from arena.core.decision import Decision
from arena.core.types import StrategyMode


@dataclass
class TurnRecord:
    """
    Diagnostics for one orchestrated turn.

    Attributes:
        turn: Turn counter
        mode: How decisions were produced
        priority_target: Enemy id chosen for focus fire (None if no enemies)
        tactical_advantage: Head-count/health ratio of own side vs opponents
        territory: Counts of tiles closer to each side ("mine", "theirs", "contested")
        decisions: Final decision per controlled agent
        elapsed_ms: Wall time spent deciding
        iterations: Search iterations run (0 outside search mode)
        cache_hit: Whether the search result came from the cache
        errors: Recovered failures, as short strings
    """

    turn: int
    mode: StrategyMode
    priority_target: Optional[int] = None
    tactical_advantage: float = 1.0
    territory: Dict[str, int] = field(default_factory=dict)
    decisions: Dict[int, Decision] = field(default_factory=dict)
    elapsed_ms: float = 0.0
    iterations: int = 0
    cache_hit: bool = False
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "mode": str(self.mode),
            "priority_target": self.priority_target,
            "tactical_advantage": round(self.tactical_advantage, 4),
            "territory": dict(self.territory),
            "decisions": {str(k): d.to_dict() for k, d in self.decisions.items()},
            "elapsed_ms": round(self.elapsed_ms, 3),
            "iterations": self.iterations,
            "cache_hit": self.cache_hit,
            "errors": list(self.errors),
        }


class DecisionSink(Protocol):
    """Anything that accepts turn records."""

    def record(self, record: TurnRecord) -> None:
        ...

    def close(self) -> None:
        ...


class NullSink:
    """Discards every record."""

    def record(self, record: TurnRecord) -> None:
        return None

    def close(self) -> None:
        return None


class MemorySink:
    """Keeps records in a list (tests, API status)."""

    def __init__(self, limit: Optional[int] = None):
        self.records: List[TurnRecord] = []
        self.limit = limit

    def record(self, record: TurnRecord) -> None:
        self.records.append(record)
        if self.limit is not None and len(self.records) > self.limit:
            del self.records[: len(self.records) - self.limit]

    @property
    def last(self) -> Optional[TurnRecord]:
        return self.records[-1] if self.records else None

    def close(self) -> None:
        return None


class JsonlSink:
    """Appends one JSON object per turn to a file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: Optional[TextIO] = None

    def record(self, record: TurnRecord) -> None:
        if self._fh is None:
            self._fh = self.path.open("a", encoding="utf-8")
        self._fh.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
        self._fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class LoggingSink:
    """Writes a one-line summary per turn to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("trace")
        self.level = level

    def record(self, record: TurnRecord) -> None:
        self.logger.log(
            self.level,
            "turn=%d mode=%s target=%s adv=%.2f decisions=%s",
            record.turn,
            record.mode,
            record.priority_target,
            record.tactical_advantage,
            {k: str(d) for k, d in record.decisions.items()},
        )

    def close(self) -> None:
        return None
