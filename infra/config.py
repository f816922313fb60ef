"""
Engine configuration.

EngineConfig collects every tunable of the decision engine in one validated
model. Values come from keyword arguments, or from the environment via
`EngineConfig.from_env()`, which also reads a `.env` file when present:

    TACTICS_MAX_ITERATIONS=4000
    TACTICS_TIME_BUDGET_MS=45
    TACTICS_COLLISIONS=false
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .paths import ENV_FILE

ENV_PREFIX = "TACTICS_"


class EngineConfig(BaseModel):
    """Tunables for search, arbitration and the ambient stack."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Search budget
    max_iterations: int = Field(2000, ge=1, description="Hard cap on search iterations per turn.")
    time_budget_ms: float = Field(40.0, gt=0, description="Wall-clock budget for one search.")
    time_check_interval: int = Field(32, ge=1, description="Iterations between clock reads.")
    max_depth: int = Field(6, ge=1, description="Simulated turns per search iteration.")
    exploration: float = Field(1.4, ge=0, description="UCB exploration constant.")
    warmup_visits: int = Field(8, ge=0, description="Parent visits sampled uniformly before UCB kicks in.")
    search_top_moves: int = Field(4, ge=1, description="Movement candidates kept per search node.")
    rng_seed: Optional[int] = Field(1337, description="Seed for the search RNG; None seeds from the OS.")

    # Arbitration
    search_min_turn: int = Field(3, ge=1, description="First turn on which the cooperative search may run.")
    focus_fire_ratio: float = Field(0.8, ge=0, le=1, description="Fraction of the chosen value a focus-fire switch must reach.")
    adversary_penalty_weight: float = Field(3.0, ge=0, description="Multiplier on the exposure penalty in heuristic mode.")
    bomb_override_ratio: float = Field(0.5, ge=0, le=1, description="Fraction of the chosen value a wounded agent's throw must reach.")

    # Memoization
    cache_size: int = Field(256, ge=0, description="Search results kept in memory; 0 disables caching.")
    cache_wetness_bucket: int = Field(5, ge=1, description="Wetness quantisation for cache keys.")

    # Rule flags
    wetness_affects_distance: bool = Field(True, description="Wet agents pay more per step.")
    collisions: bool = Field(True, description="Resolve clashing move destinations among own agents.")

    # Ambient
    log_level: str = Field("INFO", description="Root logging level.")
    trace_path: Optional[str] = Field(None, description="JSON-lines file receiving per-turn decision records.")

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = ENV_FILE,
        prefix: str = ENV_PREFIX,
        **overrides: Any,
    ) -> EngineConfig:
        """
        Build a config from `<prefix><FIELD>` environment variables.

        Args:
            env_file: Optional .env file loaded first (existing variables win)
            prefix: Environment variable prefix
            **overrides: Explicit values that beat the environment

        Returns:
            Validated EngineConfig
        """
        if env_file is not None and Path(env_file).exists():
            load_dotenv(env_file, override=False)

        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{prefix}{name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            values[name] = None if raw.strip().lower() == "none" else raw.strip()

        values.update(overrides)
        return cls.model_validate(values)
