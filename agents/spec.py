"""
Plain-data description of which agent plays a side.

Specs travel through configuration (CLI flags, the ``/start`` payload), so
they hold only JSON-friendly values; runtime objects such as the engine
config or a decision sink are handed to the factory separately.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AgentSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = Field("tactical", description="Registry key or dotted import path.")
    player: int = Field(..., ge=0, description="Side the agent decides for.")
    name: Optional[str] = Field(None, description="Display name; defaults to the class name.")
    options: Dict[str, Any] = Field(default_factory=dict, description="Extra constructor keyword arguments.")
