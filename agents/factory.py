from __future__ import annotations

from typing import Any, Dict

from infra.logger import get_logger

from .base_agent import BaseAgent
from .registry import resolve_agent_class
from .spec import AgentSpec

log = get_logger(__name__)


def create_agent_from_spec(spec: AgentSpec, **runtime: Any) -> BaseAgent:
    """
    Build the agent an AgentSpec describes.

    Args:
        spec: Agent description
        **runtime: Objects that do not belong in a serialisable spec
            (``config``, ``sink``); they win over same-named ``spec.options``

    Returns:
        Agent instance controlling ``spec.player``
    """
    agent_cls = resolve_agent_class(spec.type)
    kwargs: Dict[str, Any] = {**spec.options, **runtime, "player": spec.player}
    if spec.name:
        kwargs.setdefault("name", spec.name)
    log.debug("Creating %s agent for player %d", agent_cls.__name__, spec.player)
    return agent_cls(**kwargs)
