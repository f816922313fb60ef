"""
Agent interface and implementations for the tactical decision engine.

This module provides:
- BaseAgent: Abstract interface for all agents
- TacticalAgent: Turn orchestrator (heuristics + cooperative search)
- GreedyAgent: Greedy baseline, also the opponent model inside the search
- AgentSpec / create_agent_from_spec: config-based construction
"""

from .base_agent import BaseAgent
from .registry import AGENT_REGISTRY, available_agents, register_agent, resolve_agent_class
from .spec import AgentSpec
from .factory import create_agent_from_spec
from .greedy_agent.greedy_agent import GreedyAgent
from .tactical_agent import TacticalAgent

__all__ = [
    "BaseAgent",
    "AGENT_REGISTRY",
    "available_agents",
    "register_agent",
    "resolve_agent_class",
    "AgentSpec",
    "create_agent_from_spec",
    "GreedyAgent",
    "TacticalAgent",
]
