"""
Name -> class lookup for agents.

Agent classes register themselves at import time with
``@register_agent("key")``; entry points (the CLI ``--agent`` flag, the API
``agent_type`` field) resolve them by that key. A dotted ``module.Class``
path is accepted as well for agents that live outside this package.
"""

from __future__ import annotations

import importlib
from typing import Callable, Dict, List, Type, TypeVar

from .base_agent import BaseAgent

AGENT_REGISTRY: Dict[str, Type[BaseAgent]] = {}

A = TypeVar("A", bound=Type[BaseAgent])


def register_agent(key: str) -> Callable[[A], A]:
    """Class decorator binding ``key`` to a BaseAgent subclass."""

    def decorator(agent_cls: A) -> A:
        if not issubclass(agent_cls, BaseAgent):
            raise TypeError(f"{agent_cls.__name__} is not a BaseAgent subclass")
        current = AGENT_REGISTRY.setdefault(key, agent_cls)
        if current is not agent_cls:
            raise ValueError(f"Agent key {key!r} is already taken by {current.__name__}")
        return agent_cls

    return decorator


def available_agents() -> List[str]:
    return sorted(AGENT_REGISTRY)


def resolve_agent_class(type_ref: str) -> Type[BaseAgent]:
    """
    Look up an agent class.

    Args:
        type_ref: Registry key, or an import path such as ``"pkg.module.Class"``

    Returns:
        The agent class

    Raises:
        ValueError: Unknown key that is not an import path either
        TypeError: The import path names something other than a BaseAgent subclass
    """
    registered = AGENT_REGISTRY.get(type_ref)
    if registered is not None:
        return registered

    module_name, _, class_name = type_ref.rpartition(".")
    if not module_name:
        known = ", ".join(available_agents()) or "none"
        raise ValueError(f"Unknown agent type {type_ref!r} (registered: {known})")

    candidate = getattr(importlib.import_module(module_name), class_name)
    if not (isinstance(candidate, type) and issubclass(candidate, BaseAgent)):
        raise TypeError(f"{type_ref} is not a BaseAgent subclass")
    return candidate
