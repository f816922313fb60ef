"""
Exceptions raised by the decision engine.

Recoverable conditions are signalled with these types so callers can
degrade to a safe decision for the affected scope only.
"""

from typing import Optional


class UnknownAgentError(KeyError):
    """An agent id is not present in the static profile table."""

    def __init__(self, agent_id: int):
        super().__init__(agent_id)
        self.agent_id = agent_id

    def __str__(self) -> str:
        return f"No profile registered for agent {self.agent_id}"


class MalformedInputError(ValueError):
    """The external feed produced a truncated or unparsable record."""

    def __init__(self, message: str, expected_lines: Optional[int] = None):
        super().__init__(message)
        # Answer size for the broken turn, when its frame could still be read.
        self.expected_lines = expected_lines
