"""
Decision definitions and utilities.

A Decision is the engine's output unit for a single agent. This module provides:
- Decision dataclass
- Parameter validation per decision kind
- Decision factory methods
- Decision (de)serialization to plain dicts
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional

from .types import DecisionKind, GridPos


@dataclass(frozen=True)
class Decision:
    """
    A scored action for one agent.

    Decisions consist of a kind, the coordinates/targets that kind needs,
    and the scoring metadata produced by whoever proposed it.

    Use static factory methods for convenient construction:
        - Decision.hunker()
        - Decision.move(x, y)
        - Decision.attack(target_id)
        - Decision.throw(x, y)
        - Decision.move_attack(x, y, target_id)
        - Decision.move_throw(x, y, bomb_x, bomb_y)

    Attributes:
        kind: Decision kind
        x, y: Move destination, or bomb landing tile for THROW
        target_id: Shot target for ATTACK / MOVE_ATTACK
        bomb_x, bomb_y: Bomb landing tile for MOVE_THROW
        expected_value: Score on the generator's common (unnormalized) scale
        expected_damage: Estimated damage dealt (0 if not offensive)
        kill_probability: Linear kill proxy in [0, 1]
        rationale: Diagnostic text, not used for correctness
    """

    kind: DecisionKind
    x: Optional[int] = None
    y: Optional[int] = None
    target_id: Optional[int] = None
    bomb_x: Optional[int] = None
    bomb_y: Optional[int] = None
    expected_value: float = 0.0
    expected_damage: int = 0
    kill_probability: float = 0.0
    rationale: str = ""

    def __post_init__(self):
        """Validate decision parameters after initialization."""
        self._validate()

    def _validate(self) -> None:
        """
        Validate that parameters match the decision kind.

        Raises:
            ValueError: If parameters are invalid for the decision kind
        """
        needs_xy = self.kind in (
            DecisionKind.MOVE,
            DecisionKind.THROW,
            DecisionKind.MOVE_ATTACK,
            DecisionKind.MOVE_THROW,
        )
        if needs_xy and (self.x is None or self.y is None):
            raise ValueError(f"{self.kind.name} decision requires 'x' and 'y'")
        if self.kind.attacks and self.target_id is None:
            raise ValueError(f"{self.kind.name} decision requires 'target_id'")
        if self.kind == DecisionKind.MOVE_THROW and (self.bomb_x is None or self.bomb_y is None):
            raise ValueError("MOVE_THROW decision requires 'bomb_x' and 'bomb_y'")
        if not 0.0 <= self.kill_probability <= 1.0:
            raise ValueError(f"kill_probability must be in [0, 1], got {self.kill_probability}")

    # ------------------------------------------------------------------
    # Derived coordinates
    # ------------------------------------------------------------------
    @property
    def destination(self) -> Optional[GridPos]:
        """Tile the agent moves to, or None for stationary decisions."""
        if self.kind.moves:
            return (self.x, self.y)
        return None

    @property
    def landing(self) -> Optional[GridPos]:
        """Tile a bomb lands on, or None if no bomb is thrown."""
        if self.kind == DecisionKind.THROW:
            return (self.x, self.y)
        if self.kind == DecisionKind.MOVE_THROW:
            return (self.bomb_x, self.bomb_y)
        return None

    # ------------------------------------------------------------------
    # Copy helpers
    # ------------------------------------------------------------------
    def with_destination(self, pos: GridPos) -> Decision:
        """Return a copy moving to a different tile (same follow-up action)."""
        if not self.kind.moves:
            raise ValueError(f"{self.kind.name} decision has no destination")
        return replace(self, x=pos[0], y=pos[1])

    def with_value(self, value: float, rationale: str | None = None) -> Decision:
        """Return a copy with a different expected value."""
        return replace(
            self,
            expected_value=value,
            rationale=self.rationale if rationale is None else rationale,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert decision to a JSON-serializable dictionary.

        Returns:
            Dictionary representation of the decision
        """
        return {
            "kind": self.kind.name,
            "x": self.x,
            "y": self.y,
            "target_id": self.target_id,
            "bomb_x": self.bomb_x,
            "bomb_y": self.bomb_y,
            "expected_value": self.expected_value,
            "expected_damage": self.expected_damage,
            "kill_probability": self.kill_probability,
            "rationale": self.rationale,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Decision:
        """
        Create a decision from a dictionary.

        Args:
            data: Dictionary containing at least 'kind'

        Returns:
            Decision instance

        Raises:
            ValueError: If dictionary format is invalid
        """
        if "kind" not in data:
            raise ValueError("Decision dictionary must contain 'kind'")

        try:
            kind = DecisionKind[data["kind"]]
        except KeyError as exc:
            raise ValueError(f"Unknown decision kind: {data['kind']}") from exc

        return cls(
            kind=kind,
            x=data.get("x"),
            y=data.get("y"),
            target_id=data.get("target_id"),
            bomb_x=data.get("bomb_x"),
            bomb_y=data.get("bomb_y"),
            expected_value=float(data.get("expected_value", 0.0)),
            expected_damage=int(data.get("expected_damage", 0)),
            kill_probability=float(data.get("kill_probability", 0.0)),
            rationale=data.get("rationale", ""),
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.kind == DecisionKind.HUNKER:
            return "HUNKER"
        elif self.kind == DecisionKind.MOVE:
            return f"MOVE ({self.x},{self.y})"
        elif self.kind == DecisionKind.ATTACK:
            return f"ATTACK target={self.target_id}"
        elif self.kind == DecisionKind.THROW:
            return f"THROW ({self.x},{self.y})"
        elif self.kind == DecisionKind.MOVE_ATTACK:
            return f"MOVE ({self.x},{self.y}) + ATTACK target={self.target_id}"
        return f"MOVE ({self.x},{self.y}) + THROW ({self.bomb_x},{self.bomb_y})"

    # FACTORY METHODS
    @staticmethod
    def hunker(value: float = 0.0, rationale: str = "") -> Decision:
        """Create a HUNKER decision (defensive stance, no action)."""
        return Decision(DecisionKind.HUNKER, expected_value=value, rationale=rationale)

    @staticmethod
    def move(x: int, y: int, value: float = 0.0, rationale: str = "") -> Decision:
        """Create a MOVE decision toward tile (x, y)."""
        return Decision(DecisionKind.MOVE, x=x, y=y, expected_value=value, rationale=rationale)

    @staticmethod
    def attack(
        target_id: int,
        value: float = 0.0,
        damage: int = 0,
        kill_probability: float = 0.0,
        rationale: str = "",
    ) -> Decision:
        """Create an ATTACK decision against an enemy agent."""
        return Decision(
            DecisionKind.ATTACK,
            target_id=target_id,
            expected_value=value,
            expected_damage=damage,
            kill_probability=kill_probability,
            rationale=rationale,
        )

    @staticmethod
    def throw(
        x: int,
        y: int,
        value: float = 0.0,
        damage: int = 0,
        kill_probability: float = 0.0,
        rationale: str = "",
    ) -> Decision:
        """Create a THROW decision landing a bomb on tile (x, y)."""
        return Decision(
            DecisionKind.THROW,
            x=x,
            y=y,
            expected_value=value,
            expected_damage=damage,
            kill_probability=kill_probability,
            rationale=rationale,
        )

    @staticmethod
    def move_attack(
        x: int,
        y: int,
        target_id: int,
        value: float = 0.0,
        damage: int = 0,
        kill_probability: float = 0.0,
        rationale: str = "",
    ) -> Decision:
        """Create a compound MOVE + ATTACK decision."""
        return Decision(
            DecisionKind.MOVE_ATTACK,
            x=x,
            y=y,
            target_id=target_id,
            expected_value=value,
            expected_damage=damage,
            kill_probability=kill_probability,
            rationale=rationale,
        )

    @staticmethod
    def move_throw(
        x: int,
        y: int,
        bomb_x: int,
        bomb_y: int,
        value: float = 0.0,
        damage: int = 0,
        kill_probability: float = 0.0,
        rationale: str = "",
    ) -> Decision:
        """Create a compound MOVE + THROW decision."""
        return Decision(
            DecisionKind.MOVE_THROW,
            x=x,
            y=y,
            bomb_x=bomb_x,
            bomb_y=bomb_y,
            expected_value=value,
            expected_damage=damage,
            kill_probability=kill_probability,
            rationale=rationale,
        )
