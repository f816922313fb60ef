"""
Per-agent search tree.

Nodes live in one flat list and refer to each other by index, which keeps
trees cheap to build and trivially discarded after each turn. Each
controlled or opposing agent owns its own tree; trees only meet through
the joint simulation that scores a combination of their choices.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from arena.core.decision import Decision


@dataclass
class SearchNode:
    """
    One decision in an agent's tree.

    Attributes:
        decision: Decision taken to reach this node (None at the root)
        parent: Index of the parent node (-1 at the root)
        depth: Simulated turns from the root
        priority: Heuristic value from the generator, used for ordering
        children: Indices of child nodes
        visits: Times this node was on a simulated path
        total: Sum of backed-up scores
        expanded: Whether children were generated
    """

    decision: Optional[Decision]
    parent: int
    depth: int
    priority: float = 0.0
    children: List[int] = field(default_factory=list)
    visits: int = 0
    total: float = 0.0
    expanded: bool = False

    @property
    def mean(self) -> float:
        return self.total / self.visits if self.visits else 0.0


class SearchTree:
    """
    Arena of nodes for one agent.

    Attributes:
        agent_id: Agent owning the tree
        controlled: True for the engine's own agents
        low, high: Lowest and highest score ever backed up (for normalisation)
    """

    ROOT = 0

    def __init__(self, agent_id: int, controlled: bool):
        self.agent_id = agent_id
        self.controlled = controlled
        self.nodes: List[SearchNode] = [SearchNode(decision=None, parent=-1, depth=0)]
        self.low = math.inf
        self.high = -math.inf

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> SearchNode:
        return self.nodes[index]

    @property
    def root(self) -> SearchNode:
        return self.nodes[self.ROOT]

    def is_leaf(self, index: int) -> bool:
        return not self.nodes[index].children

    def expand(self, index: int, decisions: Sequence[Decision]) -> List[int]:
        """
        Attach one child per decision to a node.

        Expanding an already expanded node is a no-op.

        Returns:
            Indices of the node's children
        """
        parent = self.nodes[index]
        if parent.expanded:
            return list(parent.children)
        parent.expanded = True
        for decision in decisions:
            child = SearchNode(
                decision=decision,
                parent=index,
                depth=parent.depth + 1,
                priority=decision.expected_value,
            )
            self.nodes.append(child)
            parent.children.append(len(self.nodes) - 1)
        return list(parent.children)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select_child(
        self,
        index: int,
        rng: random.Random,
        exploration: float,
        warmup_visits: int,
    ) -> int:
        """
        Pick the child to follow from a node.

        Unvisited children come first, highest priority first. While the
        parent is still warming up, children are sampled uniformly. After
        that, UCB1 on min/max normalised means decides.

        Raises:
            ValueError: If the node has no children
        """
        parent = self.nodes[index]
        if not parent.children:
            raise ValueError(f"Node {index} of agent {self.agent_id} has no children")

        unvisited = [c for c in parent.children if self.nodes[c].visits == 0]
        if unvisited:
            return max(unvisited, key=lambda c: self.nodes[c].priority)

        if parent.visits < warmup_visits:
            return rng.choice(parent.children)

        log_parent = math.log(max(1, parent.visits))
        best_index = parent.children[0]
        best_score = -math.inf
        for child_index in parent.children:
            child = self.nodes[child_index]
            score = self.normalise(child.mean) + exploration * math.sqrt(log_parent / child.visits)
            if score > best_score:
                best_index, best_score = child_index, score
        return best_index

    def normalise(self, value: float) -> float:
        """Map a score onto [0, 1] using the tree's observed range."""
        if self.high <= self.low:
            return 0.5
        return (value - self.low) / (self.high - self.low)

    # ------------------------------------------------------------------
    # Backpropagation
    # ------------------------------------------------------------------
    def backpropagate(self, path: Sequence[int], score: float) -> None:
        """Add a score to every node on a root-to-leaf path."""
        for index in path:
            node = self.nodes[index]
            node.visits += 1
            node.total += score
        self.low = min(self.low, score)
        self.high = max(self.high, score)

    # ------------------------------------------------------------------
    # Final choice
    # ------------------------------------------------------------------
    def best_root_child(self) -> Optional[SearchNode]:
        """Most visited root child; ties go to the higher mean, then priority."""
        children = [self.nodes[c] for c in self.root.children]
        if not children:
            return None
        return max(children, key=lambda n: (n.visits, n.mean, n.priority))
