"""
Cooperative multi-agent search.

- SearchTree: per-agent arena of nodes
- JointSimulator / evaluate: simulated joint turns and scoring
- CooperativeSearch: the budgeted search loop
- SearchCache: bounded memoization of results
"""

from .tree import SearchNode, SearchTree
from .rollout import JointSimulator, evaluate, is_terminal
from .smitsimax import CooperativeSearch, SearchResult
from .cache import SearchCache

__all__ = [
    "SearchNode",
    "SearchTree",
    "JointSimulator",
    "evaluate",
    "is_terminal",
    "CooperativeSearch",
    "SearchResult",
    "SearchCache",
]
