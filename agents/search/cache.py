"""
Bounded memoization of search results.

Keys are canonical snapshot keys (sorted agent tuples with quantised
wetness). A miss never changes behaviour: the caller simply runs the
full search and stores the result.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional

from arena.core.decision import Decision


class SearchCache:
    """
    Least-recently-used store of per-agent decisions.

    Attributes:
        max_size: Entries kept before the oldest is evicted (0 disables storage)
        hits, misses: Lookup counters
    """

    def __init__(self, max_size: int = 256):
        if max_size < 0:
            raise ValueError(f"Cache size cannot be negative: {max_size}")
        self.max_size = max_size
        self._entries: "OrderedDict[Hashable, Dict[int, Decision]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Optional[Dict[int, Decision]]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return dict(entry)

    def put(self, key: Hashable, decisions: Dict[int, Decision]) -> None:
        if self.max_size == 0:
            return
        self._entries[key] = dict(decisions)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> Dict[str, Any]:
        return {"size": len(self._entries), "max_size": self.max_size, "hits": self.hits, "misses": self.misses}
