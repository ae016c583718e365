"""
Candidate aggregation for the expansion search.

The aggregator is the single owner of the visited-id set. The expansion
engine only calls accept() after a layer's concurrent branch calls have
all returned, so first-acceptance order is exactly submission order.
"""

import logging
from typing import Optional

from ..memory.base import QueryResult
from .models import MemoryNode, MemoryTree

logger = logging.getLogger("memo.search.aggregator")


class CandidateAggregator:
    """
    Records accepted memories and exposes them as a flat list or a tree.

    Both views are built from the same accept() calls, so a pre-order walk
    of the tree visits exactly the ids of the flat list.
    """

    def __init__(self, max_nodes: int):
        self.max_nodes = max_nodes
        self.root = MemoryNode(memory=None, layer=0)
        self._visited: set[str] = set()
        self._flat: list[QueryResult] = []

    @property
    def count(self) -> int:
        return len(self._flat)

    @property
    def is_full(self) -> bool:
        return self.count >= self.max_nodes

    def seen(self, memory_id: str) -> bool:
        return memory_id in self._visited

    def accept(
        self,
        result: QueryResult,
        parent: Optional[MemoryNode] = None,
        layer: int = 1,
    ) -> Optional[MemoryNode]:
        """
        Accept a candidate under parent (the root when None).

        Returns:
            The new node, or None if the id was already accepted or the
            node budget is exhausted.
        """
        if result.id in self._visited:
            return None
        if self.is_full:
            return None

        self._visited.add(result.id)
        self._flat.append(result)

        node = MemoryNode(memory=result, layer=layer)
        (parent or self.root).children.append(node)
        return node

    def flat(self) -> list[QueryResult]:
        """Accepted candidates in first-seen order."""
        return list(self._flat)

    def tree(self) -> MemoryTree:
        return MemoryTree(root=self.root, total_nodes=self.count)
