"""
Data structures for the multi-layer expansion search.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..errors import ConfigError
from ..memory.base import QueryResult
from .thresholds import MAX_THRESHOLD, generate_thresholds


@dataclass
class SearchConfig:
    """Budgets and thresholds for one expansion search."""
    first_threshold: float = 0.60
    max_depth: int = 5
    max_nodes: int = 100
    branch_limit: int = 5
    require_tag_overlap: bool = True

    def validate(self) -> None:
        """Raise ConfigError if any budget is out of range."""
        if not 0.0 <= self.first_threshold <= MAX_THRESHOLD:
            raise ConfigError(
                f"first_threshold must be between 0.0 and {MAX_THRESHOLD}, "
                f"got {self.first_threshold}"
            )
        for name in ("max_depth", "max_nodes", "branch_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    def generate_thresholds(self) -> list[float]:
        return generate_thresholds(self.first_threshold, self.max_depth)


@dataclass
class MemoryNode:
    """
    One accepted memory in the provenance tree.

    The synthetic root has memory=None and layer 0; its children are the
    layer-1 results.
    """
    memory: Optional[QueryResult] = None
    children: list["MemoryNode"] = field(default_factory=list)
    layer: int = 0

    @property
    def is_root(self) -> bool:
        return self.memory is None

    def to_dict(self) -> dict:
        data = {
            "layer": self.layer,
            "children": [child.to_dict() for child in self.children],
        }
        if not self.is_root:
            data["memory"] = self.memory.to_dict()
        return data


@dataclass
class MemoryTree:
    """Provenance view of an expansion: who discovered whom."""
    root: MemoryNode
    total_nodes: int

    def iter_preorder(self) -> Iterator[MemoryNode]:
        """Yield every node except the synthetic root, parents before children."""
        stack = list(reversed(self.root.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def ids(self) -> list[str]:
        return [node.memory.id for node in self.iter_preorder()]

    def to_dict(self) -> dict:
        return {
            "total_nodes": self.total_nodes,
            "root": self.root.to_dict(),
        }
