"""
Base interfaces and data structures for vector memory.

Defines the memory records that flow through storage and search, and
the abstract contract that every vector store backend must implement.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_millis(dt: datetime) -> int:
    """Convert a datetime to a millisecond epoch (naive values are treated as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def from_millis(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


@dataclass
class Memory:
    """
    A single stored memory: a short text with its embedding and tags.

    The vector and content only change through explicit update or
    merge operations on the memory manager.
    """
    id: str
    content: str
    tags: list[str]
    vector: list[float]
    source_file: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        content: str,
        tags: list[str],
        vector: list[float],
        source_file: Optional[str] = None,
    ) -> "Memory":
        """Build a new memory with a fresh id and matching timestamps."""
        now = utc_now()
        return cls(
            id=str(uuid.uuid4()),
            content=content,
            tags=list(tags),
            vector=list(vector),
            source_file=source_file,
            created_at=now,
            updated_at=now,
        )

    @property
    def updated_at_ms(self) -> int:
        return to_millis(self.updated_at)

    def shares_tag_with(self, tags: list[str]) -> bool:
        return bool(set(self.tags) & set(tags))


@dataclass
class QueryResult:
    """A projection of a Memory returned by searches and listings."""
    id: str
    content: str
    tags: list[str]
    updated_at: int  # milliseconds since epoch
    score: Optional[float] = None  # similarity, or rerank relevance after reranking

    @classmethod
    def from_memory(cls, memory: Memory, score: Optional[float] = None) -> "QueryResult":
        return cls(
            id=memory.id,
            content=memory.content,
            tags=list(memory.tags),
            updated_at=memory.updated_at_ms,
            score=score,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "tags": list(self.tags),
            "updated_at": self.updated_at,
            "score": self.score,
        }


@dataclass(frozen=True)
class TimeRange:
    """Inclusive millisecond-epoch bounds on a memory's updated_at."""
    after: Optional[int] = None
    before: Optional[int] = None

    def contains(self, timestamp: int) -> bool:
        if self.after is not None and timestamp < self.after:
            return False
        if self.before is not None and timestamp > self.before:
            return False
        return True


class VectorStore(ABC):
    """
    Abstract interface for vector storage backends.

    Implementations: ChromaDB (local), pgvector (production)
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the vector store (create collections, etc.)."""
        pass

    @abstractmethod
    async def insert(self, memory: Memory) -> str:
        """
        Store a new memory with its embedding.

        Returns:
            The ID of the stored memory
        """
        pass

    @abstractmethod
    async def update(self, memory: Memory) -> None:
        """Overwrite an existing memory (content, tags, vector, updated_at)."""
        pass

    @abstractmethod
    async def delete(self, memory_id: str) -> bool:
        """Delete a memory. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def clear(self) -> int:
        """Delete every memory. Returns how many were removed."""
        pass

    @abstractmethod
    async def list_memories(self) -> list[QueryResult]:
        """List all memories, most recently updated first."""
        pass

    @abstractmethod
    async def search_by_vector(
        self,
        vector: list[float],
        limit: int,
        min_score: float,
        time_range: Optional[TimeRange] = None,
    ) -> list[QueryResult]:
        """
        Search for similar memories.

        Args:
            vector: The embedding to search from
            limit: Maximum number of results
            min_score: Minimum similarity in [0, 1]
            time_range: Optional inclusive bounds on updated_at

        Returns:
            Results ordered by descending similarity, score set
        """
        pass

    @abstractmethod
    async def find_memory_by_id(self, memory_id: str) -> Optional[Memory]:
        """Get a full memory (including its vector) by ID."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get total number of stored memories."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass
