"""
Test fixtures and fake collaborators for memo tests.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from memo.errors import CollaboratorError
from memo.memory.base import Memory, QueryResult, TimeRange, VectorStore
from memo.memory.embeddings import EmbeddingService
from memo.rerank.base import Reranker, RerankItem

QUERY_VECTOR = [0.0, 1.0]


def make_memory(
    id: str,
    content: Optional[str] = None,
    tags: Optional[list[str]] = None,
    vector: Optional[list[float]] = None,
    updated_at: Optional[datetime] = None,
) -> Memory:
    """Create a sample Memory for testing."""
    timestamp = updated_at or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
    return Memory(
        id=id,
        content=content or f"Memory {id}",
        tags=tags if tags is not None else ["shared"],
        vector=vector or [1.0, 0.0],
        created_at=timestamp,
        updated_at=timestamp,
    )


def make_result(id: str, score: Optional[float] = 0.8, tags: Optional[list[str]] = None) -> QueryResult:
    """Create a sample QueryResult for testing."""
    return QueryResult(
        id=id,
        content=f"Memory {id}",
        tags=tags if tags is not None else ["shared"],
        updated_at=1736942400000,
        score=score,
    )


class ScriptedVectorStore(VectorStore):
    """
    Vector store whose neighbors are scripted per source memory.

    Every memory gets a unique vector, so a search can be traced back to
    the memory (or the query) it was issued from. neighbors maps
    "query" or a memory id to [(neighbor_id, similarity), ...].
    """

    def __init__(
        self,
        memories: list[Memory],
        neighbors: dict[str, list[tuple[str, float]]],
        missing: Optional[set[str]] = None,
        failing: Optional[set[str]] = None,
    ):
        self.memories = {}
        self._by_vector = {}
        for index, memory in enumerate(memories):
            memory.vector = [float(index + 1), 0.0]
            self.memories[memory.id] = memory
            self._by_vector[tuple(memory.vector)] = memory.id

        self.neighbors = neighbors
        self.missing = missing or set()
        self.failing = failing or set()
        self.search_calls: list[dict] = []
        self.lookup_calls: list[str] = []

    def source_of(self, vector: list[float]) -> str:
        return self._by_vector.get(tuple(vector), "query")

    async def initialize(self) -> None:
        pass

    async def insert(self, memory: Memory) -> str:
        self.memories[memory.id] = memory
        return memory.id

    async def update(self, memory: Memory) -> None:
        self.memories[memory.id] = memory

    async def delete(self, memory_id: str) -> bool:
        return self.memories.pop(memory_id, None) is not None

    async def clear(self) -> int:
        removed = len(self.memories)
        self.memories.clear()
        return removed

    async def list_memories(self) -> list[QueryResult]:
        return [QueryResult.from_memory(m) for m in self.memories.values()]

    async def search_by_vector(
        self,
        vector: list[float],
        limit: int,
        min_score: float,
        time_range: Optional[TimeRange] = None,
    ) -> list[QueryResult]:
        source = self.source_of(vector)
        self.search_calls.append({
            "source": source,
            "limit": limit,
            "min_score": min_score,
            "time_range": time_range,
        })
        if source in self.failing:
            raise CollaboratorError(f"search from {source} failed")

        results = []
        for neighbor_id, score in self.neighbors.get(source, []):
            memory = self.memories[neighbor_id]
            if score < min_score:
                continue
            if time_range is not None and not time_range.contains(memory.updated_at_ms):
                continue
            results.append(QueryResult.from_memory(memory, score=score))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    async def find_memory_by_id(self, memory_id: str) -> Optional[Memory]:
        self.lookup_calls.append(memory_id)
        if memory_id in self.missing:
            return None
        return self.memories.get(memory_id)

    async def count(self) -> int:
        return len(self.memories)

    async def close(self) -> None:
        pass


class BlockingVectorStore(ScriptedVectorStore):
    """Scripted store whose memory lookups hang until released."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lookup_started = asyncio.Event()
        self.release = asyncio.Event()

    async def find_memory_by_id(self, memory_id: str) -> Optional[Memory]:
        self.lookup_started.set()
        await self.release.wait()
        return await super().find_memory_by_id(memory_id)


class FakeEmbeddingService(EmbeddingService):
    """Always encodes to the same vector."""

    def __init__(self, vector: Optional[list[float]] = None):
        self.vector = vector or list(QUERY_VECTOR)
        self.calls: list[str] = []

    @property
    def dimension(self) -> int:
        return len(self.vector)

    async def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vector)


class FakeReranker(Reranker):
    """Returns a scripted ranking, or reverses the input when none is given."""

    def __init__(self, items: Optional[list[RerankItem]] = None, error: Optional[Exception] = None):
        self.items = items
        self.error = error
        self.calls: list[dict] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-rerank"

    async def rerank(self, query: str, documents: list[str], top_n: Optional[int] = None) -> list[RerankItem]:
        self.calls.append({"query": query, "documents": list(documents), "top_n": top_n})
        if self.error is not None:
            raise self.error
        if self.items is not None:
            return list(self.items)

        items = [
            RerankItem(index=i, score=round(1.0 - 0.1 * rank, 2))
            for rank, i in enumerate(reversed(range(len(documents))))
        ]
        return items[:top_n] if top_n is not None else items

    async def close(self) -> None:
        self.closed = True
