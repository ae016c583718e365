"""
ChromaDB Vector Store Implementation.

ChromaDB is perfect for local/development use:
- No server required
- Stores everything in a local directory
- Built-in persistence
- Good performance for moderate scale (< 1M vectors)
"""

import json
import logging
from pathlib import Path
from typing import Optional

from ..errors import CollaboratorError
from .base import Memory, QueryResult, TimeRange, VectorStore, from_millis, to_millis

logger = logging.getLogger("memo.memory.chroma")


def _time_range_filter(time_range: Optional[TimeRange]) -> Optional[dict]:
    """Translate a TimeRange into a Chroma `where` clause on updated_at."""
    if time_range is None:
        return None

    clauses = []
    if time_range.after is not None:
        clauses.append({"updated_at": {"$gte": time_range.after}})
    if time_range.before is not None:
        clauses.append({"updated_at": {"$lte": time_range.before}})

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class ChromaVectorStore(VectorStore):
    """
    ChromaDB implementation of the vector store.

    Stores memories locally with full persistence. The collection uses
    cosine space so similarity is simply 1 - distance.
    """

    def __init__(
        self,
        persist_directory: str = "./memo_store",
        collection_name: str = "memories",
    ):
        self.persist_directory = Path(persist_directory).expanduser()
        self.collection_name = collection_name
        self._client = None
        self._collection = None
        logger.info(f"ChromaVectorStore configured with directory: {persist_directory}")

    async def initialize(self) -> None:
        """Initialize ChromaDB client and collection."""
        try:
            import chromadb
            from chromadb.config import Settings
        except ImportError:
            raise RuntimeError(
                "chromadb not installed. Install with: pip install chromadb"
            )

        self.persist_directory.mkdir(parents=True, exist_ok=True)

        self._client = chromadb.PersistentClient(
            path=str(self.persist_directory),
            settings=Settings(
                anonymized_telemetry=False,
                allow_reset=True,
            ),
        )

        self._collection = self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={"description": "memo memory store", "hnsw:space": "cosine"},
        )

        count = self._collection.count()
        logger.info(f"ChromaDB initialized with {count} existing memories")

    def _ensure_initialized(self) -> None:
        """Ensure the store is initialized."""
        if self._collection is None:
            raise RuntimeError("ChromaVectorStore not initialized. Call initialize() first.")

    def _memory_to_metadata(self, memory: Memory) -> dict:
        """Convert a Memory to ChromaDB metadata."""
        metadata = {
            "tags": json.dumps(memory.tags),
            "created_at": to_millis(memory.created_at),
            "updated_at": memory.updated_at_ms,
        }
        # Chroma rejects None metadata values
        if memory.source_file:
            metadata["source_file"] = memory.source_file
        return metadata

    def _to_query_result(
        self, id: str, metadata: dict, document: str, score: Optional[float] = None
    ) -> QueryResult:
        return QueryResult(
            id=id,
            content=document,
            tags=json.loads(metadata.get("tags", "[]")),
            updated_at=int(metadata["updated_at"]),
            score=score,
        )

    def _to_memory(self, id: str, metadata: dict, document: str, embedding) -> Memory:
        return Memory(
            id=id,
            content=document,
            tags=json.loads(metadata.get("tags", "[]")),
            vector=[float(x) for x in embedding],
            source_file=metadata.get("source_file"),
            created_at=from_millis(int(metadata["created_at"])),
            updated_at=from_millis(int(metadata["updated_at"])),
        )

    async def insert(self, memory: Memory) -> str:
        """Store a new memory with its embedding."""
        self._ensure_initialized()

        self._collection.add(
            ids=[memory.id],
            embeddings=[memory.vector],
            documents=[memory.content],
            metadatas=[self._memory_to_metadata(memory)],
        )
        logger.info(f"Stored new memory: {memory.id}")
        return memory.id

    async def update(self, memory: Memory) -> None:
        """Overwrite an existing memory."""
        self._ensure_initialized()

        self._collection.update(
            ids=[memory.id],
            embeddings=[memory.vector],
            documents=[memory.content],
            metadatas=[self._memory_to_metadata(memory)],
        )
        logger.info(f"Updated memory: {memory.id}")

    async def delete(self, memory_id: str) -> bool:
        """Delete a memory by ID."""
        self._ensure_initialized()

        existing = self._collection.get(ids=[memory_id])
        if not existing["ids"]:
            return False

        self._collection.delete(ids=[memory_id])
        logger.info(f"Deleted memory: {memory_id}")
        return True

    async def clear(self) -> int:
        """Delete every memory in the collection."""
        self._ensure_initialized()

        existing = self._collection.get()
        ids = existing["ids"]
        if ids:
            self._collection.delete(ids=ids)
        logger.info(f"Cleared {len(ids)} memories")
        return len(ids)

    async def list_memories(self) -> list[QueryResult]:
        """List all memories, most recently updated first."""
        self._ensure_initialized()

        results = self._collection.get(include=["documents", "metadatas"])

        memories = [
            self._to_query_result(
                id=id,
                metadata=results["metadatas"][i],
                document=results["documents"][i],
            )
            for i, id in enumerate(results["ids"])
        ]
        memories.sort(key=lambda m: m.updated_at, reverse=True)
        return memories

    async def search_by_vector(
        self,
        vector: list[float],
        limit: int,
        min_score: float,
        time_range: Optional[TimeRange] = None,
    ) -> list[QueryResult]:
        """Search for similar memories."""
        self._ensure_initialized()

        total = self._collection.count()
        if total == 0:
            return []

        query_kwargs = {
            "query_embeddings": [vector],
            "n_results": min(limit, total),
            "include": ["documents", "metadatas", "distances"],
        }
        where = _time_range_filter(time_range)
        if where is not None:
            query_kwargs["where"] = where

        try:
            results = self._collection.query(**query_kwargs)
        except Exception as e:
            raise CollaboratorError(f"Chroma search failed: {e}") from e

        search_results = []

        if results["ids"] and results["ids"][0]:
            for i, id in enumerate(results["ids"][0]):
                distance = results["distances"][0][i]
                # Cosine distance lies in [0, 2]; clamp similarity into [0, 1]
                similarity = min(1.0, max(0.0, 1 - distance))

                if similarity >= min_score:
                    search_results.append(self._to_query_result(
                        id=id,
                        metadata=results["metadatas"][0][i],
                        document=results["documents"][0][i],
                        score=similarity,
                    ))

        search_results.sort(key=lambda x: x.score, reverse=True)
        return search_results[:limit]

    async def find_memory_by_id(self, memory_id: str) -> Optional[Memory]:
        """Get a specific memory, including its embedding."""
        self._ensure_initialized()

        try:
            results = self._collection.get(
                ids=[memory_id],
                include=["documents", "metadatas", "embeddings"],
            )
        except Exception as e:
            raise CollaboratorError(f"Chroma lookup of {memory_id} failed: {e}") from e

        if results["ids"]:
            return self._to_memory(
                id=results["ids"][0],
                metadata=results["metadatas"][0],
                document=results["documents"][0],
                embedding=results["embeddings"][0],
            )
        return None

    async def count(self) -> int:
        """Get total number of stored memories."""
        self._ensure_initialized()
        return self._collection.count()

    async def close(self) -> None:
        """Clean up resources."""
        # ChromaDB PersistentClient handles cleanup automatically
        self._client = None
        self._collection = None
        logger.info("ChromaDB connection closed")
