"""
Memory Manager - Orchestrates the vector memory system.

This is the high-level interface the CLI uses.
It handles:
- Embedding and storing new memories (with duplicate detection)
- Updating, merging and deleting memories
- Multi-layer semantic search with reranking
"""

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from .base import Memory, QueryResult, TimeRange, VectorStore, utc_now
from ..rerank import Reranker, create_reranker
from ..search.models import MemoryTree, SearchConfig
from ..search.service import SearchService
from .chroma_store import ChromaVectorStore
from .embeddings import EmbeddingService, create_embedding_service

logger = logging.getLogger("memo.memory.manager")

DEFAULT_DUPLICATE_THRESHOLD = 0.85


@dataclass
class AddResult:
    """
    Outcome of add_memory.

    memory is None when the text was not stored because near-duplicates
    already exist; they are listed in duplicates.
    """
    memory: Optional[Memory]
    duplicates: list[QueryResult] = field(default_factory=list)

    @property
    def stored(self) -> bool:
        return self.memory is not None


class MemoryManager:
    """
    High-level memory management.

    Owns the vector store, embedding service and reranker, and exposes
    the operations behind each CLI command.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        reranker: Reranker,
        search_config: Optional[SearchConfig] = None,
    ):
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.reranker = reranker
        self.search_service = SearchService(
            vector_store=vector_store,
            embedding_service=embedding_service,
            reranker=reranker,
            default_config=search_config,
        )
        self._initialized = False
        logger.info("MemoryManager created")

    async def initialize(self) -> None:
        """Initialize the memory system."""
        await self.vector_store.initialize()
        self._initialized = True
        count = await self.vector_store.count()
        logger.info(f"MemoryManager initialized with {count} stored memories")

    def _ensure_initialized(self) -> None:
        """Ensure the system is initialized."""
        if not self._initialized:
            raise RuntimeError("MemoryManager not initialized. Call initialize() first.")

    @staticmethod
    def _normalize_tags(tags: Optional[list[str]]) -> list[str]:
        """Strip, drop empties and deduplicate while preserving order."""
        seen = set()
        normalized = []
        for tag in tags or []:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.add(tag)
                normalized.append(tag)
        return normalized

    async def add_memory(
        self,
        content: str,
        tags: Optional[list[str]] = None,
        source_file: Optional[str] = None,
        force: bool = False,
        duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    ) -> AddResult:
        """
        Embed and store a memory.

        Args:
            content: The memory text
            tags: Tags for the memory
            source_file: Where the text came from, if anywhere
            force: Store even if similar memories already exist
            duplicate_threshold: Similarity at or above which an existing
                memory counts as a duplicate

        Returns:
            AddResult with the stored memory, or the duplicates found
        """
        self._ensure_initialized()

        content = content.strip()
        if not content:
            raise ValueError("Cannot store an empty memory")

        vector = await self.embedding_service.encode(content)

        if not force:
            duplicates = await self.vector_store.search_by_vector(
                vector, limit=5, min_score=duplicate_threshold
            )
            if duplicates:
                logger.info(
                    f"Skipped storing memory: {len(duplicates)} similar memories "
                    f"above {duplicate_threshold:.2f}"
                )
                return AddResult(memory=None, duplicates=duplicates)

        memory = Memory.create(
            content=content,
            tags=self._normalize_tags(tags),
            vector=vector,
            source_file=source_file,
        )
        await self.vector_store.insert(memory)

        logger.info(f"Stored memory {memory.id} with {len(vector)}-dim embedding")
        return AddResult(memory=memory)

    async def update_memory(
        self,
        memory_id: str,
        content: str,
        tags: Optional[list[str]] = None,
    ) -> Memory:
        """
        Replace a memory's content (re-embedding it) and optionally its tags.

        Raises:
            KeyError: If no memory has this ID
            ValueError: If the new content is empty
        """
        self._ensure_initialized()

        existing = await self.vector_store.find_memory_by_id(memory_id)
        if existing is None:
            raise KeyError(memory_id)

        content = content.strip()
        if not content:
            raise ValueError("Cannot store an empty memory")

        existing.content = content
        existing.vector = await self.embedding_service.encode(existing.content)
        if tags is not None:
            existing.tags = self._normalize_tags(tags)
        existing.updated_at = utc_now()

        await self.vector_store.update(existing)
        logger.info(f"Updated memory {memory_id}")
        return existing

    async def merge_memories(
        self,
        memory_ids: list[str],
        content: str,
        tags: Optional[list[str]] = None,
    ) -> Memory:
        """
        Replace several memories with one merged memory.

        Tags default to the union of the source memories' tags.

        Raises:
            ValueError: If fewer than two IDs are given
            KeyError: If any ID does not exist
        """
        self._ensure_initialized()

        unique_ids = list(dict.fromkeys(memory_ids))
        if len(unique_ids) < 2:
            raise ValueError("Merging requires at least two distinct memory IDs")

        sources = []
        for memory_id in unique_ids:
            memory = await self.vector_store.find_memory_by_id(memory_id)
            if memory is None:
                raise KeyError(memory_id)
            sources.append(memory)

        if tags is None:
            tags = [tag for source in sources for tag in source.tags]

        merged = Memory.create(
            content=content.strip(),
            tags=self._normalize_tags(tags),
            vector=await self.embedding_service.encode(content.strip()),
        )
        await self.vector_store.insert(merged)

        for source in sources:
            await self.vector_store.delete(source.id)

        logger.info(f"Merged {len(sources)} memories into {merged.id}")
        return merged

    async def delete_memory(self, memory_id: str) -> bool:
        """Delete a memory. Returns False if it did not exist."""
        self._ensure_initialized()
        return await self.vector_store.delete(memory_id)

    async def clear(self) -> int:
        """Delete every memory. Returns how many were removed."""
        self._ensure_initialized()
        return await self.vector_store.clear()

    async def list_memories(self) -> list[QueryResult]:
        self._ensure_initialized()
        return await self.vector_store.list_memories()

    async def count(self) -> int:
        self._ensure_initialized()
        return await self.vector_store.count()

    async def search(
        self,
        query: str,
        limit: int = 10,
        time_range: Optional[TimeRange] = None,
        config: Optional[SearchConfig] = None,
    ) -> list[QueryResult]:
        """Multi-layer search, reranked against the query text."""
        self._ensure_initialized()
        return await self.search_service.search(
            query, limit=limit, time_range=time_range, config=config
        )

    async def search_tree(
        self,
        query: str,
        time_range: Optional[TimeRange] = None,
        config: Optional[SearchConfig] = None,
    ) -> MemoryTree:
        """Multi-layer search returned as a provenance tree."""
        self._ensure_initialized()
        return await self.search_service.search_tree(
            query, time_range=time_range, config=config
        )

    async def close(self) -> None:
        """Clean up resources."""
        await self.vector_store.close()
        await self.reranker.close()
        logger.info("MemoryManager closed")


async def create_memory_manager(
    store_type: Literal["chroma", "pgvector"] = "chroma",
    embedding_provider: Literal["openai", "local"] = "openai",
    embedding_api_key: str = "",
    embedding_model: str = "",
    embedding_base_url: Optional[str] = None,
    embedding_dimensions: int | None = None,
    rerank_provider: Literal["api", "local"] = "api",
    rerank_api_key: str = "",
    rerank_model: str = "",
    rerank_base_url: Optional[str] = None,
    rerank_timeout: float = 60.0,
    postgres_url: str = "",
    chroma_path: str = "~/.memo/brain",
    search_config: Optional[SearchConfig] = None,
) -> MemoryManager:
    """
    Factory function to create a configured MemoryManager.

    Args:
        store_type: "chroma" for local, "pgvector" for production
        embedding_provider: "openai" or "local"
        embedding_api_key: Required for openai embeddings
        embedding_model: Embedding model name (provider default if empty)
        embedding_base_url: OpenAI-compatible endpoint override
        embedding_dimensions: Override embedding output dimensions
        rerank_provider: "api" or "local"
        rerank_api_key: Required for the api reranker
        rerank_model: Rerank model name (provider default if empty)
        rerank_base_url: Rerank endpoint override
        rerank_timeout: Rerank request timeout in seconds
        postgres_url: Required for pgvector store
        chroma_path: Path for ChromaDB storage
        search_config: Default budgets for searches

    Returns:
        Initialized MemoryManager
    """
    embedding_service = create_embedding_service(
        provider=embedding_provider,
        api_key=embedding_api_key,
        model=embedding_model,
        base_url=embedding_base_url,
        dimensions=embedding_dimensions,
    )

    reranker = create_reranker(
        provider=rerank_provider,
        api_key=rerank_api_key,
        model=rerank_model,
        base_url=rerank_base_url,
        timeout=rerank_timeout,
    )

    if store_type == "chroma":
        vector_store = ChromaVectorStore(persist_directory=chroma_path)
    elif store_type == "pgvector":
        if not postgres_url:
            raise ValueError("postgres_url required for pgvector store")
        from .pgvector_store import PgVectorStore
        vector_store = PgVectorStore(
            connection_string=postgres_url,
            embedding_dimension=embedding_service.dimension,
        )
    else:
        raise ValueError(f"Unknown store type: {store_type}")

    manager = MemoryManager(
        vector_store=vector_store,
        embedding_service=embedding_service,
        reranker=reranker,
        search_config=search_config,
    )

    await manager.initialize()
    return manager
