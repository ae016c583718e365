"""
Search Service - query text in, related memories out.

Pipeline:
1. Encode the query with the embedding service
2. Expand a bounded neighborhood from the query vector
3. Rerank the flat candidate list against the query text (flat mode),
   or return the provenance tree as-is (tree mode)
"""

import logging
from typing import Optional

from ..errors import CollaboratorError, ConfigError, RerankError, SearchError
from ..memory.base import QueryResult, TimeRange, VectorStore
from ..memory.embeddings import EmbeddingService
from ..rerank.base import Reranker
from .expansion import ExpansionEngine, ExpansionResult
from .models import MemoryTree, SearchConfig
from .rerank_gate import RerankGate

logger = logging.getLogger("memo.search.service")


class SearchService:
    """Wires the embedding service, vector store and reranker into one search flow."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        reranker: Reranker,
        default_config: Optional[SearchConfig] = None,
    ):
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.rerank_gate = RerankGate(reranker)
        self.default_config = default_config or SearchConfig()

    async def _encode(self, query: str) -> list[float]:
        try:
            return await self.embedding_service.encode(query)
        except CollaboratorError as e:
            raise SearchError("embedding", str(e)) from e

    async def _expand(
        self,
        query: str,
        time_range: Optional[TimeRange],
        config: Optional[SearchConfig],
    ) -> ExpansionResult:
        search_config = config or self.default_config
        search_config.validate()

        query_vector = await self._encode(query)
        engine = ExpansionEngine(self.vector_store, search_config)
        return await engine.expand(query_vector, time_range=time_range)

    async def search(
        self,
        query: str,
        limit: int = 10,
        time_range: Optional[TimeRange] = None,
        config: Optional[SearchConfig] = None,
    ) -> list[QueryResult]:
        """
        Find memories related to query, ordered by rerank relevance.

        Returns an empty list when nothing clears the first threshold.

        Raises:
            ConfigError: Invalid search config or limit
            SearchError: Embedding, expansion or rerank failure
        """
        if limit < 1:
            raise ConfigError(f"limit must be a positive integer, got {limit}")

        expansion = await self._expand(query, time_range, config)
        if expansion.is_empty:
            return []

        candidates = expansion.flat()
        logger.debug(f"Found {len(candidates)} candidates for reranking")

        try:
            return await self.rerank_gate.apply(query, candidates, limit)
        except RerankError as e:
            raise SearchError("rerank", str(e)) from e

    async def search_tree(
        self,
        query: str,
        time_range: Optional[TimeRange] = None,
        config: Optional[SearchConfig] = None,
    ) -> MemoryTree:
        """Return the expansion as a provenance tree, in similarity order per parent."""
        expansion = await self._expand(query, time_range, config)
        return expansion.tree()
