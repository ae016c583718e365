"""
Final ordering of expansion candidates by an external reranker.

The reranker's order is authoritative. There is no fallback to raw
similarity order: if reranking fails the whole search fails.
"""

import logging
from dataclasses import replace

from ..errors import RerankError
from ..memory.base import QueryResult
from ..rerank.base import Reranker

logger = logging.getLogger("memo.search.rerank_gate")


class RerankGate:
    """Submits candidates plus the query text to a reranker and keeps its top results."""

    def __init__(self, reranker: Reranker):
        self.reranker = reranker

    async def apply(
        self,
        query: str,
        candidates: list[QueryResult],
        limit: int,
    ) -> list[QueryResult]:
        """
        Rerank candidates and return at most `limit` of them.

        Each returned result carries the reranker's relevance score in
        place of its similarity score.

        Raises:
            RerankError: If the reranker call fails for any reason.
        """
        if not candidates:
            return []

        documents = [c.content for c in candidates]

        try:
            items = await self.reranker.rerank(query, documents, top_n=limit)
        except RerankError:
            raise
        except Exception as e:
            raise RerankError(f"{self.reranker.provider_name} reranker failed: {e}") from e

        logger.debug(f"Reranker returned {len(items)} of {len(candidates)} candidates")

        reranked = []
        seen = set()
        for item in items:
            if not 0 <= item.index < len(candidates):
                logger.warning(f"Reranker returned out-of-range index {item.index}, skipping")
                continue
            if item.index in seen:
                logger.warning(f"Reranker returned index {item.index} more than once, skipping")
                continue
            seen.add(item.index)
            result = candidates[item.index]
            reranked.append(replace(result, tags=list(result.tags), score=item.score))
            logger.debug(f"Reranked: index={item.index}, score={item.score:.4f}, id={result.id}")

        return reranked[:limit]
