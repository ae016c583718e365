"""
Local rerank provider using a sentence-transformers CrossEncoder.

Useful offline or when no rerank API key is available.
"""

import asyncio
import logging
from typing import Optional

from ..errors import RerankError
from .base import Reranker, RerankItem

logger = logging.getLogger("memo.rerank.local")


class LocalReranker(Reranker):
    """Cross-encoder reranking on the local machine."""

    def __init__(self, model: str = "cross-encoder/ms-marco-MiniLM-L-6-v2"):
        self._model_name = model
        self._model = None
        logger.info(f"LocalReranker initialized with model: {model}")

    @property
    def provider_name(self) -> str:
        return "local"

    @property
    def model_name(self) -> str:
        return self._model_name

    def _get_model(self):
        if self._model is None:
            try:
                from sentence_transformers import CrossEncoder
            except ImportError:
                raise RerankError(
                    "sentence-transformers not installed. "
                    "Install with: pip install 'memo-search[local]'"
                )
            self._model = CrossEncoder(self._model_name)
            logger.info(f"Loaded local rerank model: {self._model_name}")
        return self._model

    def _score(self, query: str, documents: list[str]) -> list[float]:
        model = self._get_model()
        scores = model.predict([(query, doc) for doc in documents])
        return [float(s) for s in scores]

    async def rerank(
        self,
        query: str,
        documents: list[str],
        top_n: Optional[int] = None,
    ) -> list[RerankItem]:
        if not documents:
            return []

        try:
            # CrossEncoder.predict is CPU bound
            scores = await asyncio.to_thread(self._score, query, documents)
        except RerankError:
            raise
        except Exception as e:
            raise RerankError(f"Local rerank failed: {e}") from e

        items = sorted(
            (RerankItem(index=i, score=score) for i, score in enumerate(scores)),
            key=lambda item: item.score,
            reverse=True,
        )
        if top_n is not None:
            items = items[:top_n]
        return items
