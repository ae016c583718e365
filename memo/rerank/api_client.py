"""
HTTP rerank provider.

Talks to any service exposing the common `POST {base_url}/rerank` route
(Zhipu, Jina, Cohere-compatible gateways):

    request:  {"model", "query", "documents", "top_n"}
    response: {"results": [{"index", "relevance_score"}, ...]}
"""

import logging
from typing import Optional

import httpx

from ..errors import RerankError
from .base import Reranker, RerankItem

logger = logging.getLogger("memo.rerank.api")

DEFAULT_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"


class ApiReranker(Reranker):
    """Rerank provider backed by a remote HTTP API."""

    def __init__(
        self,
        api_key: str,
        model: str = "rerank",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        logger.debug(f"ApiReranker created: model={model}, base_url={self._base_url}")

    @property
    def provider_name(self) -> str:
        return "api"

    @property
    def model_name(self) -> str:
        return self._model

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def rerank(
        self,
        query: str,
        documents: list[str],
        top_n: Optional[int] = None,
    ) -> list[RerankItem]:
        """Rerank documents via the remote API."""
        logger.debug(f"Reranking {len(documents)} documents, top_n={top_n}")

        payload = {
            "model": self._model,
            "query": query,
            "documents": documents,
        }
        if top_n is not None:
            payload["top_n"] = top_n

        client = self._get_client()
        try:
            response = await client.post(f"{self._base_url}/rerank", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Rerank request failed: {e}")
            raise RerankError(f"Rerank request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Rerank API error ({response.status_code}): {response.text}")
            raise RerankError(f"Rerank API error ({response.status_code}): {response.text}")

        try:
            results = response.json()["results"]
            items = [
                RerankItem(index=int(r["index"]), score=float(r["relevance_score"]))
                for r in results
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise RerankError(f"Malformed rerank response: {e}") from e

        logger.debug(f"Rerank API returned {len(items)} results")
        return items

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
