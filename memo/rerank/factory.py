"""
Rerank Provider Factory.

Creates the appropriate rerank provider based on configuration.
"""

import logging
from typing import Literal, Optional

from .api_client import ApiReranker
from .base import Reranker
from .local_client import LocalReranker

logger = logging.getLogger("memo.rerank.factory")


def create_reranker(
    provider: Literal["api", "local"] = "api",
    api_key: str = "",
    model: str = "",
    base_url: Optional[str] = None,
    timeout: float = 60.0,
) -> Reranker:
    """
    Create a rerank provider based on the specified type.

    Args:
        provider: "api" for a remote /rerank endpoint or "local" for a cross-encoder.
        api_key: API key (required if provider is "api").
        model: Model name (optional, uses defaults).
        base_url: Endpoint override for the api provider.
        timeout: Request timeout in seconds for the api provider.

    Returns:
        Configured Reranker instance.

    Raises:
        ValueError: If provider is not supported or not properly configured.
    """
    logger.info(f"Creating rerank provider: {provider}")

    if provider == "api":
        if not api_key:
            raise ValueError("RERANK_API_KEY is required when using the api rerank provider")
        return ApiReranker(
            api_key=api_key,
            model=model or "rerank",
            base_url=base_url,
            timeout=timeout,
        )

    elif provider == "local":
        return LocalReranker(model=model or "cross-encoder/ms-marco-MiniLM-L-6-v2")

    else:
        raise ValueError(f"Unsupported rerank provider: {provider}")
