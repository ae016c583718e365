"""
Embedding Service for generating vector representations.

Uses OpenAI-compatible embedding endpoints by default, with support for
local models via sentence-transformers.
"""

import logging
from abc import ABC, abstractmethod
from typing import Literal, Optional

from ..errors import CollaboratorError

logger = logging.getLogger("memo.memory.embeddings")


class EmbeddingService(ABC):
    """Abstract interface for embedding generation."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of embeddings produced."""
        pass

    @abstractmethod
    async def encode(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        pass


class OpenAIEmbeddingService(EmbeddingService):
    """
    Embedding service for OpenAI and OpenAI-compatible APIs.

    Any provider exposing the /embeddings route (Zhipu, Ollama, vLLM...)
    works by pointing base_url at it.

    Models:
    - text-embedding-3-small: default 1536 dimensions
    - text-embedding-3-large: default 3072 dimensions (can be reduced)
    """

    MODEL_DEFAULT_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "embedding-3": 2048,
    }

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: Optional[str] = None,
        dimensions: int | None = None,
    ):
        """
        Initialize the embedding service.

        Args:
            api_key: API key for the endpoint
            model: Model name
            base_url: Override the API base URL for compatible providers
            dimensions: Request reduced output dimensions. If None, uses
                        the model's default dimensions.
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self._client = None

        default_dim = self.MODEL_DEFAULT_DIMENSIONS.get(model, 1536)
        if dimensions is not None:
            if model in self.MODEL_DEFAULT_DIMENSIONS and dimensions > default_dim:
                logger.warning(
                    f"Requested dimensions ({dimensions}) exceeds model default ({default_dim}). "
                    f"Using {default_dim}."
                )
                self._dimension = default_dim
                self._requested_dimensions = None
            else:
                self._dimension = dimensions
                self._requested_dimensions = dimensions
        else:
            self._dimension = default_dim
            self._requested_dimensions = None

        logger.info(
            f"OpenAIEmbeddingService initialized: model={model}, dimensions={self._dimension}"
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI
            if self.base_url:
                self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
            else:
                self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def _request_kwargs(self, payload) -> dict:
        kwargs = {
            "model": self.model,
            "input": payload,
        }
        if self._requested_dimensions is not None:
            kwargs["dimensions"] = self._requested_dimensions
        return kwargs

    async def encode(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        client = self._get_client()
        try:
            response = await client.embeddings.create(**self._request_kwargs(text))
        except Exception as e:
            raise CollaboratorError(f"Embedding request failed: {e}") from e
        return response.data[0].embedding


class LocalEmbeddingService(EmbeddingService):
    """
    Local embedding service using sentence-transformers.

    Uses all-MiniLM-L6-v2 by default (384 dimensions, fast, good quality).
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = 384  # Default for MiniLM
        logger.info(f"LocalEmbeddingService initialized with model: {model_name}")

    @property
    def dimension(self) -> int:
        return self._dimension

    def _get_model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                raise RuntimeError(
                    "sentence-transformers not installed. "
                    "Install with: pip install 'memo-search[local]'"
                )
            self._model = SentenceTransformer(self.model_name)
            self._dimension = self._model.get_sentence_embedding_dimension()
            logger.info(f"Loaded local embedding model: {self.model_name}")
        return self._model

    async def encode(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        try:
            model = self._get_model()
            # Normalized so cosine distance maps cleanly onto [0, 1] similarity
            embedding = model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        except Exception as e:
            raise CollaboratorError(f"Local embedding failed: {e}") from e
        return embedding.tolist()


def create_embedding_service(
    provider: Literal["openai", "local"] = "openai",
    api_key: str = "",
    model: str = "",
    base_url: Optional[str] = None,
    dimensions: int | None = None,
) -> EmbeddingService:
    """
    Factory function to create the appropriate embedding service.

    Args:
        provider: "openai" (any OpenAI-compatible endpoint) or "local"
        api_key: API key (required for openai provider)
        model: Model name (optional, uses defaults)
        base_url: Endpoint override for OpenAI-compatible providers
        dimensions: Override output dimensions for OpenAI embeddings.

    Returns:
        Configured EmbeddingService instance
    """
    if provider == "openai":
        if not api_key:
            raise ValueError("EMBEDDING_API_KEY required for openai embedding provider")
        return OpenAIEmbeddingService(
            api_key=api_key,
            model=model or "text-embedding-3-small",
            base_url=base_url,
            dimensions=dimensions,
        )
    elif provider == "local":
        return LocalEmbeddingService(
            model_name=model or "all-MiniLM-L6-v2",
        )
    else:
        raise ValueError(f"Unknown embedding provider: {provider}")
