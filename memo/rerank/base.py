"""
Abstract base class for rerank providers.

A reranker scores documents against the literal query text and returns
them in relevance order, overriding pure vector-similarity order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class RerankItem:
    """One reranked document: its position in the submitted list and its score."""
    index: int
    score: float


class Reranker(ABC):
    """
    Abstract base class for rerank providers.

    Implement this interface to add support for new rerank services.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the rerank provider."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model being used."""
        pass

    @abstractmethod
    async def rerank(
        self,
        query: str,
        documents: list[str],
        top_n: Optional[int] = None,
    ) -> list[RerankItem]:
        """
        Rerank documents against a query.

        Args:
            query: The original query text.
            documents: Candidate document texts.
            top_n: Maximum number of results to return (all when None).

        Returns:
            RerankItems in descending relevance order.

        Raises:
            RerankError: If the provider call fails.
        """
        pass

    async def close(self) -> None:
        """Release any underlying resources."""
        pass
