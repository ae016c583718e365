"""
Shared pytest fixtures for memo tests.

This module provides:
- Scripted vector stores with known neighbor graphs
- Fake embedding and rerank collaborators
- Mocked external SDK clients (OpenAI)
- Config fixtures
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from memo.search.models import SearchConfig
from tests.fixtures import (
    FakeEmbeddingService,
    FakeReranker,
    ScriptedVectorStore,
    make_memory,
)


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def search_config() -> SearchConfig:
    """Default search budgets."""
    return SearchConfig()


@pytest.fixture
def three_hop_store() -> ScriptedVectorStore:
    """
    A small neighbor graph:

        query -> a, b
        a -> c (0.75), d (0.72)
        b -> c (0.80), e (0.90)
        c -> f (0.85)
    """
    memories = [
        make_memory("a", tags=["rust"]),
        make_memory("b", tags=["rust", "cli"]),
        make_memory("c", tags=["rust"]),
        make_memory("d", tags=["rust"]),
        make_memory("e", tags=["cli"]),
        make_memory("f", tags=["rust"]),
    ]
    neighbors = {
        "query": [("a", 0.70), ("b", 0.65)],
        "a": [("a", 1.0), ("c", 0.75), ("d", 0.72)],
        "b": [("b", 1.0), ("c", 0.80), ("e", 0.90)],
        "c": [("c", 1.0), ("f", 0.85)],
    }
    return ScriptedVectorStore(memories, neighbors)


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def fake_reranker() -> FakeReranker:
    return FakeReranker()


# =============================================================================
# Mock External Services
# =============================================================================


@pytest.fixture
def mock_openai():
    """Mock AsyncOpenAI for embedding tests."""
    # Imported lazily inside the service, so patch it on the openai module
    with patch("openai.AsyncOpenAI") as mock_client_class:
        mock_client = MagicMock()

        def _make_response(**kwargs):
            inputs = kwargs["input"]
            if isinstance(inputs, str):
                inputs = [inputs]
            # Return out of order to exercise index sorting
            data = [
                MagicMock(index=i, embedding=[float(i), 0.5])
                for i in reversed(range(len(inputs)))
            ]
            return MagicMock(data=data)

        mock_client.embeddings.create = AsyncMock(side_effect=_make_response)
        mock_client_class.return_value = mock_client
        yield mock_client_class


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set mock environment variables for testing."""
    monkeypatch.setenv("EMBEDDING_API_KEY", "test-embedding-key")
    monkeypatch.setenv("RERANK_API_KEY", "test-rerank-key")
