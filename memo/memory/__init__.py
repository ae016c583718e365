"""
Vector Memory Storage.

Memories are short texts stored with their embedding vectors so they
can be found by meaning rather than by keyword. The high-level API lives
in memo.memory.memory_manager.
"""

from .base import Memory, QueryResult, TimeRange, VectorStore
from .embeddings import EmbeddingService, create_embedding_service
from .chroma_store import ChromaVectorStore

__all__ = [
    "Memory",
    "QueryResult",
    "TimeRange",
    "VectorStore",
    "EmbeddingService",
    "create_embedding_service",
    "ChromaVectorStore",
]
