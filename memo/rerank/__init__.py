"""
Rerank Provider Interface Module.

Provides a unified interface over remote and local rerank models.
"""

from .base import Reranker, RerankItem
from .api_client import ApiReranker
from .local_client import LocalReranker
from .factory import create_reranker

__all__ = [
    "Reranker",
    "RerankItem",
    "ApiReranker",
    "LocalReranker",
    "create_reranker",
]
