"""
memo - Vector Memory with Multi-Layer Semantic Search

Stores short text memories as embedding vectors and retrieves related
ones by growing a bounded neighborhood graph from the query, then
reranking the candidates against the literal query text.
"""

__version__ = "1.0.0"
