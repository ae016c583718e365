"""
Error types shared across the memo package.

Branch-level collaborator failures are absorbed inside the expansion
search; everything else reaches the caller tagged with the stage that
failed.
"""


class MemoError(Exception):
    """Base class for all memo errors."""


class ConfigError(MemoError):
    """Invalid configuration or search parameters (e.g. malformed time bounds)."""


class CollaboratorError(MemoError):
    """A vector store or embedding backend call failed."""


class RerankError(MemoError):
    """The reranker failed or was unavailable. Always fatal for a search."""


class SearchError(MemoError):
    """A search failed at a specific stage (embedding, expansion, rerank)."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Search failed during {stage}: {message}")
        self.stage = stage
