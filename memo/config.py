"""
Configuration module for memo.

Loads application settings from config.yaml and secrets from environment variables.

Config file resolution order:
1. $MEMO_CONFIG
2. ./.memo/config.yaml (local, per-project)
3. ~/.memo/config.yaml (global)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .search.models import SearchConfig

# Load environment variables from .env file
load_dotenv()

LOCAL_MEMO_DIR = Path(".memo")
GLOBAL_MEMO_DIR = Path.home() / ".memo"


def _resolve_config_file() -> Path:
    """Pick the config file: explicit override, then local, then global."""
    override = os.getenv("MEMO_CONFIG")
    if override:
        return Path(override).expanduser()

    local = LOCAL_MEMO_DIR / "config.yaml"
    # The home directory's .memo is the global scope, never a local one
    if local.exists() and LOCAL_MEMO_DIR.resolve() != GLOBAL_MEMO_DIR.resolve():
        return local
    return GLOBAL_MEMO_DIR / "config.yaml"


CONFIG_FILE = _resolve_config_file()


def _load_yaml_config() -> dict:
    """Load configuration from YAML file."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            return yaml.safe_load(f) or {}
    return {}


# Load YAML config once at module import
_yaml_config = _load_yaml_config()


def _get_yaml(section: str, key: str, default=None):
    """Get a value from the YAML config."""
    return (_yaml_config.get(section) or {}).get(key, default)


def _default_brain_path() -> str:
    """Local scope keeps its database next to its config."""
    if CONFIG_FILE.parent.resolve() == LOCAL_MEMO_DIR.resolve():
        return str(LOCAL_MEMO_DIR / "brain")
    return str(GLOBAL_MEMO_DIR / "brain")


@dataclass
class StorageConfig:
    """Vector store configuration."""
    store_type: Literal["chroma", "pgvector"] = field(
        default_factory=lambda: _get_yaml("storage", "store_type", "chroma")
    )
    chroma_path: str = field(
        default_factory=lambda: _get_yaml("storage", "chroma_path", None) or _default_brain_path()
    )
    # Secret from .env (contains credentials)
    postgres_url: str = field(default_factory=lambda: os.getenv("POSTGRES_URL", ""))


@dataclass
class EmbeddingConfig:
    """Embedding provider configuration."""
    provider: Literal["openai", "local"] = field(
        default_factory=lambda: _get_yaml("embedding", "provider", "openai")
    )
    model: str = field(
        default_factory=lambda: _get_yaml("embedding", "model", "text-embedding-3-small")
    )
    # OpenAI-compatible endpoint override (Zhipu, Ollama, ...)
    base_url: Optional[str] = field(
        default_factory=lambda: _get_yaml("embedding", "base_url", None)
    )
    # None = use model's default dimensions
    dimensions: int | None = field(
        default_factory=lambda: _get_yaml("embedding", "dimensions", None)
    )
    # Secret from .env
    api_key: str = field(default_factory=lambda: os.getenv("EMBEDDING_API_KEY", ""))


@dataclass
class RerankConfig:
    """Rerank provider configuration."""
    provider: Literal["api", "local"] = field(
        default_factory=lambda: _get_yaml("rerank", "provider", "api")
    )
    model: str = field(
        default_factory=lambda: _get_yaml("rerank", "model", "rerank")
    )
    base_url: Optional[str] = field(
        default_factory=lambda: _get_yaml("rerank", "base_url", None)
    )
    timeout: float = field(
        default_factory=lambda: _get_yaml("rerank", "timeout", 60.0)
    )
    # Secret from .env
    api_key: str = field(default_factory=lambda: os.getenv("RERANK_API_KEY", ""))


@dataclass
class SearchSettings:
    """Search defaults from YAML."""
    limit: int = field(
        default_factory=lambda: _get_yaml("search", "limit", 10)
    )
    first_threshold: float = field(
        default_factory=lambda: _get_yaml("search", "first_threshold", 0.60)
    )
    max_depth: int = field(
        default_factory=lambda: _get_yaml("search", "max_depth", 5)
    )
    max_nodes: int = field(
        default_factory=lambda: _get_yaml("search", "max_nodes", 100)
    )
    branch_limit: int = field(
        default_factory=lambda: _get_yaml("search", "branch_limit", 5)
    )
    require_tag_overlap: bool = field(
        default_factory=lambda: _get_yaml("search", "require_tag_overlap", True)
    )
    # Similarity at which a new memory is considered a duplicate on embed
    duplicate_threshold: float = field(
        default_factory=lambda: _get_yaml("search", "duplicate_threshold", 0.85)
    )


@dataclass
class AppConfig:
    """Application settings from YAML."""
    log_level: str = field(
        default_factory=lambda: _get_yaml("logging", "level", "WARNING")
    )


@dataclass
class Config:
    """Main configuration container."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    rerank: RerankConfig = field(default_factory=RerankConfig)
    search: SearchSettings = field(default_factory=SearchSettings)
    app: AppConfig = field(default_factory=AppConfig)

    def search_config(self, first_threshold: Optional[float] = None) -> SearchConfig:
        """Build a SearchConfig from the search section, optionally overriding the threshold."""
        return SearchConfig(
            first_threshold=(
                first_threshold if first_threshold is not None else self.search.first_threshold
            ),
            max_depth=self.search.max_depth,
            max_nodes=self.search.max_nodes,
            branch_limit=self.search.branch_limit,
            require_tag_overlap=self.search.require_tag_overlap,
        )

    def setup_logging(self, level: Optional[str] = None) -> logging.Logger:
        """Configure and return the application logger."""
        # Reset existing handlers to ensure clean configuration
        root = logging.getLogger()
        if root.handlers:
            for handler in list(root.handlers):
                root.removeHandler(handler)

        logging.basicConfig(
            level=getattr(logging, (level or self.app.log_level).upper()),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)

        return logging.getLogger("memo")

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of missing/invalid settings.

        Returns:
            List of validation error messages, empty if all valid.
        """
        errors = []

        if self.embedding.provider == "openai" and not self.embedding.api_key:
            errors.append("EMBEDDING_API_KEY is required when using the openai embedding provider")
        elif self.embedding.provider not in ("openai", "local"):
            errors.append(f"Unknown embedding provider: {self.embedding.provider}")

        if self.rerank.provider == "api" and not self.rerank.api_key:
            errors.append("RERANK_API_KEY is required when using the api rerank provider")
        elif self.rerank.provider not in ("api", "local"):
            errors.append(f"Unknown rerank provider: {self.rerank.provider}")

        if self.storage.store_type == "pgvector" and not self.storage.postgres_url:
            errors.append("POSTGRES_URL is required when using the pgvector store")
        elif self.storage.store_type not in ("chroma", "pgvector"):
            errors.append(f"Unknown store type: {self.storage.store_type}")

        if not 0.0 <= self.search.duplicate_threshold <= 1.0:
            errors.append("search.duplicate_threshold must be between 0.0 and 1.0")

        try:
            self.search_config().validate()
        except ConfigError as e:
            errors.append(str(e))

        return errors


# Global configuration instance
config = Config()
