"""Config module exports."""

from docsrag.config.loader import (
    DocsRagSettings,
    ensure_storage,
    load_config,
    resolve_api_key,
)
from docsrag.config.models import (
    DocsRagConfig,
    EmbeddingConfig,
    LLMConfig,
    LoggingConfig,
    RetrievalConfig,
    StorageConfig,
)

__all__ = [
    "load_config",
    "ensure_storage",
    "resolve_api_key",
    "DocsRagConfig",
    "DocsRagSettings",
    "EmbeddingConfig",
    "LLMConfig",
    "LoggingConfig",
    "RetrievalConfig",
    "StorageConfig",
]
