"""Application context for MCP handlers.

Single object passed to all tool, resource and prompt handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docsrag.config.models import DocsRagConfig
    from docsrag.retrieval.ops import RetrievalFacade


@dataclass
class AppContext:
    """Context object passed to all MCP handlers."""

    docs_path: Path
    facade: RetrievalFacade

    @classmethod
    def create(cls, config: DocsRagConfig, facade: RetrievalFacade | None = None) -> AppContext:
        """Factory to create context with the facade wired from config.

        Args:
            config: Loaded configuration
            facade: Optional existing facade (reused if provided)
        """
        from docsrag.retrieval.ops import RetrievalFacade as RF

        if facade is None:
            facade = RF.from_config(config)
        return cls(docs_path=facade.catalog.docs_path, facade=facade)
