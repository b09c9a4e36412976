"""Query answering."""

from docsrag.query.engine import QueryEngine, format_context

__all__ = ["QueryEngine", "format_context"]
