"""Protocol-facing retrieval operations."""

from docsrag.retrieval.ops import RetrievalFacade, not_found_message

__all__ = ["RetrievalFacade", "not_found_message"]
