"""Collection indexing: loading, chunking, persisted vectors, in-process cache."""

from docsrag.index.cache import IndexCache
from docsrag.index.chunking import TextSplitter
from docsrag.index.loader import ContentLoader, LoadResult, placeholder_document
from docsrag.index.models import Chunk, CollectionIndex, LogicalDocument, ScoredChunk
from docsrag.index.store import IndexStore

__all__ = [
    "Chunk",
    "CollectionIndex",
    "ContentLoader",
    "IndexCache",
    "IndexStore",
    "LoadResult",
    "LogicalDocument",
    "ScoredChunk",
    "TextSplitter",
    "placeholder_document",
]
