"""Retrieval-augmented answer generation over a built CollectionIndex."""

from __future__ import annotations

import time

import structlog

from docsrag.backends.base import Embedder, Generator
from docsrag.core.errors import BackendError
from docsrag.index.models import CollectionIndex, ScoredChunk

log = structlog.get_logger(__name__)


def format_context(hits: list[ScoredChunk]) -> str:
    """Join retrieved chunks into one context block, each headed by its source."""
    blocks = []
    for hit in hits:
        source = hit.chunk.source
        blocks.append(f"{source}\n{hit.chunk.text}" if source else hit.chunk.text)
    return "\n\n".join(blocks)


class QueryEngine:
    """Embeds the query, retrieves top-k chunks, asks the generator.

    Backends are held explicitly. No timeout or retry: a failing backend
    call surfaces as BackendError.
    """

    def __init__(self, embedder: Embedder, generator: Generator, similarity_top_k: int = 2) -> None:
        self._embedder = embedder
        self._generator = generator
        self._top_k = similarity_top_k

    def retrieve(self, index: CollectionIndex, query_text: str) -> list[ScoredChunk]:
        try:
            vector = self._embedder.embed_query(query_text)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError.embedding_failed(self._embedder.model_name, str(e)) from e
        return index.search(vector, self._top_k)

    def answer(self, index: CollectionIndex, query_text: str) -> str:
        """Generated text, returned verbatim."""
        start = time.monotonic()
        hits = self.retrieve(index, query_text)
        context = format_context(hits)

        try:
            text = self._generator.generate(query_text, context)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError.generation_failed(self._generator.model_name, str(e)) from e

        log.info(
            "query.answered",
            collection=index.collection_id,
            hits=len(hits),
            top_score=round(hits[0].score, 4) if hits else None,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        return text
