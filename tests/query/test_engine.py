"""Tests for QueryEngine retrieval and answer assembly."""

import numpy as np
import pytest

from docsrag.core.errors import BackendError, ErrorCode
from docsrag.index.models import Chunk, CollectionIndex, ScoredChunk, normalize_rows
from docsrag.query.engine import QueryEngine, format_context


def _index(embedder, texts: list[str]) -> CollectionIndex:
    chunks = [Chunk.from_text(t, {"name": f"doc{i}.md"}) for i, t in enumerate(texts)]
    return CollectionIndex(
        collection_id="kb",
        description="",
        model_name=embedder.model_name,
        matrix=normalize_rows(embedder.embed(texts)),
        chunks=chunks,
    )


class TestFormatContext:
    def test_blocks_headed_by_source(self) -> None:
        hits = [
            ScoredChunk(Chunk.from_text("one", {"relative_path": "r/a.md"}), 0.9),
            ScoredChunk(Chunk.from_text("two", {}), 0.5),
        ]

        assert format_context(hits) == "r/a.md\none\n\ntwo"

    def test_no_hits(self) -> None:
        assert format_context([]) == ""


class TestAnswer:
    def test_retrieves_top_k_and_passes_context(self, fake_embedder, fake_generator) -> None:
        """Only the most similar chunks reach the generator."""
        index = _index(
            fake_embedder,
            ["the launch date is friday", "bananas are yellow", "launch checklist and date"],
        )
        engine = QueryEngine(fake_embedder, fake_generator, similarity_top_k=2)

        answer = engine.answer(index, "what is the launch date")

        [(prompt, context)] = fake_generator.calls
        assert prompt == "what is the launch date"
        assert "bananas" not in context
        assert "the launch date is friday" in context
        assert answer == f"ANSWER to {prompt!r}\n{context}"

    def test_generator_output_returned_verbatim(self, fake_embedder) -> None:
        class Fixed:
            model_name = "fixed"

            def generate(self, prompt: str, context: str) -> str:
                return "  exactly this \n"

        index = _index(fake_embedder, ["x"])

        assert QueryEngine(fake_embedder, Fixed()).answer(index, "q") == "  exactly this \n"

    def test_generator_exception_wrapped(self, fake_embedder) -> None:
        class Broken:
            model_name = "broken"

            def generate(self, prompt: str, context: str) -> str:
                raise TimeoutError("slow")

        with pytest.raises(BackendError) as exc_info:
            QueryEngine(fake_embedder, Broken()).answer(_index(fake_embedder, ["x"]), "q")
        assert exc_info.value.code == ErrorCode.BACKEND_GENERATION_FAILED

    def test_embedding_exception_wrapped(self, fake_embedder, fake_generator) -> None:
        index = _index(fake_embedder, ["x"])

        def broken(text: str) -> np.ndarray:
            raise ConnectionError("down")

        fake_embedder.embed_query = broken

        with pytest.raises(BackendError) as exc_info:
            QueryEngine(fake_embedder, fake_generator).answer(index, "q")
        assert exc_info.value.code == ErrorCode.BACKEND_EMBEDDING_FAILED
        assert fake_generator.calls == []
