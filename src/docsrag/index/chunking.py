"""Split documents into overlapping chunks for embedding.

Splitting is delegated to langchain's RecursiveCharacterTextSplitter: windows
of at most ``chunk_size`` characters that prefer paragraph, then line, then
word boundaries, with ``chunk_overlap`` characters shared between neighbours.
"""

from __future__ import annotations

from collections.abc import Iterable

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docsrag.index.models import Chunk, LogicalDocument

_SEPARATORS = ["\n\n", "\n", " ", ""]


class TextSplitter:
    """Produces Chunks (text, metadata, content hash) from LogicalDocuments."""

    def __init__(self, chunk_size: int = 2000, chunk_overlap: int = 200) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        if not (0 <= chunk_overlap < chunk_size):
            raise ValueError(f"chunk_overlap must be in [0, {chunk_size}), got {chunk_overlap}")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=_SEPARATORS,
            strip_whitespace=True,
        )

    def split_text(self, text: str) -> list[str]:
        if not text.strip():
            return []
        return [piece for piece in self._splitter.split_text(text) if piece]

    def split_document(self, document: LogicalDocument) -> list[Chunk]:
        return [Chunk.from_text(piece, document.metadata) for piece in self.split_text(document.text)]

    def split_documents(self, documents: Iterable[LogicalDocument]) -> list[Chunk]:
        chunks: list[Chunk] = []
        for document in documents:
            chunks.extend(self.split_document(document))
        return chunks
