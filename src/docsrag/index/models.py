"""Index data models: documents, chunks, and the in-memory vector index."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True, slots=True)
class LogicalDocument:
    """One loaded source file (or the placeholder for an empty collection).

    metadata keys: name, source_path, relative_path (optional).
    """

    text: str
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def source(self) -> str:
        return self.metadata.get("relative_path") or self.metadata.get("name", "")


@dataclass(frozen=True, slots=True)
class Chunk:
    """A slice of a LogicalDocument. content_hash keys embedding reuse."""

    text: str
    metadata: dict[str, str]
    content_hash: str

    @classmethod
    def from_text(cls, text: str, metadata: dict[str, str]) -> Chunk:
        return cls(text=text, metadata=dict(metadata), content_hash=content_hash(text))

    @property
    def source(self) -> str:
        return self.metadata.get("relative_path") or self.metadata.get("name", "")

    def to_dict(self) -> dict[str, Any]:
        return {"hash": self.content_hash, "text": self.text, "metadata": self.metadata}


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalise each row so dot product == cosine similarity."""
    matrix = np.asarray(matrix, dtype=np.float32)
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms = np.maximum(norms, 1e-10)
    return matrix / norms


@dataclass
class ScoredChunk:
    chunk: Chunk
    score: float


@dataclass
class CollectionIndex:
    """Vector index for one collection.

    ``matrix`` rows are L2-normalised and parallel to ``chunks``.
    """

    collection_id: str
    description: str
    model_name: str
    matrix: np.ndarray
    chunks: list[Chunk]

    def __post_init__(self) -> None:
        if self.matrix.shape[0] != len(self.chunks):
            raise ValueError(
                f"matrix has {self.matrix.shape[0]} rows but there are {len(self.chunks)} chunks"
            )

    @property
    def size(self) -> int:
        return len(self.chunks)

    @property
    def dim(self) -> int:
        return int(self.matrix.shape[1]) if self.matrix.ndim == 2 else 0

    def search(self, query_vector: np.ndarray, top_k: int) -> list[ScoredChunk]:
        """Cosine top-k. Ties broken by chunk order for stable results."""
        if not self.chunks or top_k < 1:
            return []

        query = normalize_rows(query_vector)[0]
        scores = self.matrix @ query
        order = sorted(range(len(scores)), key=lambda i: (-float(scores[i]), i))
        return [ScoredChunk(self.chunks[i], float(scores[i])) for i in order[:top_k]]
