"""Durable per-collection vector storage.

Storage: <docs_path>/.indices/<collection_id>/
  - embeddings.npz   (float16 matrix + chunk content hashes)
  - metadata.json    (format version, model name, dim, chunk texts + metadata)

Vectors are keyed by chunk content hash, so rebuilding a collection after a
restart (or after its files change) only embeds chunks that were not
persisted before. State written by a different embedding model or format
version is discarded, not migrated.
"""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import structlog

from docsrag.backends.base import Embedder
from docsrag.config.constants import (
    EMBEDDINGS_FILENAME,
    INDEX_FORMAT_VERSION,
    METADATA_FILENAME,
    RESERVED_PREFIX,
)
from docsrag.core.errors import BackendError, InvalidArgumentError
from docsrag.index.models import Chunk, CollectionIndex, normalize_rows

log = structlog.get_logger(__name__)


class IndexStore:
    """Reads and writes PersistedIndexState under an indices directory."""

    def __init__(self, indices_path: Path) -> None:
        self._indices_path = indices_path

    def path_for(self, collection_id: str) -> Path:
        """Storage directory for a collection. Pure function of the id."""
        if (
            not collection_id
            or collection_id.startswith(RESERVED_PREFIX)
            or "/" in collection_id
            or "\\" in collection_id
        ):
            raise InvalidArgumentError.invalid(
                "collection_id", collection_id, "must be a plain directory name"
            )
        return self._indices_path / collection_id

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(
        self,
        collection_id: str,
        description: str,
        chunks: Sequence[Chunk],
        embedder: Embedder,
    ) -> CollectionIndex:
        """Build the index for chunks, reusing persisted vectors by content hash.

        Persists the result before returning. Chunks that are no longer
        present are dropped from the persisted state.
        """
        previous = self._load_vectors(collection_id, embedder.model_name)

        pending: dict[str, str] = {}
        for chunk in chunks:
            if chunk.content_hash not in previous and chunk.content_hash not in pending:
                pending[chunk.content_hash] = chunk.text

        fresh: dict[str, np.ndarray] = {}
        if pending:
            hashes = list(pending)
            vectors = embedder.embed([pending[h] for h in hashes])
            if vectors.ndim != 2 or vectors.shape[0] != len(hashes):
                raise BackendError.embedding_failed(
                    embedder.model_name,
                    f"expected {len(hashes)} vectors, got shape {tuple(vectors.shape)}",
                )
            fresh = {h: vectors[i] for i, h in enumerate(hashes)}

        dim = self._common_dim(previous, fresh)
        if dim is None:
            matrix = np.zeros((0, 0), dtype=np.float32)
        else:
            rows = [fresh.get(c.content_hash, previous.get(c.content_hash)) for c in chunks]
            matrix = normalize_rows(np.vstack(rows)) if rows else np.zeros((0, dim), np.float32)

        index = CollectionIndex(
            collection_id=collection_id,
            description=description,
            model_name=embedder.model_name,
            matrix=matrix,
            chunks=list(chunks),
        )
        self.save(index)

        log.info(
            "index_store.built",
            collection=collection_id,
            chunks=len(chunks),
            embedded=len(fresh),
            reused=len(chunks) - sum(1 for c in chunks if c.content_hash in fresh),
        )
        return index

    @staticmethod
    def _common_dim(previous: dict[str, np.ndarray], fresh: dict[str, np.ndarray]) -> int | None:
        dims = {int(v.shape[-1]) for v in (*previous.values(), *fresh.values())}
        if not dims:
            return None
        if len(dims) > 1:
            raise BackendError.embedding_failed("unknown", f"inconsistent vector dims {dims}")
        return dims.pop()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, index: CollectionIndex) -> None:
        """Persist as compressed numpy arrays + JSON metadata (atomic replace)."""
        path = self.path_for(index.collection_id)
        path.mkdir(parents=True, exist_ok=True)

        npz_tmp = path / f"{EMBEDDINGS_FILENAME}.tmp.npz"
        meta_tmp = path / f"{METADATA_FILENAME}.tmp"

        np.savez_compressed(
            npz_tmp,
            matrix=index.matrix.astype(np.float16),
            hashes=np.array([c.content_hash for c in index.chunks], dtype="U"),
        )
        meta: dict[str, Any] = {
            "version": INDEX_FORMAT_VERSION,
            "collection_id": index.collection_id,
            "description": index.description,
            "model": index.model_name,
            "dim": index.dim,
            "chunk_count": index.size,
            "chunks": [c.to_dict() for c in index.chunks],
        }
        with meta_tmp.open("w", encoding="utf-8") as f:
            json.dump(meta, f)

        os.replace(npz_tmp, path / EMBEDDINGS_FILENAME)
        os.replace(meta_tmp, path / METADATA_FILENAME)

    def clear(self, collection_id: str) -> bool:
        """Remove persisted state. Returns True if anything was removed."""
        path = self.path_for(collection_id)
        if not path.exists():
            return False
        shutil.rmtree(path)
        log.info("index_store.cleared", collection=collection_id)
        return True

    def _load_vectors(self, collection_id: str, model_name: str) -> dict[str, np.ndarray]:
        state = self._read_state(collection_id, model_name)
        if state is None:
            return {}
        _meta, matrix, hashes = state
        return {h: matrix[i].astype(np.float32) for i, h in enumerate(hashes)}

    def _read_state(
        self, collection_id: str, model_name: str
    ) -> tuple[dict[str, Any], np.ndarray, list[str]] | None:
        path = self.path_for(collection_id)
        npz_path = path / EMBEDDINGS_FILENAME
        meta_path = path / METADATA_FILENAME
        if not npz_path.exists() or not meta_path.exists():
            return None

        try:
            with meta_path.open(encoding="utf-8") as f:
                meta = json.load(f)

            if meta.get("version") != INDEX_FORMAT_VERSION:
                log.warning(
                    "index_store.version_mismatch",
                    collection=collection_id,
                    expected=INDEX_FORMAT_VERSION,
                    got=meta.get("version"),
                )
                return None
            if meta.get("model") != model_name:
                log.warning(
                    "index_store.model_mismatch",
                    collection=collection_id,
                    expected=model_name,
                    got=meta.get("model"),
                )
                return None

            with np.load(npz_path, allow_pickle=False) as data:
                matrix = np.asarray(data["matrix"])
                hashes = [str(h) for h in data["hashes"]]
        except Exception:
            log.warning("index_store.load_failed", collection=collection_id, exc_info=True)
            return None

        rows = matrix.shape[0] if matrix.ndim == 2 else -1
        if rows != len(hashes) or len(hashes) != len(meta.get("chunks", [])):
            log.warning("index_store.corrupt", collection=collection_id)
            return None

        return meta, matrix.astype(np.float32), hashes
