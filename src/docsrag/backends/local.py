"""Local embeddings via fastembed (ONNX Runtime, no network after model download).

Model: BAAI/bge-small-en-v1.5 (384-dim, 512-token context) unless overridden.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Sequence
from typing import Any

import numpy as np
import structlog

from docsrag.core.errors import BackendError

log = structlog.get_logger(__name__)

DEFAULT_MODEL_NAME = "BAAI/bge-small-en-v1.5"


def _detect_providers() -> list[str]:
    """Detect available ONNX Runtime execution providers."""
    try:
        import onnxruntime as ort  # type: ignore[import-not-found]

        available = set(ort.get_available_providers())
    except Exception:
        return []

    providers: list[str] = []
    if "CUDAExecutionProvider" in available:
        providers.append("CUDAExecutionProvider")
    providers.append("CPUExecutionProvider")
    return providers


class FastEmbedEmbedder:
    """Embedder backed by fastembed.TextEmbedding. Model loaded on first use."""

    def __init__(
        self,
        model_name: str | None = None,
        *,
        batch_size: int = 64,
        threads: int | None = None,
    ) -> None:
        self.model_name = model_name or DEFAULT_MODEL_NAME
        self._batch_size = batch_size
        self._threads = threads
        self._model: Any | None = None
        self._lock = threading.Lock()

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        model = self._ensure_model()
        try:
            vectors = list(model.embed(list(texts), batch_size=self._batch_size))
        except Exception as e:
            raise BackendError.embedding_failed(self.model_name, str(e)) from e
        return np.array(vectors, dtype=np.float32)

    def embed_query(self, text: str) -> np.ndarray:
        model = self._ensure_model()
        try:
            vectors = list(model.query_embed(text))
        except Exception as e:
            raise BackendError.embedding_failed(self.model_name, str(e)) from e
        return np.asarray(vectors[0], dtype=np.float32)

    def _ensure_model(self) -> Any:
        """Lazy-load fastembed TextEmbedding model with GPU auto-detect."""
        with self._lock:
            if self._model is not None:
                return self._model

            try:
                from fastembed import TextEmbedding
            except ImportError as e:
                raise BackendError.unavailable("fastembed", "pip install fastembed") from e

            providers = _detect_providers()
            threads = self._threads or max(1, (os.cpu_count() or 4) // 2)
            kwargs: dict[str, Any] = {"model_name": self.model_name, "threads": threads}
            if providers:
                kwargs["providers"] = providers

            start = time.monotonic()
            try:
                self._model = TextEmbedding(**kwargs)
            except Exception as e:
                raise BackendError.unavailable("fastembed", str(e)) from e

            log.info(
                "embedding.model_loaded",
                model=self.model_name,
                providers=providers or ["CPUExecutionProvider"],
                threads=threads,
                elapsed_s=round(time.monotonic() - start, 2),
            )
            return self._model
