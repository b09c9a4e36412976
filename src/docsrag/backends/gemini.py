"""Gemini embedding and generation via google-generativeai."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any

import numpy as np
import structlog

from docsrag.backends.base import format_qa_prompt
from docsrag.core.errors import BackendError

log = structlog.get_logger(__name__)

DEFAULT_EMBEDDING_MODEL = "models/text-embedding-004"
DEFAULT_GENERATION_MODEL = "gemini-2.0-flash"

_configure_lock = threading.Lock()
_configured_key: str | None = None


def _genai(api_key: str | None) -> Any:
    """Import and configure google.generativeai once per API key."""
    global _configured_key

    if not api_key:
        raise BackendError.unavailable("gemini", "set GEMINI_API_KEY or DOCS_RAG__LLM__API_KEY")
    try:
        import google.generativeai as genai
    except ImportError as e:
        raise BackendError.unavailable("gemini", "pip install google-generativeai") from e

    with _configure_lock:
        if _configured_key != api_key:
            genai.configure(api_key=api_key)
            _configured_key = api_key
    return genai


class GeminiEmbedder:
    """Remote embeddings. Documents and queries use distinct task types."""

    def __init__(
        self,
        model_name: str | None = None,
        *,
        api_key: str | None = None,
        batch_size: int = 64,
    ) -> None:
        self.model_name = model_name or DEFAULT_EMBEDDING_MODEL
        self._api_key = api_key
        self._batch_size = batch_size

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        genai = _genai(self._api_key)
        vectors: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = list(texts[i : i + self._batch_size])
            try:
                result = genai.embed_content(
                    model=self.model_name,
                    content=batch,
                    task_type="retrieval_document",
                )
            except Exception as e:
                raise BackendError.embedding_failed(self.model_name, str(e)) from e
            vectors.extend(result["embedding"])
        return np.array(vectors, dtype=np.float32)

    def embed_query(self, text: str) -> np.ndarray:
        genai = _genai(self._api_key)
        try:
            result = genai.embed_content(
                model=self.model_name,
                content=text,
                task_type="retrieval_query",
            )
        except Exception as e:
            raise BackendError.embedding_failed(self.model_name, str(e)) from e
        return np.asarray(result["embedding"], dtype=np.float32)


class GeminiGenerator:
    """Answers a query from retrieved context with a Gemini model."""

    def __init__(
        self,
        model_name: str | None = None,
        *,
        api_key: str | None = None,
        temperature: float = 0.1,
        max_output_tokens: int | None = None,
    ) -> None:
        self.model_name = model_name or DEFAULT_GENERATION_MODEL
        self._api_key = api_key
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._model: Any | None = None

    def generate(self, prompt: str, context: str) -> str:
        genai = _genai(self._api_key)
        if self._model is None:
            self._model = genai.GenerativeModel(self.model_name)

        try:
            response = self._model.generate_content(
                format_qa_prompt(prompt, context),
                generation_config=genai.types.GenerationConfig(
                    temperature=self._temperature,
                    max_output_tokens=self._max_output_tokens,
                ),
            )
            # .text raises ValueError when the candidate was blocked
            return str(response.text)
        except Exception as e:
            log.warning("generation.failed", model=self.model_name, error=str(e))
            raise BackendError.generation_failed(self.model_name, str(e)) from e
