"""Build backends from configuration."""

from __future__ import annotations

from docsrag.backends.base import Embedder, Generator
from docsrag.backends.gemini import GeminiEmbedder, GeminiGenerator
from docsrag.backends.local import FastEmbedEmbedder
from docsrag.config.loader import resolve_api_key
from docsrag.config.models import DocsRagConfig


def create_embedder(config: DocsRagConfig) -> Embedder:
    embedding = config.embedding
    if embedding.provider == "gemini":
        return GeminiEmbedder(
            embedding.model_name,
            api_key=resolve_api_key(config),
            batch_size=embedding.batch_size,
        )
    return FastEmbedEmbedder(
        embedding.model_name,
        batch_size=embedding.batch_size,
        threads=embedding.threads,
    )


def create_generator(config: DocsRagConfig) -> Generator:
    llm = config.llm
    return GeminiGenerator(
        llm.model_name,
        api_key=resolve_api_key(config),
        temperature=llm.temperature,
        max_output_tokens=llm.max_output_tokens,
    )
