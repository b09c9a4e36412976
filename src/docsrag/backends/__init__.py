"""Embedding and generation backends."""

from docsrag.backends.base import Embedder, Generator, format_qa_prompt
from docsrag.backends.factory import create_embedder, create_generator
from docsrag.backends.gemini import GeminiEmbedder, GeminiGenerator
from docsrag.backends.local import FastEmbedEmbedder

__all__ = [
    "Embedder",
    "FastEmbedEmbedder",
    "GeminiEmbedder",
    "GeminiGenerator",
    "Generator",
    "create_embedder",
    "create_generator",
    "format_qa_prompt",
]
