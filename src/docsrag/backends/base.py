"""Backend capability interfaces.

Builds and queries receive their embedder and generator explicitly; there is
no process-global "active model" to swap and restore.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

QA_PROMPT_TEMPLATE = (
    "Context information is below.\n"
    "---------------------\n"
    "{context}\n"
    "---------------------\n"
    "Given the context information and not prior knowledge, answer the query.\n"
    "Query: {query}\n"
    "Answer: "
)


@runtime_checkable
class Embedder(Protocol):
    """Turns text into dense vectors. Rows of the returned matrix match inputs."""

    model_name: str

    def embed(self, texts: Sequence[str]) -> np.ndarray: ...

    def embed_query(self, text: str) -> np.ndarray: ...


@runtime_checkable
class Generator(Protocol):
    """Produces an answer to ``prompt`` grounded in ``context``."""

    model_name: str

    def generate(self, prompt: str, context: str) -> str: ...


def format_qa_prompt(query: str, context: str) -> str:
    return QA_PROMPT_TEMPLATE.format(context=context, query=query)
