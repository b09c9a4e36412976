"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides deterministic in-process backends so no test touches the network or
downloads a model.
"""

from __future__ import annotations

import hashlib
import re
import sys
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

_TOKEN = re.compile(r"[a-z0-9]+")


class FakeEmbedder:
    """Hashed bag-of-words vectors. Same words -> same direction."""

    def __init__(self, model_name: str = "fake-embedder", dim: int = 64) -> None:
        self.model_name = model_name
        self.dim = dim
        self.embed_calls = 0
        self.embedded_texts: list[str] = []
        self.query_calls = 0

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dim, dtype=np.float32)
        for token in _TOKEN.findall(text.lower()):
            bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % self.dim
            vec[bucket] += 1.0
        if not vec.any():
            vec[0] = 1.0
        return vec

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.embed_calls += 1
        self.embedded_texts.extend(texts)
        return np.vstack([self._vector(t) for t in texts])

    def embed_query(self, text: str) -> np.ndarray:
        self.query_calls += 1
        return self._vector(text)


class FakeGenerator:
    """Echoes the prompt and context so tests can assert on retrieval."""

    def __init__(self, model_name: str = "fake-generator") -> None:
        self.model_name = model_name
        self.calls: list[tuple[str, str]] = []

    def generate(self, prompt: str, context: str) -> str:
        self.calls.append((prompt, context))
        return f"ANSWER to {prompt!r}\n{context}"


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def make_embedder() -> type[FakeEmbedder]:
    """The FakeEmbedder class, for tests that need several instances."""
    return FakeEmbedder


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Storage root with one git repository and one text collection.

    Layout:
        repo-a/.git/           (marker directory)
        repo-a/x.md
        repo-a/sub/y.md
        notes/index.txt
        plain/readme.md        (no marker: not a collection)
        .indices/              (reserved)
        loose.txt              (not a directory)
    """
    root = tmp_path / "docs"
    (root / "repo-a" / ".git").mkdir(parents=True)
    (root / "repo-a" / "x.md").write_text("# X\n\nThe deploy command is make ship.\n")
    (root / "repo-a" / "sub").mkdir()
    (root / "repo-a" / "sub" / "y.md").write_text("# Y\n\nTests run with pytest.\n")
    (root / "notes").mkdir()
    (root / "notes" / "index.txt").write_text("Meeting notes: the launch date is Friday.\n")
    (root / "plain").mkdir()
    (root / "plain" / "readme.md").write_text("not a collection")
    (root / ".indices").mkdir()
    (root / "loose.txt").write_text("stray")
    return root
