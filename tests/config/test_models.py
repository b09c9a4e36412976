"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docsrag.config.models import (
    EmbeddingConfig,
    LogOutputConfig,
    RetrievalConfig,
    ServerConfig,
    StorageConfig,
)


class TestStorageConfig:
    def test_docs_path_expanded_and_resolved(self) -> None:
        config = StorageConfig(docs_path=Path("~/some-docs"))

        assert config.docs_path == (Path.home() / "some-docs").resolve()

    def test_indices_path_under_docs_path(self, tmp_path: Path) -> None:
        config = StorageConfig(docs_path=tmp_path)

        assert config.indices_path == tmp_path.resolve() / ".indices"

    @pytest.mark.parametrize("name", ["indices", ".", "..", ".a/b"])
    def test_invalid_indices_dirname(self, name: str) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(indices_dirname=name)


class TestRetrievalConfig:
    def test_defaults(self) -> None:
        config = RetrievalConfig()

        assert (config.chunk_size, config.chunk_overlap, config.similarity_top_k) == (2000, 200, 2)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"chunk_size": 0},
            {"chunk_size": 100, "chunk_overlap": 100},
            {"chunk_overlap": -1},
            {"similarity_top_k": 0},
        ],
    )
    def test_rejects_invalid(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValidationError):
            RetrievalConfig(**kwargs)


class TestOtherSections:
    def test_embedding_batch_size_positive(self) -> None:
        with pytest.raises(ValidationError):
            EmbeddingConfig(batch_size=0)

    def test_embedding_provider_closed_set(self) -> None:
        with pytest.raises(ValidationError):
            EmbeddingConfig(provider="openai")  # type: ignore[arg-type]

    def test_server_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_log_file_destination_must_be_absolute(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="relative.log")

    def test_log_console_destinations_accepted(self) -> None:
        assert LogOutputConfig(destination="stdout").destination == "stdout"
