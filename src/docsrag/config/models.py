"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DOCS_RAG__SECTION__KEY)
3. DOCS_PATH environment variable (storage.docs_path only)
4. Global YAML (~/.config/docs-rag/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DOCS_RAG__<SECTION>__<KEY>=<VALUE>

Examples:
    DOCS_RAG__LOGGING__LEVEL=DEBUG
    DOCS_RAG__EMBEDDING__PROVIDER=gemini
    DOCS_RAG__RETRIEVAL__SIMILARITY_TOP_K=4
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DOCS_RAG__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG includes per-file loader warnings.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StorageConfig(BaseModel):
    """Storage root layout.

    Env vars:
        DOCS_PATH: Storage root (also DOCS_RAG__STORAGE__DOCS_PATH)
        DOCS_RAG__STORAGE__INDICES_DIRNAME: Reserved directory for persisted indices
    """

    docs_path: Path = Field(
        default_factory=lambda: Path("~/docs").expanduser(),
        description="Root directory holding one subdirectory per collection.",
    )
    indices_dirname: str = Field(
        default=".indices",
        description="Reserved subdirectory of docs_path holding persisted vector indices. "
        "Must start with '.' so the catalog never lists it as a collection.",
    )
    index_filename: str = Field(
        default="index.txt",
        description="File name marking a single-file text collection.",
    )

    @field_validator("docs_path")
    @classmethod
    def expand_docs_path(cls, v: Path) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("indices_dirname")
    @classmethod
    def validate_indices_dirname(cls, v: str) -> str:
        if not v.startswith(".") or "/" in v or v in (".", ".."):
            raise ValueError(f"indices_dirname must be a single dot-prefixed name, got {v!r}")
        return v

    @property
    def indices_path(self) -> Path:
        return self.docs_path / self.indices_dirname


class EmbeddingConfig(BaseModel):
    """Embedding backend configuration.

    Env vars:
        DOCS_RAG__EMBEDDING__PROVIDER: fastembed (local ONNX) or gemini (remote)
        DOCS_RAG__EMBEDDING__MODEL_NAME: Model override
    """

    provider: Literal["fastembed", "gemini"] = Field(
        default="fastembed",
        description="fastembed runs locally; gemini needs an API key.",
    )
    model_name: str | None = Field(
        default=None,
        description="Model name. Default: BAAI/bge-small-en-v1.5 (fastembed), "
        "models/text-embedding-004 (gemini). "
        "RISK: Changing the model discards persisted vectors on next build.",
    )
    batch_size: int = Field(
        default=64,
        description="Texts per embedding call.",
    )
    threads: int | None = Field(
        default=None,
        description="ONNX threads for fastembed. Default: half the CPU count.",
    )

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"batch_size must be >= 1, got {v}")
        return v


class LLMConfig(BaseModel):
    """Answer generation backend configuration.

    Env vars:
        DOCS_RAG__LLM__MODEL_NAME: Generation model
        DOCS_RAG__LLM__API_KEY: API key (falls back to GEMINI_API_KEY / GOOGLE_API_KEY)
    """

    provider: Literal["gemini"] = "gemini"
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used to answer queries.",
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature. Low values keep answers close to the context.",
    )
    max_output_tokens: int | None = Field(
        default=None,
        description="Cap on generated tokens. None uses the model default.",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Gemini API key. Shared with the gemini embedding provider.",
    )


class RetrievalConfig(BaseModel):
    """Chunking and retrieval configuration.

    Env vars:
        DOCS_RAG__RETRIEVAL__CHUNK_SIZE: Max characters per chunk
        DOCS_RAG__RETRIEVAL__CHUNK_OVERLAP: Characters shared by adjacent chunks
        DOCS_RAG__RETRIEVAL__SIMILARITY_TOP_K: Chunks passed to the LLM per query
    """

    chunk_size: int = Field(
        default=2000,
        description="Maximum characters per chunk. "
        "TRADEOFF: Larger chunks give more context per hit but dilute similarity.",
    )
    chunk_overlap: int = Field(
        default=200,
        description="Characters repeated between adjacent chunks.",
    )
    similarity_top_k: int = Field(
        default=2,
        description="Chunks retrieved per query.",
    )

    @model_validator(mode="after")
    def validate_overlap(self) -> "RetrievalConfig":
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if not (0 <= self.chunk_overlap < self.chunk_size):
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {self.chunk_overlap}"
            )
        if self.similarity_top_k < 1:
            raise ValueError(f"similarity_top_k must be >= 1, got {self.similarity_top_k}")
        return self


class AcquisitionConfig(BaseModel):
    """Git clone/pull and HTTP download configuration.

    Env vars:
        DOCS_RAG__ACQUISITION__GIT_TIMEOUT_SEC: git command timeout
        DOCS_RAG__ACQUISITION__DOWNLOAD_TIMEOUT_SEC: HTTP download timeout
    """

    git_timeout_sec: float = Field(
        default=600.0,
        description="Timeout for a single git command. Large repositories need more.",
    )
    download_timeout_sec: float = Field(
        default=60.0,
        description="HTTP timeout for text file downloads.",
    )


class ServerConfig(BaseModel):
    """MCP server configuration.

    Env vars:
        DOCS_RAG__SERVER__TRANSPORT: stdio (default) or http
        DOCS_RAG__SERVER__HOST: Bind address for http transport
        DOCS_RAG__SERVER__PORT: Port for http transport
    """

    transport: Literal["stdio", "http"] = "stdio"
    host: str = Field(
        default="127.0.0.1",
        description="Bind address. Use 0.0.0.0 for network access (security risk).",
    )
    port: int = Field(default=7655)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (0 <= v <= 65535):
            raise ValueError(f"Port must be 0-65535, got {v}")
        return v


class DocsRagConfig(BaseModel):
    """Root configuration for docs-rag."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    acquisition: AcquisitionConfig = Field(default_factory=AcquisitionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
