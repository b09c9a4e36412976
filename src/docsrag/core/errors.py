"""docs-rag error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Collection / arguments
- 4xxx: Acquisition (git, download)
- 5xxx: Backend (embedding, generation)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Collection (3xxx)
    COLLECTION_NOT_FOUND = 3001
    INVALID_ARGUMENT = 3002

    # Acquisition (4xxx)
    ACQUISITION_COMMAND_FAILED = 4001
    ACQUISITION_DOWNLOAD_FAILED = 4002

    # Backend (5xxx)
    BACKEND_UNAVAILABLE = 5001
    BACKEND_EMBEDDING_FAILED = 5002
    BACKEND_GENERATION_FAILED = 5003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DocsRagError(Exception):
    """Base error with structured context for MCP responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'COLLECTION_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DocsRagError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class CollectionNotFoundError(DocsRagError):
    """The requested collection id is absent from the catalog."""

    @classmethod
    def for_id(cls, collection_id: str) -> "CollectionNotFoundError":
        return cls(
            code=ErrorCode.COLLECTION_NOT_FOUND,
            message=f"Document collection not found: {collection_id}",
            details={"collection_id": collection_id},
        )


class InvalidArgumentError(DocsRagError):
    """A required argument is missing, empty or malformed."""

    @classmethod
    def missing(cls, argument: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"'{argument}' is required and must not be empty",
            details={"argument": argument},
        )

    @classmethod
    def invalid(cls, argument: str, value: Any, reason: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"Invalid value for '{argument}': {reason}",
            details={"argument": argument, "value": str(value), "reason": reason},
        )


class AcquisitionError(DocsRagError):
    """Fetching content (git clone/pull, HTTP download) failed."""

    @classmethod
    def command_failed(cls, command: list[str], output: str) -> "AcquisitionError":
        return cls(
            code=ErrorCode.ACQUISITION_COMMAND_FAILED,
            message=f"Command failed: {' '.join(command)}: {output.strip()}",
            retryable=True,
            details={"command": command, "output": output},
        )

    @classmethod
    def download_failed(cls, url: str, reason: str) -> "AcquisitionError":
        return cls(
            code=ErrorCode.ACQUISITION_DOWNLOAD_FAILED,
            message=f"Download of {url} failed: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )


class BackendError(DocsRagError):
    """Embedding or generation backend failures. Surfaced, never retried."""

    @classmethod
    def unavailable(cls, backend: str, reason: str) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message=f"Backend '{backend}' is unavailable: {reason}",
            details={"backend": backend, "reason": reason},
        )

    @classmethod
    def embedding_failed(cls, model: str, reason: str) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_EMBEDDING_FAILED,
            message=f"Embedding with '{model}' failed: {reason}",
            details={"model": model, "reason": reason},
        )

    @classmethod
    def generation_failed(cls, model: str, reason: str) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_GENERATION_FAILED,
            message=f"Generation with '{model}' failed: {reason}",
            details={"model": model, "reason": reason},
        )


class InternalError(DocsRagError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
