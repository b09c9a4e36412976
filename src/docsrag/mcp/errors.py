"""Structured error system for MCP tools.

Domain errors (DocsRagError) are translated into MCPError at the tool
boundary so agents get a machine-readable code plus a remediation hint.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fastmcp.exceptions import ToolError

from docsrag.core.errors import DocsRagError, ErrorCode


class MCPErrorCode(StrEnum):
    """Machine-readable error codes for MCP tool failures."""

    # Validation errors - agent should fix input
    INVALID_PARAMS = "INVALID_PARAMS"
    COLLECTION_NOT_FOUND = "COLLECTION_NOT_FOUND"

    # External failures - may succeed on retry
    ACQUISITION_FAILED = "ACQUISITION_FAILED"
    BACKEND_FAILED = "BACKEND_FAILED"

    # System errors
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ErrorResponse:
    """Structured error response for MCP tools."""

    code: MCPErrorCode
    message: str
    remediation: str
    retryable: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "remediation": self.remediation,
            "retryable": self.retryable,
            "context": self.context,
        }


class MCPError(ToolError):
    """Tool error with a structured response.

    Extends FastMCP's ToolError so FastMCP passes it through unchanged;
    ToolMiddleware then turns it into a structured payload.
    """

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        remediation: str,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.remediation = remediation
        self.retryable = retryable
        self.context = context

    @classmethod
    def from_error(cls, error: DocsRagError) -> MCPError:
        """Map a domain error onto its MCP code and remediation."""
        code, remediation = _ERROR_MAP.get(error.code, _FALLBACK)
        mcp_error = cls(
            code=code,
            message=error.message,
            remediation=remediation,
            retryable=error.retryable,
        )
        mcp_error.context = {"error_code": error.code.value, **error.details}
        return mcp_error

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            code=self.code,
            message=self.message,
            remediation=self.remediation,
            retryable=self.retryable,
            context=self.context,
        )


_FALLBACK = (
    MCPErrorCode.INTERNAL_ERROR,
    "Unexpected server error. Check the server log for details.",
)

_ERROR_MAP: dict[ErrorCode, tuple[MCPErrorCode, str]] = {
    ErrorCode.CONFIG_PARSE_ERROR: (
        MCPErrorCode.CONFIG_ERROR,
        "Fix the docs-rag configuration file and restart the server.",
    ),
    ErrorCode.CONFIG_INVALID_VALUE: (
        MCPErrorCode.CONFIG_ERROR,
        "Fix the docs-rag configuration value and restart the server.",
    ),
    ErrorCode.COLLECTION_NOT_FOUND: (
        MCPErrorCode.COLLECTION_NOT_FOUND,
        "Call list_documents for valid ids, or add the collection with "
        "add_git_repository or add_text_file.",
    ),
    ErrorCode.INVALID_ARGUMENT: (
        MCPErrorCode.INVALID_PARAMS,
        "Provide every required argument with a non-empty value and retry.",
    ),
    ErrorCode.ACQUISITION_COMMAND_FAILED: (
        MCPErrorCode.ACQUISITION_FAILED,
        "Check the repository URL and that it is reachable without credentials.",
    ),
    ErrorCode.ACQUISITION_DOWNLOAD_FAILED: (
        MCPErrorCode.ACQUISITION_FAILED,
        "Check that the file URL is reachable and returns the file content.",
    ),
    ErrorCode.BACKEND_UNAVAILABLE: (
        MCPErrorCode.BACKEND_FAILED,
        "Configure the embedding/LLM backend (for Gemini set GEMINI_API_KEY).",
    ),
    ErrorCode.BACKEND_EMBEDDING_FAILED: (
        MCPErrorCode.BACKEND_FAILED,
        "The embedding backend failed. Retry later or check the server log.",
    ),
    ErrorCode.BACKEND_GENERATION_FAILED: (
        MCPErrorCode.BACKEND_FAILED,
        "The language model call failed. Retry later or check the server log.",
    ),
}


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise DocsRagError as MCPError inside a tool body."""
    try:
        yield
    except DocsRagError as e:
        raise MCPError.from_error(e) from e
