"""Core module exports."""

from docsrag.core.errors import (
    AcquisitionError,
    BackendError,
    CollectionNotFoundError,
    ConfigError,
    DocsRagError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)
from docsrag.core.logging import (
    active_log_file,
    clear_request_id,
    configure_logging,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "AcquisitionError",
    "BackendError",
    "CollectionNotFoundError",
    "ConfigError",
    "DocsRagError",
    "ErrorCode",
    "InternalError",
    "InvalidArgumentError",
    # Logging
    "active_log_file",
    "clear_request_id",
    "configure_logging",
    "get_request_id",
    "set_request_id",
]
