"""Git and HTTP acquisition of collections."""

from docsrag.acquisition.ops import (
    Acquirer,
    repository_name,
    validate_name,
    validate_subdirectory,
)

__all__ = ["Acquirer", "repository_name", "validate_name", "validate_subdirectory"]
