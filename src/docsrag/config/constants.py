"""Configuration constants.

Values here are protocol and on-disk format constraints, not user settings.
For configurable values, see models.py.
"""

# =============================================================================
# Storage Layout
# =============================================================================

RESERVED_PREFIX = "."
"""Entries starting with this prefix are never collections or documents."""

GIT_MARKER = ".git"
"""Directory whose presence marks a git repository collection."""

# =============================================================================
# Persisted Index Format
# =============================================================================

INDEX_FORMAT_VERSION = 1
"""Bumped when embeddings.npz / metadata.json change shape. Mismatch => re-embed."""

EMBEDDINGS_FILENAME = "embeddings.npz"
METADATA_FILENAME = "metadata.json"

# =============================================================================
# MCP Surface
# =============================================================================

RESOURCE_SCHEME = "docs"
"""Collections are exposed as docs:///<collection_id> resources."""

RESOURCE_MIME_TYPE = "text/plain"
