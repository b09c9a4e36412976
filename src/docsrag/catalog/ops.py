"""Collection discovery - scans the storage root on every call.

Classification order per top-level directory:
1. a directory-typed ``.git`` child -> GIT_REPOSITORY
2. a file-typed index file child -> TEXT_FILE
3. anything else is invisible to retrieval (no error)
"""

from __future__ import annotations

from pathlib import Path

import structlog

from docsrag.catalog.models import CollectionDescriptor, CollectionKind
from docsrag.config.constants import GIT_MARKER, RESERVED_PREFIX

log = structlog.get_logger(__name__)


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


class CollectionCatalog:
    """Lists the collections under a storage root. Never caches."""

    def __init__(self, docs_path: Path, index_filename: str = "index.txt") -> None:
        self._docs_path = docs_path
        self._index_filename = index_filename

    @property
    def docs_path(self) -> Path:
        return self._docs_path

    def list(self) -> list[CollectionDescriptor]:
        """Scan the storage root. Sorted by id."""
        try:
            entries = sorted(self._docs_path.iterdir(), key=lambda p: p.name)
        except FileNotFoundError:
            log.warning("catalog.root_missing", docs_path=str(self._docs_path))
            return []

        collections: list[CollectionDescriptor] = []
        for entry in entries:
            if entry.name.startswith(RESERVED_PREFIX) or not _is_dir(entry):
                continue
            descriptor = self._classify(entry)
            if descriptor is not None:
                collections.append(descriptor)

        log.debug("catalog.scanned", count=len(collections))
        return collections

    def get(self, collection_id: str) -> CollectionDescriptor | None:
        """Descriptor for collection_id from a fresh scan, or None."""
        for descriptor in self.list():
            if descriptor.id == collection_id:
                return descriptor
        return None

    def _classify(self, entry: Path) -> CollectionDescriptor | None:
        if _is_dir(entry / GIT_MARKER):
            return CollectionDescriptor.for_entry(
                entry.name, entry.resolve(), CollectionKind.GIT_REPOSITORY
            )

        index_file = entry / self._index_filename
        if _is_file(index_file):
            return CollectionDescriptor.for_entry(
                entry.name, index_file.resolve(), CollectionKind.TEXT_FILE
            )

        return None
