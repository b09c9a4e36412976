"""Process-lifetime cache of built collection indices.

SERIALIZATION:
- One asyncio.Lock per collection id: at most one build per id runs at a
  time, and callers that arrive during a build await it and then hit the
  cache instead of building again.
- Builds for different ids are independent.

Entries are never evicted implicitly. ``invalidate()`` drops an entry so the
next ``get_or_build()`` rebuilds it; unchanged chunks are not re-embedded
because the IndexStore reuses persisted vectors by content hash.
"""

from __future__ import annotations

import asyncio
import threading
import time

import structlog

from docsrag.backends.base import Embedder
from docsrag.catalog.models import CollectionDescriptor
from docsrag.catalog.ops import CollectionCatalog
from docsrag.core.errors import CollectionNotFoundError
from docsrag.index.chunking import TextSplitter
from docsrag.index.loader import ContentLoader, placeholder_document
from docsrag.index.models import CollectionIndex
from docsrag.index.store import IndexStore

log = structlog.get_logger(__name__)


class IndexCache:
    """Build-or-reuse access to CollectionIndex objects, keyed by collection id."""

    def __init__(
        self,
        catalog: CollectionCatalog,
        loader: ContentLoader,
        store: IndexStore,
        embedder: Embedder,
        splitter: TextSplitter | None = None,
    ) -> None:
        self._catalog = catalog
        self._loader = loader
        self._store = store
        self._embedder = embedder
        self._splitter = splitter or TextSplitter()

        self._entries: dict[str, CollectionIndex] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._counter_lock = threading.Lock()
        self._build_count = 0

    @property
    def build_count(self) -> int:
        """Number of builds started by this cache (including failed ones)."""
        return self._build_count

    def __contains__(self, collection_id: object) -> bool:
        return collection_id in self._entries

    async def get_or_build(self, collection_id: str) -> CollectionIndex:
        """Return the cached index, building it on first use.

        Raises:
            CollectionNotFoundError: collection_id is absent from a fresh scan.
            BackendError: embedding failed; nothing is cached.
        """
        index = self._entries.get(collection_id)
        if index is not None:
            return index

        lock = self._locks.setdefault(collection_id, asyncio.Lock())
        async with lock:
            # Another caller may have finished the build while we waited
            index = self._entries.get(collection_id)
            if index is not None:
                return index

            descriptor = await asyncio.to_thread(self._catalog.get, collection_id)
            if descriptor is None:
                raise CollectionNotFoundError.for_id(collection_id)

            index = await asyncio.to_thread(self.build, descriptor)
            self._entries[collection_id] = index
            return index

    def build(self, descriptor: CollectionDescriptor) -> CollectionIndex:
        """Load, split, embed and persist one collection. Blocking; does not cache."""
        with self._counter_lock:
            self._build_count += 1

        start = time.monotonic()
        documents = self._loader.load(descriptor)
        chunks = self._splitter.split_documents(documents)
        if not chunks:
            # Every file was empty or whitespace
            chunks = self._splitter.split_document(placeholder_document(descriptor))

        index = self._store.build(descriptor.id, descriptor.description, chunks, self._embedder)
        log.info(
            "index_cache.built",
            collection=descriptor.id,
            documents=len(documents),
            chunks=index.size,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        return index

    def invalidate(self, collection_id: str, *, drop_persisted: bool = False) -> bool:
        """Drop the cached entry. Returns True if one existed.

        With drop_persisted, the stored vectors go too and the next build
        re-embeds every chunk. That part blocks on disk I/O.
        """
        removed = self._entries.pop(collection_id, None) is not None
        if drop_persisted:
            self._store.clear(collection_id)
        if removed or drop_persisted:
            log.info(
                "index_cache.invalidated", collection=collection_id, dropped_persisted=drop_persisted
            )
        return removed
