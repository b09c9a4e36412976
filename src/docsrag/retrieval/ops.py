"""RetrievalFacade - the operations exposed to the protocol layer.

Ties the catalog, index cache, query engine and acquisition collaborator
together. Blocking work (index builds, backend calls, git, HTTP) runs in
worker threads so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio

import structlog

from docsrag.acquisition.ops import Acquirer
from docsrag.catalog.models import CollectionDescriptor, CollectionKind
from docsrag.catalog.ops import CollectionCatalog
from docsrag.config.models import DocsRagConfig
from docsrag.core.errors import CollectionNotFoundError, InvalidArgumentError
from docsrag.core.formatting import truncate_query
from docsrag.index.cache import IndexCache
from docsrag.index.models import CollectionIndex
from docsrag.query.engine import QueryEngine

log = structlog.get_logger(__name__)


def not_found_message(collection_id: str) -> str:
    """Guidance returned by query() when the collection does not exist."""
    return (
        f"Document collection '{collection_id}' was not found. "
        "Use list_documents to see the available collections, or add it first "
        "with add_git_repository (for a git repository) or add_text_file "
        "(for a single text file)."
    )


class RetrievalFacade:
    """List, read, query, ingest and refresh document collections."""

    def __init__(
        self,
        catalog: CollectionCatalog,
        cache: IndexCache,
        engine: QueryEngine,
        acquirer: Acquirer,
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        self._engine = engine
        self._acquirer = acquirer

    @classmethod
    def from_config(cls, config: DocsRagConfig) -> RetrievalFacade:
        """Wire every collaborator from configuration.

        Creates the storage root and indices directory if missing. Backends
        are constructed here but their models load lazily on first use.
        """
        from docsrag.backends.factory import create_embedder, create_generator
        from docsrag.config.loader import ensure_storage
        from docsrag.index.chunking import TextSplitter
        from docsrag.index.loader import ContentLoader
        from docsrag.index.store import IndexStore

        docs_path = ensure_storage(config)
        catalog = CollectionCatalog(docs_path, config.storage.index_filename)
        embedder = create_embedder(config)
        cache = IndexCache(
            catalog,
            ContentLoader(docs_path),
            IndexStore(config.storage.indices_path),
            embedder,
            TextSplitter(config.retrieval.chunk_size, config.retrieval.chunk_overlap),
        )
        engine = QueryEngine(
            embedder,
            create_generator(config),
            similarity_top_k=config.retrieval.similarity_top_k,
        )
        acquirer = Acquirer(
            docs_path,
            index_filename=config.storage.index_filename,
            git_timeout_sec=config.acquisition.git_timeout_sec,
            download_timeout_sec=config.acquisition.download_timeout_sec,
        )
        return cls(catalog, cache, engine, acquirer)

    @property
    def catalog(self) -> CollectionCatalog:
        return self._catalog

    @property
    def cache(self) -> IndexCache:
        return self._cache

    # =========================================================================
    # Read side
    # =========================================================================

    def list_collections(self) -> list[CollectionDescriptor]:
        return self._catalog.list()

    def read_collection(self, collection_id: str) -> str:
        """Plain-text view of a collection.

        Git repositories are rendered as a listing of their immediate files;
        text files return their full content.

        Raises:
            CollectionNotFoundError: collection_id is not in the catalog.
        """
        descriptor = self._require(collection_id)
        if descriptor.kind is CollectionKind.TEXT_FILE:
            return descriptor.source_path.read_text(encoding="utf-8", errors="replace")

        files = sorted(
            entry.name
            for entry in descriptor.source_path.iterdir()
            if entry.is_file() and not entry.is_symlink()
        )
        return f"Repository: {descriptor.id}\n\nFiles:\n" + "\n".join(files)

    async def query(self, collection_id: str, text: str) -> str:
        """Answer text from the collection's content.

        A missing collection yields guidance text rather than an error.

        Raises:
            InvalidArgumentError: collection_id or text is empty.
            BackendError: embedding or generation failed.
        """
        if not collection_id or not collection_id.strip():
            raise InvalidArgumentError.missing("collection_id")
        if not text or not text.strip():
            raise InvalidArgumentError.missing("query")

        if await asyncio.to_thread(self._catalog.get, collection_id) is None:
            log.info("retrieval.collection_missing", collection=collection_id)
            return not_found_message(collection_id)

        log.info(
            "retrieval.query",
            collection=collection_id,
            query=truncate_query(text, 60),
            cached=collection_id in self._cache,
        )
        try:
            index = await self._cache.get_or_build(collection_id)
        except CollectionNotFoundError:
            # Removed between the check and the build
            return not_found_message(collection_id)
        return await asyncio.to_thread(self._engine.answer, index, text)

    # =========================================================================
    # Write side
    # =========================================================================

    async def ingest_repository(
        self,
        url: str,
        subdirectory: str | None = None,
        name: str | None = None,
    ) -> str:
        """Clone or update a repository. The cache is left untouched."""
        collection_id = await asyncio.to_thread(
            self._acquirer.clone_or_update, url, subdirectory, name
        )
        log.info("retrieval.ingested", collection=collection_id, kind="git_repository")
        return collection_id

    async def ingest_text_file(self, url: str, name: str) -> str:
        """Download a text file as a collection. The cache is left untouched."""
        collection_id = await asyncio.to_thread(self._acquirer.download, url, name)
        log.info("retrieval.ingested", collection=collection_id, kind="text_file")
        return collection_id

    async def refresh(self, collection_id: str, *, full: bool = False) -> CollectionIndex:
        """Drop the cached index and rebuild it from current content.

        Persisted vectors are reused for unchanged chunks unless ``full`` is
        set, in which case the persisted state is deleted and every chunk is
        re-embedded.

        Raises:
            CollectionNotFoundError: collection_id is not in the catalog.
        """
        await asyncio.to_thread(self._require, collection_id)
        if full:
            await asyncio.to_thread(self._cache.invalidate, collection_id, drop_persisted=True)
        else:
            self._cache.invalidate(collection_id)
        return await self._cache.get_or_build(collection_id)

    def _require(self, collection_id: str) -> CollectionDescriptor:
        if not collection_id or not collection_id.strip():
            raise InvalidArgumentError.missing("collection_id")
        descriptor = self._catalog.get(collection_id)
        if descriptor is None:
            raise CollectionNotFoundError.for_id(collection_id)
        return descriptor
