"""Document collection MCP tools - list, query, ingest, refresh."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field

from docsrag.core.formatting import pluralize
from docsrag.mcp.errors import translate_errors

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from docsrag.catalog.models import CollectionDescriptor
    from docsrag.mcp.context import AppContext


def format_collection_list(docs_path: Path, collections: list[CollectionDescriptor]) -> str:
    """Text listing shown to agents by list_documents."""
    lines = "\n".join(f"- {c.display_name}: {c.description}" for c in collections)
    return f"Available documents in {docs_path}:\n\n{lines}\n\nTotal documents: {len(collections)}"


# =============================================================================
# Tool Registration
# =============================================================================


def register_tools(mcp: FastMCP, app_ctx: AppContext) -> None:
    """Register collection tools with FastMCP server."""

    @mcp.tool
    async def list_documents() -> dict[str, Any]:
        """List the document collections available for rag_query."""
        collections = await asyncio.to_thread(app_ctx.facade.list_collections)
        return {
            "text": format_collection_list(app_ctx.docs_path, collections),
            "collections": [c.to_dict() for c in collections],
            "total": len(collections),
            "summary": pluralize(len(collections), "collection"),
        }

    @mcp.tool
    async def rag_query(
        collection_id: str = Field(..., description="Collection id from list_documents"),
        query: str = Field(..., description="Question to answer from the collection"),
    ) -> dict[str, Any]:
        """Answer a question using retrieval-augmented generation over one collection.

        The collection is indexed on first use, which can take a while for
        large repositories. Later queries reuse the index.
        """
        with translate_errors():
            answer = await app_ctx.facade.query(collection_id, query)
        return {
            "text": answer,
            "collection_id": collection_id,
            "summary": f"answered from {collection_id}",
        }

    @mcp.tool
    async def add_git_repository(
        repository_url: str = Field(..., description="URL of the git repository to clone"),
        subdirectory: str | None = Field(
            None, description="Only check out this path inside the repository"
        ),
        name: str | None = Field(
            None, description="Collection id to use instead of the repository name"
        ),
    ) -> dict[str, Any]:
        """Clone a git repository as a document collection, or pull it if already present."""
        with translate_errors():
            collection_id = await app_ctx.facade.ingest_repository(
                repository_url, subdirectory=subdirectory, name=name
            )
        return {
            "text": f"Added git repository: {collection_id}",
            "collection_id": collection_id,
            "summary": f"added {collection_id}",
        }

    @mcp.tool
    async def add_text_file(
        file_url: str = Field(..., description="URL of the text file to download"),
        document_name: str = Field(..., description="Collection id for the downloaded file"),
    ) -> dict[str, Any]:
        """Download a text file as a document collection."""
        with translate_errors():
            collection_id = await app_ctx.facade.ingest_text_file(file_url, document_name)
        return {
            "text": f"Added document '{collection_id}' with content from {file_url}",
            "collection_id": collection_id,
            "summary": f"added {collection_id}",
        }

    @mcp.tool
    async def refresh_collection(
        collection_id: str = Field(..., description="Collection id to re-index"),
        full: bool = Field(
            False, description="Discard persisted embeddings and re-embed every chunk"
        ),
    ) -> dict[str, Any]:
        """Rebuild a collection's index after its content changed.

        Use after add_git_repository pulled new commits. Unchanged chunks
        are not re-embedded unless full is set.
        """
        with translate_errors():
            index = await app_ctx.facade.refresh(collection_id, full=full)
        return {
            "text": f"Re-indexed '{collection_id}': {pluralize(index.size, 'chunk')}",
            "collection_id": collection_id,
            "chunks": index.size,
            "summary": f"refreshed {collection_id}",
        }
