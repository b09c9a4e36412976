"""Collection resources and the usage prompt."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

from fastmcp.exceptions import ResourceError
from fastmcp.resources import FunctionResource

from docsrag.config.constants import RESOURCE_MIME_TYPE, RESOURCE_SCHEME
from docsrag.core.errors import DocsRagError

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from docsrag.catalog.models import CollectionDescriptor
    from docsrag.mcp.context import AppContext

RESOURCE_TEMPLATE = f"{RESOURCE_SCHEME}:///{{collection_id}}"


def resource_uri(collection_id: str) -> str:
    return f"{RESOURCE_SCHEME}:///{collection_id}"


def usage_guide(app_ctx: AppContext) -> str:
    """Collections overview plus how to query them."""
    collections = app_ctx.facade.list_collections()
    listing = "\n".join(f"- {c.display_name}: {c.description}" for c in collections)
    return (
        f"Available document collections:\n{listing}\n\n"
        "Use the 'rag_query' tool to ask questions about these documents."
    )


async def read_collection_text(app_ctx: AppContext, collection_id: str) -> str:
    """Resource body for a collection, with domain errors as ResourceError."""
    try:
        return await asyncio.to_thread(app_ctx.facade.read_collection, collection_id)
    except DocsRagError as e:
        raise ResourceError(e.message) from e


def collection_resources(
    app_ctx: AppContext, collections: list[CollectionDescriptor]
) -> list[FunctionResource]:
    """One concrete ``docs:///<id>`` resource per collection, read lazily."""

    def reader(collection_id: str) -> Callable[[], object]:
        async def read() -> str:
            return await read_collection_text(app_ctx, collection_id)

        return read

    return [
        FunctionResource.from_function(
            reader(c.id),
            uri=resource_uri(c.id),
            name=c.display_name,
            description=c.description,
            mime_type=RESOURCE_MIME_TYPE,
        )
        for c in collections
    ]


def register_resources(mcp: FastMCP, app_ctx: AppContext) -> None:
    """Register the collection resource template and the usage prompt.

    Concrete per-collection resources are listed by
    CollectionResourceMiddleware from a fresh scan on every request.
    """

    @mcp.resource(
        RESOURCE_TEMPLATE,
        name="document_collection",
        description="Plain-text view of a document collection",
        mime_type=RESOURCE_MIME_TYPE,
    )
    async def read_collection(collection_id: str) -> str:
        return await read_collection_text(app_ctx, collection_id)

    @mcp.prompt(
        name="guide_documents_usage",
        description="Guide on how to use document collections and RAG functionality",
    )
    async def guide_documents_usage() -> str:
        guide = await asyncio.to_thread(usage_guide, app_ctx)
        return (
            "Please list the available document collections and guide on how to use "
            "the RAG functionality.\n\n" + guide
        )
