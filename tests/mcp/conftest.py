"""Shared fixtures for MCP tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from docsrag.acquisition.ops import Acquirer
from docsrag.catalog.ops import CollectionCatalog
from docsrag.index.cache import IndexCache
from docsrag.index.chunking import TextSplitter
from docsrag.index.loader import ContentLoader
from docsrag.index.store import IndexStore
from docsrag.mcp.context import AppContext
from docsrag.query.engine import QueryEngine
from docsrag.retrieval.ops import RetrievalFacade


class StubMCP:
    """Captures handlers registered via @mcp.tool / @mcp.resource / @mcp.prompt."""

    def __init__(self) -> None:
        self.tools: dict[str, Callable[..., Any]] = {}
        self.resources: dict[str, Callable[..., Any]] = {}
        self.prompts: dict[str, Callable[..., Any]] = {}

    def tool(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        self.tools[fn.__name__] = fn
        return fn

    def resource(self, uri: str, **kwargs: Any) -> Callable[..., Any]:
        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.resources[uri] = fn
            return fn

        return decorator

    def prompt(self, name: str, **kwargs: Any) -> Callable[..., Any]:
        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.prompts[name] = fn
            return fn

        return decorator


@pytest.fixture
def app_ctx(docs_root: Path, fake_embedder, fake_generator) -> AppContext:
    """AppContext over the example storage root with fake backends."""
    catalog = CollectionCatalog(docs_root)
    cache = IndexCache(
        catalog,
        ContentLoader(docs_root),
        IndexStore(docs_root / ".indices"),
        fake_embedder,
        TextSplitter(chunk_size=500, chunk_overlap=50),
    )
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="fetched text"))
    acquirer = Acquirer(docs_root, http_client=httpx.Client(transport=transport))
    facade = RetrievalFacade(catalog, cache, QueryEngine(fake_embedder, fake_generator), acquirer)
    return AppContext(docs_path=docs_root, facade=facade)


@pytest.fixture
def stub_mcp() -> StubMCP:
    return StubMCP()
