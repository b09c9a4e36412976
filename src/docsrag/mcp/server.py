"""FastMCP server creation and wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from docsrag.config.models import DocsRagConfig
    from docsrag.mcp.context import AppContext

log = structlog.get_logger(__name__)

SERVER_NAME = "docs-rag"
SERVER_INSTRUCTIONS = (
    "Retrieval-augmented question answering over local document collections. "
    "Call list_documents first, then rag_query with a collection id. Add new "
    "collections with add_git_repository or add_text_file."
)


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with tools, resources and prompts wired to context.

    Args:
        context: AppContext holding the retrieval facade

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from docsrag.mcp.middleware import CollectionResourceMiddleware, ToolMiddleware
    from docsrag.mcp.resources import register_resources
    from docsrag.mcp.tools import collections

    log.info("mcp_server_creating", docs_path=str(context.docs_path))

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    mcp.add_middleware(ToolMiddleware())
    mcp.add_middleware(CollectionResourceMiddleware(context))

    collections.register_tools(mcp, context)
    register_resources(mcp, context)

    log.info("mcp_server_created")
    return mcp


def run_server(config: DocsRagConfig) -> None:
    """Create and run the MCP server on the configured transport."""
    from docsrag.config.models import LoggingConfig, LogOutputConfig
    from docsrag.core.logging import configure_logging
    from docsrag.mcp.context import AppContext

    # stdout belongs to the stdio transport; console logs go to stderr
    log_file = config.storage.indices_path / "mcp-server.log"
    outputs = [LogOutputConfig(destination="stderr", format="console", level=config.logging.level)]
    outputs.extend(o for o in config.logging.outputs if o.destination not in ("stdout", "stderr"))
    outputs.append(LogOutputConfig(destination=str(log_file), format="json", level="DEBUG"))
    configure_logging(config=LoggingConfig(level="DEBUG", outputs=outputs))

    context = AppContext.create(config)
    mcp = create_mcp_server(context)

    transport = config.server.transport
    log.info(
        "mcp_server_starting",
        docs_path=str(context.docs_path),
        transport=transport,
        log_file=str(log_file),
    )
    if transport == "http":
        mcp.run(transport="http", host=config.server.host, port=config.server.port)
    else:
        mcp.run()
