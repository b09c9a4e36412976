"""MCP server module - FastMCP tool, resource and prompt wiring."""

from docsrag.mcp.context import AppContext
from docsrag.mcp.errors import MCPError, MCPErrorCode
from docsrag.mcp.server import create_mcp_server, run_server

__all__ = ["AppContext", "MCPError", "MCPErrorCode", "create_mcp_server", "run_server"]
