"""Tests for MCP middleware: tool call logging, structured errors, resource listing."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from fastmcp.tools.tool import ToolResult

from docsrag.core.errors import BackendError
from docsrag.core.logging import get_request_id
from docsrag.mcp import middleware as middleware_module
from docsrag.mcp.errors import MCPError, MCPErrorCode
from docsrag.mcp.middleware import CollectionResourceMiddleware, ToolMiddleware


def _context(name: str = "rag_query", **arguments: Any) -> Any:
    return SimpleNamespace(
        message=SimpleNamespace(name=name, arguments=arguments),
        fastmcp_context=None,
    )


def _raising(exc: BaseException):
    async def call_next(context: Any) -> Any:
        raise exc

    return call_next


class TestOnCallTool:
    @pytest.mark.asyncio
    async def test_success_passes_result_through(self) -> None:
        sentinel = object()

        async def call_next(context: Any) -> Any:
            assert get_request_id() is not None
            return sentinel

        result = await ToolMiddleware().on_call_tool(_context(), call_next)

        assert result is sentinel
        assert get_request_id() is None

    @pytest.mark.asyncio
    async def test_mcp_error_becomes_structured_payload(self) -> None:
        error = MCPError(MCPErrorCode.INVALID_PARAMS, "'query' is required", "Provide it.")

        result = await ToolMiddleware().on_call_tool(_context(), _raising(error))

        assert isinstance(result, ToolResult)
        payload = result.structured_content
        assert payload["error"]["code"] == "INVALID_PARAMS"
        assert payload["error"]["remediation"] == "Provide it."
        assert payload["summary"] == "error: INVALID_PARAMS"

    @pytest.mark.asyncio
    async def test_domain_error_translated(self) -> None:
        error = BackendError.generation_failed("gemini-2.0-flash", "quota")

        result = await ToolMiddleware().on_call_tool(_context(), _raising(error))

        assert result.structured_content["error"]["code"] == "BACKEND_FAILED"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self) -> None:
        result = await ToolMiddleware().on_call_tool(_context(), _raising(ZeroDivisionError("x")))

        error = result.structured_content["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert error["error_type"] == "ZeroDivisionError"
        assert error["request_id"]

    def test_long_arguments_truncated_for_logging(self) -> None:
        params = ToolMiddleware._extract_log_params({"query": "q" * 200, "name": None, "n": 1})

        assert params == {"query": "q" * 80 + "...", "n": 1}

    @pytest.mark.asyncio
    async def test_internal_error_points_at_log_file(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        """Tracebacks only reach the log file, so the payload names it."""
        log_file = tmp_path / "mcp-server.log"
        monkeypatch.setattr(middleware_module, "active_log_file", lambda: log_file)

        result = await ToolMiddleware().on_call_tool(_context(), _raising(RuntimeError("x")))

        assert result.structured_content["error"]["log_file"] == str(log_file)

    @pytest.mark.asyncio
    async def test_no_log_file_no_pointer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(middleware_module, "active_log_file", lambda: None)

        result = await ToolMiddleware().on_call_tool(_context(), _raising(RuntimeError("x")))

        assert "log_file" not in result.structured_content["error"]


class TestCollectionResourceMiddleware:
    @pytest.mark.asyncio
    async def test_appends_collections_to_listing(self, app_ctx) -> None:
        existing = object()

        async def call_next(context: Any) -> list[Any]:
            return [existing]

        resources = await CollectionResourceMiddleware(app_ctx).on_list_resources(
            SimpleNamespace(message={}), call_next
        )

        assert resources[0] is existing
        assert [str(r.uri) for r in resources[1:]] == ["docs:///notes", "docs:///repo-a"]
        assert await resources[1].read() == "Meeting notes: the launch date is Friday.\n"
