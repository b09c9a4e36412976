"""MCP middleware.

ToolMiddleware provides:
- Two-phase logging (tool_start with params, tool_completed with timing)
- Structured error payloads instead of raised exceptions
- No tracebacks on the console (DEBUG only, which goes to the log file)

CollectionResourceMiddleware lists the current collections as resources.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from pydantic import ValidationError

from docsrag.core.errors import DocsRagError
from docsrag.core.logging import active_log_file, clear_request_id, set_request_id
from docsrag.mcp.errors import MCPError
from docsrag.mcp.resources import collection_resources

if TYPE_CHECKING:
    from fastmcp.resources import Resource
    from fastmcp.server.middleware import CallNext
    from mcp import types as mt

    from docsrag.mcp.context import AppContext

log = structlog.get_logger(__name__)

# Arguments longer than this are truncated in logs
_MAX_LOGGED_VALUE = 80


class ToolMiddleware(Middleware):
    """Logs every tool call and converts failures into structured results."""

    async def on_call_tool(  # type: ignore[override]
        self,
        context: MiddlewareContext[mt.CallToolRequest],
        call_next: CallNext[mt.CallToolRequest, Any],
    ) -> Any:
        params = context.message
        tool_name = getattr(params, "name", "unknown")
        arguments = getattr(params, "arguments", {}) or {}

        request_id = set_request_id()
        start_time = time.perf_counter()
        log.info("tool_start", tool=tool_name, **self._extract_log_params(arguments))

        try:
            result = await call_next(context)
            log.info(
                "tool_completed",
                tool=tool_name,
                duration_ms=self._elapsed_ms(start_time),
                **self._extract_result_summary(result),
            )
            return result

        except asyncio.CancelledError:
            log.info("tool_cancelled", tool=tool_name, duration_ms=self._elapsed_ms(start_time))
            return ToolResult(
                structured_content={
                    "error": {
                        "code": "CANCELLED",
                        "message": f"Tool '{tool_name}' cancelled: server shutting down",
                    },
                    "summary": "error: cancelled",
                }
            )

        except ValidationError as e:
            error_details = [
                {
                    "field": ".".join(str(p) for p in err.get("loc", [])),
                    "message": err.get("msg", ""),
                }
                for err in e.errors()
            ]
            log.warning(
                "tool_validation_error",
                tool=tool_name,
                errors=error_details,
                duration_ms=self._elapsed_ms(start_time),
            )
            return ToolResult(
                structured_content={
                    "error": {
                        "code": "VALIDATION_ERROR",
                        "message": f"Invalid parameters for '{tool_name}'",
                        "details": error_details,
                    },
                    "summary": f"error: validation failed for {tool_name}",
                }
            )

        except (MCPError, DocsRagError) as e:
            mcp_error = e if isinstance(e, MCPError) else MCPError.from_error(e)
            log.warning(
                "tool_error",
                tool=tool_name,
                error_code=mcp_error.code.value,
                error=mcp_error.message,
                duration_ms=self._elapsed_ms(start_time),
            )
            return ToolResult(
                structured_content={
                    "error": mcp_error.to_response().to_dict(),
                    "summary": f"error: {mcp_error.code.value}",
                }
            )

        except Exception as e:
            log.error(
                "tool_internal_error",
                tool=tool_name,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=self._elapsed_ms(start_time),
            )
            log.debug("tool_internal_error_traceback", tool=tool_name, exc_info=True)
            error: dict[str, Any] = {
                "code": "INTERNAL_ERROR",
                "message": f"Error calling tool '{tool_name}': {e}",
                "error_type": type(e).__name__,
                "request_id": request_id,
            }
            log_file = active_log_file()
            if log_file is not None:
                # The traceback is only in the file
                error["log_file"] = str(log_file)
            return ToolResult(
                structured_content={
                    "error": error,
                    "summary": f"error: internal error in {tool_name}",
                }
            )

        finally:
            clear_request_id()

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 1)

    @staticmethod
    def _extract_log_params(arguments: dict[str, Any]) -> dict[str, Any]:
        """Key params for tool_start, with long values truncated."""
        params: dict[str, Any] = {}
        for key, value in arguments.items():
            if isinstance(value, str) and len(value) > _MAX_LOGGED_VALUE:
                params[key] = value[:_MAX_LOGGED_VALUE] + "..."
            elif value is not None:
                params[key] = value
        return params

    @staticmethod
    def _extract_result_summary(result: Any) -> dict[str, Any]:
        """Summary metrics from a tool result for logging."""
        structured = getattr(result, "structured_content", None)
        if not isinstance(structured, dict):
            return {}
        summary: dict[str, Any] = {}
        if structured.get("summary"):
            summary["summary"] = structured["summary"]
        if "total" in structured:
            summary["total"] = structured["total"]
        return summary


class CollectionResourceMiddleware(Middleware):
    """Adds one ``docs:///<id>`` resource per collection to resources/list.

    Collections come and go on disk, so they are scanned per request instead
    of being registered once at startup.
    """

    def __init__(self, app_ctx: AppContext) -> None:
        self._app_ctx = app_ctx

    async def on_list_resources(  # type: ignore[override]
        self,
        context: MiddlewareContext[mt.ListResourcesRequest],
        call_next: CallNext[mt.ListResourcesRequest, list[Resource]],
    ) -> list[Resource]:
        resources = list(await call_next(context))
        collections = await asyncio.to_thread(self._app_ctx.facade.list_collections)
        resources.extend(collection_resources(self._app_ctx, collections))
        log.debug("resources_listed", collections=len(collections))
        return resources
