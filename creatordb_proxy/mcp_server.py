"""
MCP tool shell.

Registers one FastMCP tool per registry operation. Each tool forwards its
arguments to the shared Dispatcher and returns the normalized result as a
single JSON text block. Failures are returned as tool output with
"success": false rather than as protocol errors, so agent callers receive
them as data.
"""

import json
import logging
from typing import Any, Dict, Mapping

from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import Field

from creatordb_proxy.classifier import NormalizedResult
from creatordb_proxy.dispatch import Dispatcher
from creatordb_proxy.registry import REGISTRY, Operation

logger = logging.getLogger(__name__)


def render_result(result: NormalizedResult) -> str:
    """Serialize a result as the tool's text content"""
    return json.dumps(result.to_dict(), indent=2)


class OperationTool(Tool):
    """A FastMCP tool backed by a registry operation"""

    operation: Operation = Field(exclude=True)
    dispatcher: Any = Field(exclude=True)

    @classmethod
    def from_operation(cls, operation: Operation, dispatcher: Dispatcher) -> "OperationTool":
        return cls(
            name=operation.name,
            description=operation.description,
            parameters=operation.input_schema(),
            operation=operation,
            dispatcher=dispatcher,
        )

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        logger.info(f"Tool call: {self.name}")
        result = await self.dispatcher.dispatch(self.name, arguments or {})
        if not result.success:
            logger.warning(
                f"Tool {self.name} failed ({result.error_kind}, status={result.status}): {result.error}"
            )
        return ToolResult(content=[TextContent(type="text", text=render_result(result))])


def create_mcp_server(
    dispatcher: Dispatcher,
    name: str = "creatordb-mcp-server",
    registry: Mapping[str, Operation] = REGISTRY
) -> FastMCP:
    """
    Build the MCP server with every registry operation as a tool.

    Args:
        dispatcher: Shared dispatcher the tools delegate to
        name: Server name reported during MCP initialization
        registry: Operations to expose

    Returns:
        Configured FastMCP instance
    """
    mcp = FastMCP(name=name)
    for operation in registry.values():
        mcp.add_tool(OperationTool.from_operation(operation, dispatcher))
    logger.info(f"Registered {len(registry)} MCP tools")
    return mcp
