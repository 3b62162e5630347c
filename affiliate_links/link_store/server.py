"""MCP server exposing the link store tools over stdio.

Tool calls run synchronously inside the handler, so requests are served
one at a time and a store operation is never interleaved with another.
"""

from __future__ import annotations

import logging

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from ..common.config import ServerSettings
from .store import LinkStore
from .tools import TOOLS, dispatch

logger = logging.getLogger(__name__)


def build_server(store: LinkStore, server_settings: ServerSettings | None = None) -> Server:
    """Create an MCP server whose tools are backed by store."""
    server_settings = server_settings or ServerSettings()
    server = Server(server_settings.name, version=server_settings.version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.input_schema,
            )
            for spec in TOOLS.values()
        ]

    # Arguments are validated by the pydantic models in dispatch so that bad
    # input comes back as the JSON error payload.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
        logger.debug("Tool call: %s with args keys: %s", name, list((arguments or {}).keys()))
        # ToolError propagates; the server turns it into an isError result
        # whose text is the JSON error payload.
        text = dispatch(store, name, arguments)
        return [types.TextContent(type="text", text=text)]

    return server


async def run_stdio(store: LinkStore, server_settings: ServerSettings | None = None) -> None:
    """Serve store over stdin/stdout until the client disconnects."""
    server = build_server(store, server_settings)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Affiliate links MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
