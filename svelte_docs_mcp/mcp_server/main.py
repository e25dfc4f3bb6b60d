"""Main MCP server for Svelte documentation search."""

import asyncio
import logging

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from svelte_docs_mcp import __version__
from svelte_docs_mcp.core.logging import setup_logging
from svelte_docs_mcp.mcp_server.client import OpenAIVectorStoreClient
from svelte_docs_mcp.mcp_server.errors import RetrievalError
from svelte_docs_mcp.mcp_server.store import DocsVectorStore
from svelte_docs_mcp.mcp_server.tools import SvelteDocsTools
from svelte_docs_mcp.models.config import ServerSettings

logger = logging.getLogger(__name__)


def build_tools(
    settings: ServerSettings, client: OpenAIVectorStoreClient | None = None
) -> SvelteDocsTools:
    """Wire the client, the shared store state and the tool handlers."""
    client = client or OpenAIVectorStoreClient(settings)
    store = DocsVectorStore(client, settings)
    return SvelteDocsTools(
        store,
        enable_list_sources=settings.enable_list_sources,
        docs_title=settings.docs_title,
    )


def create_server(tools: SvelteDocsTools, name: str = "svelte5-docs") -> Server:
    """Create the MCP server and register the tool handlers."""
    server = Server(name, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        """List available MCP tools."""
        return tools.list_tools()

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        """Handle MCP tool calls."""
        result = await tools.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(result)

    # Registered directly rather than through @server.call_tool(), which turns
    # every exception into a tool result; McpError must reach the client as a
    # JSON-RPC error.
    server.request_handlers[types.CallToolRequest] = handle_call_tool

    return server


async def main(settings: ServerSettings) -> None:
    """Main entry point for the MCP server."""
    logger.info(
        "Starting MCP server",
        extra={
            "extra_data": {
                "vector_store": settings.vector_store_name,
                "docs_url": settings.docs_url,
            }
        },
    )

    tools = build_tools(settings)
    server = create_server(tools, settings.server_name)

    if settings.eager_init:
        try:
            await tools.store.ensure_ready()
            logger.info("OpenAI Retrieval initialized successfully")
        except RetrievalError as e:
            logger.warning(
                f"Initialization failed ({e.message}) - will retry on the first tool call"
            )

    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        logger.info("Svelte docs MCP server running on stdio")
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=settings.server_name,
                server_version=__version__,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def run_server(settings: ServerSettings) -> None:
    """Configure logging and run the server until stdin closes or Ctrl-C."""
    setup_logging(settings.log_level, settings.log_file)

    if not settings.api_key_looks_valid:
        logger.warning(
            'The provided OpenAI API key does not start with "sk-". '
            "This may not be a valid OpenAI API key."
        )

    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
