"""MCP tools for Svelte documentation search."""

import logging
from typing import Any

import mcp.types as types
from mcp.shared.exceptions import McpError

from svelte_docs_mcp.mcp_server.errors import RetrievalError, error_text
from svelte_docs_mcp.mcp_server.store import DocsVectorStore
from svelte_docs_mcp.models.vector_stores import DocumentSource, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 5

SEARCH_TOOL = "search_svelte_docs"
LIST_SOURCES_TOOL = "list_docs_sources"


class SvelteDocsTools:
    """Tool descriptors and handlers backed by a ``DocsVectorStore``."""

    def __init__(
        self,
        store: DocsVectorStore,
        enable_list_sources: bool = True,
        docs_title: str = "Svelte 5",
    ):
        """Initialize tools with the shared vector store state."""
        self.store = store
        self.enable_list_sources = enable_list_sources
        self.docs_title = docs_title

    def list_tools(self) -> list[types.Tool]:
        """Describe the tools this server exposes."""
        tools = [
            types.Tool(
                name=SEARCH_TOOL,
                description=f"Search through {self.docs_title} documentation",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search query",
                        },
                        "limit": {
                            "type": "number",
                            "description": "Maximum number of results to return",
                            "default": DEFAULT_SEARCH_LIMIT,
                        },
                    },
                    "required": ["query"],
                },
            )
        ]
        if self.enable_list_sources:
            tools.append(
                types.Tool(
                    name=LIST_SOURCES_TOOL,
                    description=f"List all {self.docs_title} documentation sources",
                    inputSchema={"type": "object", "properties": {}},
                )
            )
        return tools

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> types.CallToolResult:
        """Route a tool call.

        Raises:
            McpError: For unknown tools, malformed arguments and
                initialization failures. Failures of the search/list request
                itself come back as an error-flagged result instead.
        """
        arguments = arguments or {}

        if name == SEARCH_TOOL:
            query = arguments.get("query")
            if not query or not isinstance(query, str):
                raise McpError(
                    types.ErrorData(code=types.INVALID_PARAMS, message="Query is required")
                )
            await self._ensure_ready()
            return await self.search_docs(query, arguments.get("limit"))

        if name == LIST_SOURCES_TOOL and self.enable_list_sources:
            await self._ensure_ready()
            return await self.list_sources()

        raise McpError(
            types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}")
        )

    async def _ensure_ready(self) -> None:
        try:
            await self.store.ensure_ready()
        except RetrievalError as e:
            raise e.to_mcp_error() from e

    async def search_docs(self, query: str, limit: Any = None) -> types.CallToolResult:
        """Search the documentation and format the hits.

        Args:
            query: Search query text
            limit: Maximum results; falsy values fall back to 5

        Returns:
            CallToolResult with one text block, error-flagged on failure
        """
        limit = limit or DEFAULT_SEARCH_LIMIT

        try:
            results = await self.store.search(query, limit)
        except Exception as e:
            logger.error(f"Search error: {e}", exc_info=not isinstance(e, RetrievalError))
            return _text_result(error_text("Search failed", e), is_error=True)

        if not results:
            return _text_result(f"No results found in {self.docs_title} documentation.")

        logger.info(
            f"Search returned {len(results)} results",
            extra={"extra_data": {"limit": limit}},
        )
        formatted = "\n---\n".join(
            format_search_result(result, index)
            for index, result in enumerate(results, start=1)
        )
        return _text_result(f'Search results for "{query}":\n\n{formatted}')

    async def list_sources(self) -> types.CallToolResult:
        """List the documents stored in the vector store."""
        try:
            sources = await self.store.list_sources()
        except Exception as e:
            logger.error(
                f"List sources error: {e}", exc_info=not isinstance(e, RetrievalError)
            )
            return _text_result(error_text("Failed to list sources", e), is_error=True)

        if not sources:
            return _text_result(f"No {self.docs_title} documentation sources found.")

        sources_list = "\n".join(format_source(source) for source in sources)
        return _text_result(f"{self.docs_title} Documentation Sources:\n\n{sources_list}")


def format_search_result(result: SearchResult, index: int) -> str:
    """Render one hit as ``Result <n> (Score: <score>):`` plus its text."""
    if result.content:
        content = "\n".join(part.text for part in result.content)
    elif result.text:
        content = result.text
    else:
        content = result.model_dump_json(exclude_none=True)

    score = f"{result.score:.2f}" if result.score else "N/A"
    return f"Result {index} (Score: {score}):\n{content}\n"


def format_source(source: DocumentSource) -> str:
    """Render one document as a list line, falling back to its id."""
    return f"- {source.filename or source.id} (ID: {source.id})"


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )
