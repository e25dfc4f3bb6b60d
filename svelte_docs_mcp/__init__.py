"""
Svelte Docs MCP: Svelte 5 documentation search over the Model Context Protocol.

Exposes documentation search tools to MCP clients and answers them from an
OpenAI vector store that is created and populated on first use.
"""

__version__ = "0.1.0"
