"""MCP Server for Svelte documentation search.

This module provides a Model Context Protocol (MCP) server that answers
documentation queries from an OpenAI vector store, creating and populating
the store lazily on the first tool call.
"""
