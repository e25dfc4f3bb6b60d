"""Command-line interface for Svelte Docs MCP."""
