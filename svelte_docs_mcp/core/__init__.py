"""Shared infrastructure for Svelte Docs MCP."""
