"""Centralized model definitions for Svelte Docs MCP.

This package contains the Pydantic models organized by concern:
- vector_stores: OpenAI vector store API response models
- config: Server settings
"""

from svelte_docs_mcp.models.config import *
from svelte_docs_mcp.models.vector_stores import *

__all__ = [
    # Provider models
    "ContentPart",
    "DocumentSource",
    "FileObject",
    "IngestionError",
    "IngestionStatus",
    "ModelList",
    "SearchResponse",
    "SearchResult",
    "VectorStore",
    "VectorStoreFile",
    "VectorStoreFileList",
    "VectorStoreList",
    # Settings
    "DEFAULT_DOCS_URL",
    "ServerSettings",
]
