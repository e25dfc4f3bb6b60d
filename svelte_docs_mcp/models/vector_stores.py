"""OpenAI vector store API models.

Only the fields this server reads are declared; anything else the provider
returns is ignored.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ModelList(BaseModel):
    """Response of ``GET /models`` (used only as a credential probe)."""

    object: str = "list"
    data: list[dict] = Field(default_factory=list)


class VectorStore(BaseModel):
    """A provider-managed vector store."""

    id: str
    name: str | None = None
    status: str | None = None
    created_at: int | None = None


class VectorStoreList(BaseModel):
    """One page of ``GET /vector_stores``."""

    data: list[VectorStore]
    first_id: str | None = None
    last_id: str | None = None
    has_more: bool = False


class FileObject(BaseModel):
    """An uploaded file (``/files``)."""

    id: str
    filename: str | None = None
    bytes: int | None = None
    purpose: str | None = None


class IngestionStatus(str, Enum):
    """Processing status of a file attached to a vector store."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class IngestionError(BaseModel):
    """Reason the provider gives for a failed ingestion."""

    code: str | None = None
    message: str = ""


class VectorStoreFile(BaseModel):
    """A file attached to a vector store."""

    id: str
    status: IngestionStatus = IngestionStatus.IN_PROGRESS
    vector_store_id: str | None = None
    last_error: IngestionError | None = None
    usage_bytes: int | None = None


class VectorStoreFileList(BaseModel):
    """One page of ``GET /vector_stores/{id}/files``."""

    data: list[VectorStoreFile]
    first_id: str | None = None
    last_id: str | None = None
    has_more: bool = False


class ContentPart(BaseModel):
    """A chunk of matched text inside a search result."""

    type: str = "text"
    text: str = ""


class SearchResult(BaseModel):
    """Individual search hit, in the order the provider ranked it."""

    file_id: str | None = None
    filename: str | None = None
    score: float | None = None
    attributes: dict | None = None
    content: list[ContentPart] = Field(default_factory=list)
    text: str | None = None


class SearchResponse(BaseModel):
    """Response of ``POST /vector_stores/{id}/search``."""

    search_query: str | list[str] | None = None
    data: list[SearchResult]
    has_more: bool = False
    next_page: str | None = None


class DocumentSource(BaseModel):
    """A document stored in the vector store, as listed to MCP clients."""

    id: str
    filename: str | None = None


__all__ = [
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
]
