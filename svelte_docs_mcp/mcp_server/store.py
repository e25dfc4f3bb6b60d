"""Lazily initialized handle on the documentation vector store."""

import asyncio
import logging
from enum import Enum

from svelte_docs_mcp.mcp_server.client import OpenAIAPIError, OpenAIVectorStoreClient
from svelte_docs_mcp.mcp_server.errors import (
    ErrorKind,
    Operation,
    RetrievalError,
    translate_api_error,
)
from svelte_docs_mcp.models.config import ServerSettings
from svelte_docs_mcp.models.vector_stores import DocumentSource, SearchResult

logger = logging.getLogger(__name__)


class InitState(str, Enum):
    """Lifecycle of the vector store handle."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class DocsVectorStore:
    """The process's view of the remote documentation vector store.

    Built once at startup and shared by every tool handler. ``ensure_ready``
    finds the store by name, or creates and populates it, exactly once per
    process. Other processes are not coordinated with: two servers starting
    against an empty account at the same moment can each create a store.
    """

    def __init__(self, client: OpenAIVectorStoreClient, settings: ServerSettings):
        self.client = client
        self.settings = settings
        self.state = InitState.UNINITIALIZED
        self.vector_store_id: str | None = None
        self._lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self.state == InitState.READY

    async def ensure_ready(self) -> str:
        """Return the vector store id, initializing on first use.

        Raises:
            RetrievalError: If any initialization step fails; the state is
                left ``UNINITIALIZED`` so the next call starts over.
        """
        if self.is_ready:
            return self.vector_store_id

        async with self._lock:
            # Another task may have finished while we waited
            if self.is_ready:
                return self.vector_store_id

            self.state = InitState.INITIALIZING
            try:
                vector_store_id = await self._initialize()
            except RetrievalError as e:
                self.state = InitState.UNINITIALIZED
                logger.error(f"Failed to initialize OpenAI vector store: {e.message}")
                raise
            except Exception as e:
                self.state = InitState.UNINITIALIZED
                logger.error(
                    f"Failed to initialize OpenAI vector store: {e}", exc_info=True
                )
                raise RetrievalError(
                    ErrorKind.INTERNAL_ERROR,
                    f"Failed to initialize OpenAI vector store: {e}",
                )

            self.vector_store_id = vector_store_id
            self.state = InitState.READY
            return vector_store_id

    async def _initialize(self) -> str:
        await self._call(Operation.VALIDATE_KEY, self.client.list_models())
        await self._call(Operation.ACCESS_PROBE, self.client.list_vector_stores())

        name = self.settings.vector_store_name
        stores = await self._call(Operation.INITIALIZE, self.client.list_vector_stores())
        existing = next((store for store in stores if store.name == name), None)
        if existing:
            logger.info(
                "Found existing vector store",
                extra={"extra_data": {"name": name, "id": existing.id}},
            )
            return existing.id

        logger.info(f"Creating new vector store: {name}")
        created = await self._call(
            Operation.INITIALIZE, self.client.create_vector_store(name)
        )
        try:
            await self._populate(created.id)
        except Exception:
            # An empty store would be adopted as-is by the next lookup
            await self._discard(created.id)
            raise
        return created.id

    async def _discard(self, vector_store_id: str) -> None:
        try:
            await self.client.delete_vector_store(vector_store_id)
            logger.info(f"Deleted incomplete vector store {vector_store_id}")
        except OpenAIAPIError as e:
            logger.warning(
                f"Could not delete incomplete vector store {vector_store_id}: "
                f"{e.message}"
            )

    async def _populate(self, vector_store_id: str) -> None:
        """Download the documentation and ingest it into the new store."""
        logger.info(f"Downloading documentation from {self.settings.docs_url}")
        content = await self._call(
            Operation.DOWNLOAD, self.client.fetch_document(self.settings.docs_url)
        )

        logger.info(f"Uploading documentation to vector store {vector_store_id}")
        await self._call(
            Operation.UPLOAD,
            self.client.upload_document(
                vector_store_id,
                self.settings.docs_filename,
                content,
                poll_interval=self.settings.ingestion_poll_interval,
                timeout=self.settings.ingestion_timeout,
            ),
        )
        logger.info("Documentation successfully added to vector store")

    @staticmethod
    async def _call(operation: Operation, request):
        try:
            return await request
        except OpenAIAPIError as e:
            logger.warning(
                f"OpenAI request failed during {operation.value}: {e.message}",
                extra={"extra_data": {"status": e.status_code}},
            )
            raise translate_api_error(e, operation)

    async def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """Search the ready store.

        Raises:
            RetrievalError: If the store is not ready or the request fails
        """
        vector_store_id = self._require_ready()
        return await self._call(
            Operation.SEARCH, self.client.search(vector_store_id, query, limit)
        )

    async def list_sources(self) -> list[DocumentSource]:
        """List the documents in the ready store."""
        vector_store_id = self._require_ready()
        return await self._call(
            Operation.LIST_FILES, self.client.list_documents(vector_store_id)
        )

    def _require_ready(self) -> str:
        if not self.is_ready:
            raise RetrievalError(ErrorKind.INTERNAL_ERROR, "Vector store not initialized")
        return self.vector_store_id
