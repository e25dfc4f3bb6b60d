"""HTTP client for the OpenAI vector store API."""

import asyncio
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from svelte_docs_mcp.models.config import ServerSettings
from svelte_docs_mcp.models.vector_stores import (
    DocumentSource,
    FileObject,
    IngestionStatus,
    ModelList,
    SearchResponse,
    SearchResult,
    VectorStore,
    VectorStoreFile,
    VectorStoreFileList,
    VectorStoreList,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Largest page size the list endpoints accept
PAGE_SIZE = 100


class OpenAIAPIError(Exception):
    """Exception raised when an OpenAI API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class IngestionFailedError(OpenAIAPIError):
    """The provider finished processing an uploaded file without indexing it."""

    def __init__(self, vector_store_file: VectorStoreFile):
        self.vector_store_file = vector_store_file
        reason = (
            vector_store_file.last_error.message
            if vector_store_file.last_error
            else "no reason given"
        )
        super().__init__(f"ingestion {vector_store_file.status.value}: {reason}")


class IngestionTimeoutError(OpenAIAPIError):
    """Polling gave up before the provider finished processing a file."""

    def __init__(self, file_id: str, timeout: float):
        self.file_id = file_id
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:.0f}s waiting for documentation "
            "ingestion to complete."
        )


class OpenAIVectorStoreClient:
    """Thin async client over the vector store endpoints.

    Every call is a single request/response; nothing is retried here.
    """

    def __init__(
        self,
        settings: ServerSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client with settings.

        ``transport`` is handed to every ``httpx.AsyncClient`` the client
        opens, which lets tests plug in ``httpx.MockTransport``.
        """
        self.settings = settings
        self.base_url = settings.api_base_url.rstrip("/")
        self._transport = transport

    def _headers(self, json_body: bool = True) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "OpenAI-Beta": "assistants=v2",
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
        files: dict | None = None,
        data: dict | None = None,
    ) -> dict:
        """Issue one provider request and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    files=files,
                    data=data,
                    headers=self._headers(json_body=files is None),
                )
                return self._handle_response(response)

        except OpenAIAPIError:
            raise
        except httpx.TimeoutException:
            raise OpenAIAPIError(f"Request timeout: {url}")
        except httpx.ConnectError:
            raise OpenAIAPIError(f"Cannot connect to OpenAI API at {self.base_url}")
        except httpx.HTTPError as e:
            raise OpenAIAPIError(f"Request failed: {str(e)}")

    def _handle_response(self, response: httpx.Response) -> dict:
        """Handle HTTP response and extract JSON data."""
        if response.status_code >= 400:
            # OpenAI errors look like {"error": {"message": ..., "type": ...}}
            error_details = {}
            try:
                error_data = response.json()
                error_details = error_data if isinstance(error_data, dict) else {}
            except ValueError:
                logger.debug(f"Error response from {response.url} is not JSON")

            error = error_details.get("error")
            error_message = (
                error.get("message") if isinstance(error, dict) else None
            ) or f"HTTP {response.status_code}"
            raise OpenAIAPIError(
                error_message,
                status_code=response.status_code,
                details=error_details,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise OpenAIAPIError(f"Failed to parse response: {str(e)}")
        if not isinstance(body, dict):
            raise OpenAIAPIError(
                f"Unexpected response shape from {response.url}: expected an object"
            )
        return body

    @staticmethod
    def _parse(model: type[ModelT], raw_response: dict) -> ModelT:
        """Validate the top-level response shape."""
        try:
            return model.model_validate(raw_response)
        except ValidationError as e:
            raise OpenAIAPIError(
                f"Unexpected response shape for {model.__name__}: "
                f"{e.error_count()} validation error(s)"
            )

    # Account

    async def list_models(self) -> ModelList:
        """List models visible to the credential."""
        return self._parse(ModelList, await self._request("GET", "/models"))

    # Vector stores

    async def list_vector_stores(self) -> list[VectorStore]:
        """List every vector store on the account, following pagination."""
        stores: list[VectorStore] = []
        params: dict = {"limit": PAGE_SIZE}

        while True:
            page = self._parse(
                VectorStoreList,
                await self._request("GET", "/vector_stores", params=params),
            )
            stores.extend(page.data)
            if not page.has_more or not page.last_id:
                return stores
            params = {"limit": PAGE_SIZE, "after": page.last_id}

    async def create_vector_store(self, name: str) -> VectorStore:
        """Create an empty vector store named ``name``."""
        result = await self._request("POST", "/vector_stores", json={"name": name})
        return self._parse(VectorStore, result)

    async def delete_vector_store(self, vector_store_id: str) -> None:
        """Delete a vector store; its uploaded files are left in place."""
        await self._request("DELETE", f"/vector_stores/{vector_store_id}")

    # Files

    async def upload_file(self, filename: str, content: bytes) -> FileObject:
        """Upload raw bytes as a file usable by vector stores."""
        result = await self._request(
            "POST",
            "/files",
            files={"file": (filename, content, "text/plain")},
            data={"purpose": "assistants"},
        )
        return self._parse(FileObject, result)

    async def retrieve_file(self, file_id: str) -> FileObject:
        """Get metadata (including filename) for an uploaded file."""
        return self._parse(FileObject, await self._request("GET", f"/files/{file_id}"))

    async def attach_file(self, vector_store_id: str, file_id: str) -> VectorStoreFile:
        """Add an uploaded file to a vector store, starting ingestion."""
        result = await self._request(
            "POST",
            f"/vector_stores/{vector_store_id}/files",
            json={"file_id": file_id},
        )
        return self._parse(VectorStoreFile, result)

    async def get_vector_store_file(
        self, vector_store_id: str, file_id: str
    ) -> VectorStoreFile:
        """Get the ingestion status of a file in a vector store."""
        result = await self._request(
            "GET", f"/vector_stores/{vector_store_id}/files/{file_id}"
        )
        return self._parse(VectorStoreFile, result)

    async def upload_document(
        self,
        vector_store_id: str,
        filename: str,
        content: bytes,
        poll_interval: float = 1.0,
        timeout: float = 300.0,
    ) -> VectorStoreFile:
        """Upload a document into a vector store and wait for ingestion.

        Args:
            vector_store_id: Target vector store
            filename: Name the file is stored under
            content: Raw document bytes, uploaded verbatim
            poll_interval: Seconds between status checks
            timeout: Give up after this many seconds of polling

        Returns:
            The vector store file once its status is ``completed``

        Raises:
            IngestionFailedError: If the provider reports failed/cancelled
            IngestionTimeoutError: If ingestion is still running at ``timeout``
            OpenAIAPIError: If any request fails
        """
        uploaded = await self.upload_file(filename, content)
        logger.info(
            f"Uploaded {filename}",
            extra={"extra_data": {"file_id": uploaded.id, "bytes": len(content)}},
        )

        vector_store_file = await self.attach_file(vector_store_id, uploaded.id)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while vector_store_file.status == IngestionStatus.IN_PROGRESS:
            if loop.time() >= deadline:
                raise IngestionTimeoutError(uploaded.id, timeout)
            await asyncio.sleep(poll_interval)
            vector_store_file = await self.get_vector_store_file(
                vector_store_id, uploaded.id
            )

        if vector_store_file.status != IngestionStatus.COMPLETED:
            raise IngestionFailedError(vector_store_file)

        return vector_store_file

    # Search and listing

    async def search(
        self, vector_store_id: str, query: str, limit: int = 5
    ) -> list[SearchResult]:
        """Run a semantic query against a vector store.

        Results keep the provider's relevance order.
        """
        result = await self._request(
            "POST",
            f"/vector_stores/{vector_store_id}/search",
            json={"query": query, "max_num_results": limit, "rewrite_query": True},
        )
        return self._parse(SearchResponse, result).data

    async def list_vector_store_files(
        self, vector_store_id: str
    ) -> list[VectorStoreFile]:
        """List every file attached to a vector store."""
        files: list[VectorStoreFile] = []
        params: dict = {"limit": PAGE_SIZE}

        while True:
            page = self._parse(
                VectorStoreFileList,
                await self._request(
                    "GET", f"/vector_stores/{vector_store_id}/files", params=params
                ),
            )
            files.extend(page.data)
            if not page.has_more or not page.last_id:
                return files
            params = {"limit": PAGE_SIZE, "after": page.last_id}

    async def list_documents(self, vector_store_id: str) -> list[DocumentSource]:
        """List the documents of a vector store with their filenames.

        A document whose file metadata cannot be read is listed by id only.
        """
        documents = []
        for vector_store_file in await self.list_vector_store_files(vector_store_id):
            try:
                file_object = await self.retrieve_file(vector_store_file.id)
                filename = file_object.filename
            except OpenAIAPIError as e:
                logger.warning(
                    f"Could not resolve filename for {vector_store_file.id}: {e.message}",
                    extra={"extra_data": {"status": e.status_code}},
                )
                filename = None
            documents.append(DocumentSource(id=vector_store_file.id, filename=filename))
        return documents

    # Documentation source

    async def fetch_document(self, url: str) -> bytes:
        """Download a documentation file.

        The provider credential is not sent; this is a third-party host.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.download_timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content

        except httpx.HTTPStatusError as e:
            raise OpenAIAPIError(
                f"HTTP {e.response.status_code} from {url}",
                status_code=e.response.status_code,
            )
        except httpx.TimeoutException:
            raise OpenAIAPIError(f"Request timeout: {url}")
        except httpx.HTTPError as e:
            raise OpenAIAPIError(f"Request failed: {str(e)}")
