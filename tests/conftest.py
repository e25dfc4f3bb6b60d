"""Shared fixtures: settings isolated from the environment and a fake OpenAI API."""

import json
import re

import httpx
import pytest

from svelte_docs_mcp.mcp_server.client import OpenAIVectorStoreClient
from svelte_docs_mcp.models.config import ServerSettings

ENV_VARS = ["OPENAI_API_KEY", "CUSTOM_DOCS_URL"]


class FakeOpenAI:
    """In-memory stand-in for the OpenAI endpoints and the docs host."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.vector_stores: list[dict] = []
        self.files: dict[str, dict] = {}
        self.store_files: dict[str, list[dict]] = {}
        self.search_results: list[dict] = []
        self.ingestion_statuses = ["completed"]
        self.docs = b"# Svelte 5\n\nRunes are symbols that control the compiler."
        # (method, path) -> (status, message)
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}
        self.transport = httpx.MockTransport(self.handler)

    def fail(self, method: str, path: str, status: int, message: str = "") -> None:
        self.failures[(method, path)] = (status, message)

    def add_vector_store(self, name: str, store_id: str | None = None) -> dict:
        store = {"id": store_id or f"vs_{len(self.vector_stores) + 1}", "name": name}
        self.vector_stores.append(store)
        self.store_files[store["id"]] = []
        return store

    def add_file(self, vector_store_id: str, filename: str) -> dict:
        file_id = f"file_{len(self.files) + 1}"
        self.files[file_id] = {"id": file_id, "filename": filename}
        self.store_files.setdefault(vector_store_id, []).append(
            {"id": file_id, "status": "completed", "vector_store_id": vector_store_id}
        )
        return self.files[file_id]

    @property
    def provider_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.openai.com"]

    def calls(self, method: str, path: str) -> int:
        return sum(
            1
            for r in self.provider_requests
            if r.method == method and r.url.path == f"/v1{path}"
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host != "api.openai.com":
            key = (request.method, str(request.url))
            if key in self.failures:
                status, message = self.failures[key]
                return httpx.Response(status, text=message)
            return httpx.Response(200, content=self.docs)

        path = request.url.path.removeprefix("/v1")
        if (request.method, path) in self.failures:
            status, message = self.failures[(request.method, path)]
            body = {"error": {"message": message, "type": "invalid_request_error"}}
            return httpx.Response(status, json=body if message else {})

        return self._route(request, path)

    def _route(self, request: httpx.Request, path: str) -> httpx.Response:
        method = request.method
        parts = path.strip("/").split("/")

        if method == "GET" and path == "/models":
            return httpx.Response(200, json={"object": "list", "data": [{"id": "gpt-4o"}]})

        if parts[0] == "vector_stores" and len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=_page(self.vector_stores))
            name = json.loads(request.content)["name"]
            return httpx.Response(200, json=self.add_vector_store(name))

        if parts[0] == "files":
            if method == "POST":
                match = re.search(rb'filename="([^"]+)"', request.content)
                file_id = f"file_{len(self.files) + 1}"
                self.files[file_id] = {
                    "id": file_id,
                    "filename": match.group(1).decode(),
                    "purpose": "assistants",
                }
                return httpx.Response(200, json=self.files[file_id])
            return httpx.Response(200, json=self.files[parts[1]])

        store_id = parts[1]
        if method == "DELETE" and len(parts) == 2:
            self.vector_stores = [s for s in self.vector_stores if s["id"] != store_id]
            self.store_files.pop(store_id, None)
            return httpx.Response(
                200,
                json={"id": store_id, "object": "vector_store.deleted", "deleted": True},
            )

        if parts[2] == "search":
            limit = json.loads(request.content)["max_num_results"]
            return httpx.Response(
                200,
                json={
                    "object": "vector_store.search_results.page",
                    "data": self.search_results[:limit],
                    "has_more": False,
                },
            )

        if parts[2] == "files" and len(parts) == 3:
            if method == "GET":
                return httpx.Response(200, json=_page(self.store_files[store_id]))
            file_id = json.loads(request.content)["file_id"]
            entry = {
                "id": file_id,
                "status": self.ingestion_statuses[0],
                "vector_store_id": store_id,
            }
            self.store_files.setdefault(store_id, []).append(entry)
            return httpx.Response(200, json=entry)

        # GET /vector_stores/{id}/files/{file_id}: walk through ingestion_statuses
        if len(self.ingestion_statuses) > 1:
            self.ingestion_statuses.pop(0)
        status = self.ingestion_statuses[0]
        entry = {"id": parts[3], "status": status, "vector_store_id": store_id}
        if status in ("failed", "cancelled"):
            entry["last_error"] = {"code": "server_error", "message": "could not parse"}
        return httpx.Response(200, json=entry)


def _page(items: list[dict]) -> dict:
    return {
        "object": "list",
        "data": items,
        "first_id": items[0]["id"] if items else None,
        "last_id": items[-1]["id"] if items else None,
        "has_more": False,
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep real credentials and .env files out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(
        OPENAI_API_KEY="sk-test",
        ingestion_poll_interval=0,
        ingestion_timeout=5,
    )


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def client(settings, fake_openai) -> OpenAIVectorStoreClient:
    return OpenAIVectorStoreClient(settings, transport=fake_openai.transport)
