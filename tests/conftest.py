"""Shared fixtures: settings, an in-memory secret store and stubbed upstreams."""

import base64
import json
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

from core.secret_store import MemorySecretStore, SecretKey
from core.settings import Settings
from tools.catalog import build_catalog
from tools.dispatch import Dispatcher
from tools.registry import ToolRegistry

GEMINI_HOST = "gemini.test"
GITHUB_HOST = "github.test"
RAW_HOST = "raw.test"
NOTES_HOST = "notes.test"

IMAGE_BYTES = b"\x89PNG fake image bytes"
IMAGE_B64 = base64.b64encode(IMAGE_BYTES).decode()


class StubUpstreams:
    """In-process stand-ins for Gemini, the GitHub contents API and the note server.

    Every request is recorded in `requests`.  Uploaded files are kept in
    `files` and served back from their download URL, so an upload can be
    round-tripped.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.files: dict[str, str] = {}
        self.notes: dict[str, str] = {}
        self.gemini_status = 200
        self.gemini_body = json.dumps({
            "candidates": [{
                "content": {
                    "parts": [
                        {"text": "Here is your image"},
                        {"inlineData": {"mimeType": "image/png", "data": IMAGE_B64}},
                    ],
                    "role": "model",
                },
                "finishReason": "STOP",
            }],
            "modelVersion": "gemini-2.0-flash-exp-image-generation",
        }, indent=2)
        self.github_status = 201
        self.notes_status = 200

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host == GEMINI_HOST and request.method == "POST":
            return httpx.Response(self.gemini_status, text=self.gemini_body)

        if host == GITHUB_HOST and request.method == "PUT":
            if self.github_status >= 400:
                return httpx.Response(self.github_status, json={"message": "Bad credentials"})
            payload = json.loads(request.content)
            # /repos/<owner>/<name>/contents/<file>
            _, _, owner, name, _, filename = request.url.raw_path.decode().split("/", 5)
            path = f"{owner}/{name}/{payload['branch']}/{unquote(filename)}"
            self.files[path] = payload["content"]
            return httpx.Response(
                self.github_status,
                json={"content": {"name": unquote(filename), "download_url": f"https://{RAW_HOST}/{path}"}},
            )

        if host == RAW_HOST and request.method == "GET":
            path = request.url.path.lstrip("/")
            if path not in self.files:
                return httpx.Response(404)
            return httpx.Response(200, content=base64.b64decode(self.files[path]))

        if host == NOTES_HOST and request.method == "POST":
            if self.notes_status >= 400:
                return httpx.Response(self.notes_status, text="storage full")
            payload = json.loads(request.content)
            self.notes[payload["key"]] = payload["value"]
            return httpx.Response(self.notes_status, json={"ok": True})

        return httpx.Response(404, text="no stub for this route")

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def settings():
    return Settings(
        gemini_base_url=f"https://{GEMINI_HOST}/v1beta",
        github_api_url=f"https://{GITHUB_HOST}",
        tiny_server_url=f"https://{NOTES_HOST}",
        secret_store_path=":memory:",
    )


@pytest.fixture
def upstreams():
    return StubUpstreams()


@pytest_asyncio.fixture
async def http_client(upstreams):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstreams.handle)) as client:
        yield client


@pytest.fixture
def store():
    return MemorySecretStore()


@pytest.fixture
def configured_store():
    return MemorySecretStore({
        SecretKey.GEMINI_API_KEY: "gemini-key",
        SecretKey.GITHUB_REPO: "octo/images",
        SecretKey.GITHUB_TOKEN: "ghp_token",
    })


@pytest.fixture
def registry(configured_store, http_client, settings):
    registry = ToolRegistry()
    registry.register_all(build_catalog(configured_store, http_client, settings))
    registry.freeze()
    return registry


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)
