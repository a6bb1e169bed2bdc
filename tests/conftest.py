from collections.abc import Callable, Generator
from urllib.parse import parse_qsl, quote

import httpx
import pytest

from replitdb.async_client import AsyncClient
from replitdb.client import Client


BASE_PATH = "/v0/token-abc"
BASE_URL = f"https://kv.example.test{BASE_PATH}"


class FakeDatabase:
    """In-memory stand-in for the database service, served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.forced: dict[str, httpx.Response] = {}
        self.error: Exception | None = None
        super().__init__()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if request.method in self.forced:
            return self.forced[request.method]

        path = request.url.path
        if path == BASE_PATH:
            return self._list(request)

        key = path.removeprefix(f"{BASE_PATH}/")
        if request.method == "GET":
            if key not in self.store:
                return httpx.Response(404, text="not found")
            return httpx.Response(200, text=self.store[key])
        if request.method == "POST":
            for form_key, form_value in parse_qsl(request.content.decode(), keep_blank_values=True):
                self.store[form_key] = form_value
            return httpx.Response(200)
        if request.method == "DELETE":
            _ = self.store.pop(key, None)
            return httpx.Response(204)
        return httpx.Response(405)

    def _list(self, request: httpx.Request) -> httpx.Response:
        prefix = request.url.params.get("prefix", "")
        keys = sorted(key for key in self.store if key.startswith(prefix))
        if request.url.params.get("encode") == "true":
            keys = [quote(key, safe="") for key in keys]
        return httpx.Response(200, text="\n".join(keys))


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(fake_db: FakeDatabase) -> Generator[Client]:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_db.handler))
    try:
        yield Client(BASE_URL, http_client=http_client)
    finally:
        http_client.close()


@pytest.fixture
def make_client() -> Generator[Callable[[], tuple[FakeDatabase, Client]]]:
    http_clients: list[httpx.Client] = []

    def factory() -> tuple[FakeDatabase, Client]:
        database = FakeDatabase()
        http_client = httpx.Client(transport=httpx.MockTransport(database.handler))
        http_clients.append(http_client)
        return database, Client(BASE_URL, http_client=http_client)

    try:
        yield factory
    finally:
        for http_client in http_clients:
            http_client.close()


@pytest.fixture
def async_client(fake_db: FakeDatabase) -> AsyncClient:
    return AsyncClient(BASE_URL, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_db.handler)))
