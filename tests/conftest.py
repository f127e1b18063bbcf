"""Shared test fixtures."""

from __future__ import annotations

import socket
import ssl
from collections.abc import Awaitable, Callable

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from _tls import LocalCA, make_local_ca

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class FakeSecretStore:
    """In-memory secret store that records every lookup."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = values or {}
        self.calls: list[tuple[str, bool]] = []

    def get(self, name: str, decrypt: bool) -> str:
        self.calls.append((name, decrypt))
        return self.values[name]


@pytest.fixture
def secret_store() -> FakeSecretStore:
    return FakeSecretStore(
        {"artifactory-api-key": "store-key", "artifactory-host": "https://store.example"}
    )


@pytest.fixture(scope="session")
def local_ca(tmp_path_factory: pytest.TempPathFactory) -> LocalCA:
    """A CA and a server certificate for localhost and 127.0.0.1."""
    return make_local_ca(tmp_path_factory.mktemp("pki"))


@pytest.fixture
async def serve():
    """Starts local aiohttp apps; servers are closed after the test."""
    servers: list[TestServer] = []

    async def _serve(
        routes: dict[str, Handler], ssl_context: ssl.SSLContext | None = None
    ) -> str:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app, host="127.0.0.1")
        await server.start_server(ssl=ssl_context)
        servers.append(server)
        return f"{server.scheme}://{server.host}:{server.port}"

    yield _serve

    for server in servers:
        await server.close()


@pytest.fixture
def http_server(serve):
    """Plain HTTP servers from a {path: handler} mapping; returns the base URL."""

    async def _start(routes: dict[str, Handler]) -> str:
        return await serve(routes)

    return _start


@pytest.fixture
def https_server(serve, local_ca: LocalCA):
    """
    HTTPS servers presenting a certificate from `local_ca`. Clients must trust
    `local_ca.ca_path` explicitly.
    """

    async def _start(
        routes: dict[str, Handler], minimum_version: ssl.TLSVersion | None = None
    ) -> str:
        return await serve(routes, local_ca.server_context(minimum_version))

    return _start


@pytest.fixture
def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
