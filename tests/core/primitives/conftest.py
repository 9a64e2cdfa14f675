"""
Test fixtures for fetcher tests.

Provides a stub request engine and a local HTTP server serving fixed routes,
so no test depends on third-party endpoints.
"""

import json
import threading
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from src.core.config.loader import get_config

NODE_PAGE = (
    "<html><body><a class='home-downloadbutton'>"
    "Download v9.4.0 Current</a></body></html>"
)


@pytest.fixture(autouse=True)
def _clear_config_cache() -> Iterator[None]:
    """Clear lru_cache before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


class StubResponse:
    """Response with a fixed status and body chunks."""

    def __init__(self, status_code: int = 200, chunks: list[bytes] | None = None, reason_phrase: str = "OK"):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.chunks = chunks if chunks is not None else []
        self.chunks_read = 0

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            self.chunks_read += 1
            yield chunk


class StubEngine:
    """Request engine that records URLs and replays a canned response."""

    def __init__(self, response: StubResponse | None = None, error: Exception | None = None):
        self.response = response or StubResponse()
        self.error = error
        self.opened: list[str] = []
        self.closed = 0

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[StubResponse]:
        self.opened.append(url)
        if self.error is not None:
            raise self.error
        try:
            yield self.response
        finally:
            self.closed += 1


ROUTES: dict[str, tuple[int, str, bytes]] = {
    "/static": (200, "text/plain; charset=utf-8", "static body éè".encode()),
    "/node": (200, "text/html; charset=utf-8", NODE_PAGE.encode()),
    "/uuid": (200, "application/json", json.dumps({"uuid": "abc"}).encode()),
    "/not-json": (200, "text/plain", b"not json"),
    "/status/404": (404, "text/plain", b"missing"),
    "/status/500": (500, "text/plain", b"broken"),
}


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        if self.path.startswith("/echo/"):
            status, content_type, body = 200, "text/plain", self.path.encode()
        elif self.path == "/redirect":
            self.send_response(302)
            self.send_header("Location", "/static")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        else:
            status, content_type, body = ROUTES.get(
                self.path, (404, "text/plain", b"no such route")
            )

        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture(scope="module")
def local_server() -> Iterator[str]:
    """Run a local HTTP server for the module; yields its base URL."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
