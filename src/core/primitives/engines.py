"""
Request engines — the transport behind fetch_body().

An engine performs exactly one GET and hands back the response as an
async context manager. Leaving the context releases the connection and
discards whatever body data was not read.

Built-in engines cover http:// and https:// using httpx. Callers may pass
any object implementing RequestEngine instead (a stub in tests, or a client
for another protocol).
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from src.core.config.loader import get_fetcher_config
from src.core.primitives.exceptions import (
    ConfigurationError,
    TransportError,
    UnrecognizedProtocolError,
)

logger = logging.getLogger(__name__)

BUILTIN_SCHEMES = ("http", "https")


class EngineResponse(Protocol):
    """What fetch_body() reads from a response. httpx.Response fits."""

    status_code: int
    reason_phrase: str

    def aiter_bytes(self) -> AsyncIterator[bytes]: ...


class RequestEngine(Protocol):
    """Transport strategy: open one GET request to a URL."""

    def open(self, url: str) -> AbstractAsyncContextManager[EngineResponse]: ...


@dataclass
class EngineConfig:
    """Configuration for the built-in httpx engines."""

    timeout: float = 30.0
    user_agent: str = "get-http-response-body/0.1"
    extra_headers: dict[str, str] = field(default_factory=dict)


def load_engine_config() -> EngineConfig:
    """
    Load engine configuration from environment variables and config files.

    Environment variables take precedence over config files.

    Returns:
        Engine configuration.

    Raises:
        ConfigurationError: The timeout is not a number.
    """
    engine_config = get_fetcher_config().get("engine", {})

    timeout = os.environ.get("FETCHER_TIMEOUT", engine_config.get("timeout", 30.0))
    try:
        timeout = float(timeout)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid fetcher timeout: {timeout!r}") from e

    return EngineConfig(
        timeout=timeout,
        user_agent=os.environ.get(
            "FETCHER_USER_AGENT",
            engine_config.get("user_agent", EngineConfig.user_agent),
        ),
        extra_headers=dict(engine_config.get("extra_headers") or {}),
    )


class HttpxEngine:
    """
    Built-in engine for one URL scheme, backed by httpx.

    A fresh AsyncClient is created per request, so an engine instance
    holds no connection state and can be shared by concurrent calls.
    Redirects are never followed and proxy environment variables are ignored.

    Usage:
        engine = HttpxEngine("https")
        async with engine.open("https://example.com") as response:
            print(response.status_code)
    """

    def __init__(
        self,
        scheme: str,
        config: EngineConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the engine.

        Args:
            scheme: "http" or "https".
            config: Timeout and header settings.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
        """
        if scheme not in BUILTIN_SCHEMES:
            raise ValueError(f"Unsupported scheme for HttpxEngine: {scheme}")
        self.scheme = scheme
        self.config = config or EngineConfig()
        self.transport = transport

    def __repr__(self) -> str:
        return f"<HttpxEngine(scheme='{self.scheme}')>"

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[httpx.Response]:
        """Issue a GET to url and yield the streaming response."""
        if parse_url(url).scheme != self.scheme:
            raise UnrecognizedProtocolError(url)

        headers = {
            "User-Agent": self.config.user_agent,
            **self.config.extra_headers,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=False,
                trust_env=False,
                transport=self.transport,
            ) as client:
                async with client.stream("GET", url, headers=headers) as response:
                    yield response
        except httpx.UnsupportedProtocol as e:
            raise UnrecognizedProtocolError(url) from e
        except httpx.RequestError as e:
            logger.error(f"Got error fetching {url}: {e!r}")
            raise TransportError(url, str(e) or type(e).__name__) from e


def parse_url(url: str) -> httpx.URL:
    """
    Parse an http(s) URL that names a host.

    Raises:
        UnrecognizedProtocolError: Other scheme, malformed URL, or empty host.
    """
    if not url.startswith(tuple(f"{scheme}://" for scheme in BUILTIN_SCHEMES)):
        parsed = None
    else:
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL:
            parsed = None

    if parsed is None or parsed.scheme not in BUILTIN_SCHEMES or not parsed.host:
        error = UnrecognizedProtocolError(url)
        logger.error(str(error))
        raise error

    return parsed


def builtin_engine(url: str, config: EngineConfig | None = None) -> HttpxEngine:
    """
    Pick the built-in engine for a URL by its scheme.

    Raises:
        UnrecognizedProtocolError: URL is not a well-formed http:// or https:// URL.
        ConfigurationError: The engine settings are invalid.
    """
    return HttpxEngine(parse_url(url).scheme, config or load_engine_config())
