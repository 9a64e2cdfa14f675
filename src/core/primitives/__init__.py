"""
Primitives — atomic building blocks for scraping scripts.

Each primitive does ONE thing well.
Scripts compose primitives into small tools.
"""

from src.core.primitives.engines import EngineConfig, HttpxEngine, RequestEngine
from src.core.primitives.exceptions import (
    ConfigurationError,
    DecodeError,
    FetchError,
    HttpStatusError,
    NoMatchError,
    TransportError,
    UnrecognizedProtocolError,
)
from src.core.primitives.fetcher import (
    Fetcher,
    FetchOptions,
    fetch_body,
    fetch_capture,
    fetch_json,
)

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "EngineConfig",
    "FetchError",
    "FetchOptions",
    "Fetcher",
    "HttpStatusError",
    "HttpxEngine",
    "NoMatchError",
    "RequestEngine",
    "TransportError",
    "UnrecognizedProtocolError",
    "fetch_body",
    "fetch_capture",
    "fetch_json",
]
