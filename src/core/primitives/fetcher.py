"""
Fetcher primitive — downloads the body of a URL.

This is an atomic primitive that does ONE thing:
GET a URL and return its body as text. Two thin helpers sit on top:
fetch_json() decodes the body as JSON, fetch_capture() pulls capture
group 1 out of a single regex match.

Any status other than exactly 200 is a failure. Nothing is retried.
"""

import codecs
import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from src.core.config.loader import get_fetcher_config
from src.core.primitives.engines import RequestEngine, builtin_engine
from src.core.primitives.exceptions import (
    ConfigurationError,
    DecodeError,
    HttpStatusError,
    NoMatchError,
    TransportError,
)

logger = logging.getLogger(__name__)

CAPTURE_GROUP = 1

# Accepted option keys, including the camelCase spelling of older callers.
_OPTION_KEYS = {
    "response_encoding": "response_encoding",
    "responseEncoding": "response_encoding",
    "request_engine": "request_engine",
    "requestEngine": "request_engine",
}


@dataclass(frozen=True)
class FetchOptions:
    """Per-call options for fetch_body() and friends."""

    response_encoding: str = "utf8"
    request_engine: RequestEngine | None = None

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.response_encoding)
        except LookupError as e:
            raise ConfigurationError(
                f"Unknown response encoding: {self.response_encoding}"
            ) from e

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FetchOptions":
        """
        Build options from a plain dict.

        Raises:
            ConfigurationError: The mapping holds a key that is not an option.
        """
        unknown = sorted(key for key in mapping if key not in _OPTION_KEYS)
        if unknown:
            raise ConfigurationError(f"Unrecognized fetch options: {', '.join(unknown)}")

        values = {_OPTION_KEYS[key]: value for key, value in mapping.items()}
        if not values.get("response_encoding"):
            values.pop("response_encoding", None)
        return cls(**values)


def load_fetch_options() -> FetchOptions:
    """Default options from FETCHER_RESPONSE_ENCODING or the config files."""
    fetcher_config = get_fetcher_config()

    return FetchOptions(
        response_encoding=os.environ.get(
            "FETCHER_RESPONSE_ENCODING",
            fetcher_config.get("response_encoding", "utf8"),
        )
        or "utf8"
    )


def _coerce_options(options: FetchOptions | Mapping[str, Any] | None) -> FetchOptions:
    if options is None:
        return FetchOptions()
    if isinstance(options, FetchOptions):
        return options
    return FetchOptions.from_mapping(options)


async def fetch_body(
    url: str,
    options: FetchOptions | Mapping[str, Any] | None = None,
) -> str:
    """
    GET a URL and return the body decoded as text.

    Args:
        url: http:// or https:// URL, or anything the supplied engine accepts.
        options: FetchOptions or an equivalent dict.

    Returns:
        The full response body.

    Raises:
        UnrecognizedProtocolError: No engine given and the scheme is not http(s).
        TransportError: The connection failed.
        HttpStatusError: The server answered with a status other than 200.
    """
    options = _coerce_options(options)
    engine = options.request_engine or builtin_engine(url)

    try:
        async with engine.open(url) as response:
            if response.status_code != 200:
                error = HttpStatusError(url, response.status_code, response.reason_phrase)
                logger.error(str(error))
                # Leaving the context discards the unread body.
                raise error

            decoder = codecs.getincrementaldecoder(options.response_encoding)(
                errors="replace"
            )
            chunks = [decoder.decode(chunk) async for chunk in response.aiter_bytes()]
            chunks.append(decoder.decode(b"", final=True))
    except (httpx.RequestError, OSError) as e:
        logger.error(f"Got error fetching {url}: {e!r}")
        raise TransportError(url, str(e) or type(e).__name__) from e

    return "".join(chunks)


async def fetch_json(
    url: str,
    options: FetchOptions | Mapping[str, Any] | None = None,
) -> Any:
    """
    GET a URL and decode the body as JSON.

    Fetch failures propagate unchanged.

    Raises:
        DecodeError: The body is not valid JSON.
    """
    body = await fetch_body(url, options)

    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(f"fetch_json() : JSON decode error for {url}: {e}")
        raise DecodeError(url, str(e)) from e


def _compile(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e


async def fetch_capture(
    url: str,
    pattern: str | re.Pattern[str],
    options: FetchOptions | Mapping[str, Any] | None = None,
) -> str:
    """
    GET a URL and return capture group 1 of the first match of pattern.

    Only the first match and only group 1 are considered. The captured
    text is returned exactly as matched.

    Raises:
        ConfigurationError: pattern is a string that does not compile.
        NoMatchError: No match, or group 1 is missing or did not participate.
    """
    regex = _compile(pattern)
    body = await fetch_body(url, options)

    match = regex.search(body)
    if match is None or regex.groups < CAPTURE_GROUP or match.group(CAPTURE_GROUP) is None:
        error = NoMatchError(url, regex.pattern)
        logger.error(str(error))
        raise error

    return match.group(CAPTURE_GROUP)


class Fetcher:
    """
    Fetches URL bodies with a fixed set of default options.

    Usage:
        fetcher = Fetcher(FetchOptions(response_encoding="latin-1"))
        body = await fetcher.fetch_body("https://example.com")
        version = await fetcher.fetch_capture(url, r"Download v?(\\S+)\\s+Current")
    """

    def __init__(self, options: FetchOptions | None = None):
        self.options = options or FetchOptions()

    async def fetch_body(self, url: str, options: FetchOptions | None = None) -> str:
        """Fetch body text from URL."""
        return await fetch_body(url, options or self.options)

    async def fetch_json(self, url: str, options: FetchOptions | None = None) -> Any:
        """Fetch and decode JSON from URL."""
        return await fetch_json(url, options or self.options)

    async def fetch_capture(
        self,
        url: str,
        pattern: str | re.Pattern[str],
        options: FetchOptions | None = None,
    ) -> str:
        """Fetch URL and return capture group 1 of pattern."""
        return await fetch_capture(url, pattern, options or self.options)
