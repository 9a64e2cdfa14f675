"""
Fetch exceptions.

All fetch operations raise these exceptions for consistent error handling.
Exactly one of them ends a failed call.
"""


class FetchError(Exception):
    """Base exception for all fetch errors."""

    pass


class ConfigurationError(FetchError):
    """Invalid fetch options, encoding, or pattern."""

    pass


class UnrecognizedProtocolError(ConfigurationError):
    """URL scheme is neither http nor https and no engine was supplied."""

    def __init__(self, url: str):
        super().__init__(f"Unrecognized protocol in URL {url}")
        self.url = url


class TransportError(FetchError):
    """Connection-level failure (DNS, TCP, TLS, timeout, broken stream)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Request to {url} failed: {message}")
        self.url = url


class HttpStatusError(FetchError):
    """Server answered with a status other than 200."""

    def __init__(self, url: str, status_code: int, status_message: str):
        super().__init__(
            f"Request failed with HTTP status {status_code} {status_message}"
        )
        self.url = url
        self.status_code = status_code
        self.status_message = status_message


class DecodeError(FetchError):
    """Body was fetched but is not valid JSON."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Invalid JSON from {url}: {message}")
        self.url = url


class NoMatchError(FetchError):
    """Body was fetched but the pattern did not capture group 1."""

    def __init__(self, url: str, pattern: str):
        super().__init__(f"Capture failed for pattern {pattern!r} on {url}")
        self.url = url
        self.pattern = pattern
