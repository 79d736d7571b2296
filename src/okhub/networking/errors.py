"""Error taxonomy for the okhub networking layer.

Helpers raise these; the verb wrappers return them inside ``Err`` and the CLI
maps each class to a process exit code.
"""

from __future__ import annotations

from .models import RateLimitInfo


class HttpClientError(Exception):
    """Base class for every error raised by the networking layer."""


class InvalidArgumentError(HttpClientError):
    """A malformed ``name=value`` pair or a missing required argument."""


class TransportError(HttpClientError):
    """Connection, DNS or TLS failure reported by the HTTP transport."""


class RequestTimeoutError(TransportError):
    """The transport gave up waiting for the server."""


class ParseError(HttpClientError):
    """The raw response stream could not be parsed."""


class RequestCancelledError(HttpClientError):
    """The caller cancelled the operation before the next request was sent."""


class HttpStatusError(HttpClientError):
    """The server answered with a status code the operation treats as failure."""

    label = "HTTP Error"

    def __init__(
        self,
        status_code: int,
        status_text: str = "",
        rate_limit: RateLimitInfo | None = None,
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.rate_limit = rate_limit
        super().__init__(f"{self.label}: {status_code} {status_text}".rstrip())


class ClientError(HttpStatusError):
    label = "Client Error"


class ServerError(HttpStatusError):
    label = "Server Error"


class UnexpectedStatusError(HttpStatusError):
    label = "Unexpected Status"


def status_error(
    status_code: int,
    status_text: str = "",
    rate_limit: RateLimitInfo | None = None,
) -> HttpStatusError:
    """Build the status error class matching the leading digit of the code.

    ``rate_limit`` carries the counters of the failing response so callers
    can still account for them.
    """
    if 400 <= status_code < 500:
        return ClientError(status_code, status_text, rate_limit)
    if 500 <= status_code < 600:
        return ServerError(status_code, status_text, rate_limit)
    return UnexpectedStatusError(status_code, status_text, rate_limit)
