"""Synchronous request executor for the okhub networking layer.

``HttpClient`` resolves paths against the configured base URL, attaches the
standard headers, issues exactly one HTTP request through a ``requests``
session and normalizes the streamed result into a :class:`Response`. It
never retries; status classification is left to the verb wrappers.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Iterable, Iterator, Mapping

import requests
from requests.auth import AuthBase
from urllib3 import HTTPHeaderDict

from .config import DEFAULT_CONTENT_TYPE, HttpClientConfig
from .errors import RequestTimeoutError, TransportError
from .headers import extract_rate_limit, normalize_headers
from .models import Request, Response

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
ABSOLUTE_URL_PREFIXES = ("http://", "https://")
_HTTP_VERSIONS = {9: "0.9", 10: "1.0", 11: "1.1", 20: "2"}


def _stream_body(response: requests.Response) -> Iterator[bytes]:
    yield from response.iter_content(chunk_size=CHUNK_SIZE)


def _header_items(response: requests.Response) -> Iterable[tuple[str, str]]:
    """Return header lines as received, duplicates included."""
    raw_headers = getattr(response.raw, "headers", None)
    if isinstance(raw_headers, HTTPHeaderDict):
        return raw_headers.items()
    return response.headers.items()


class HttpClient:
    """Core HTTP client interface (sync).

    All outbound HTTP in okhub goes through this client so every request
    carries the same base URL, ``Accept`` header and credentials.
    """

    def __init__(
        self,
        config: HttpClientConfig,
        auth: AuthBase | None = None,
    ) -> None:
        """Create a new HttpClient.

        Args:
            config: Configuration for base URL, headers and timeouts.
            auth: Optional requests auth object produced by the credentials
                lookup. Without one, requests falls back to ``~/.netrc``.
        """
        self._config = config
        self._session = requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent
        self._session.headers.update(self._config.default_headers)
        if auth is not None:
            self._session.auth = auth
        if self._config.trace:
            self._session.hooks["response"].append(self._trace)

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    def _get_timeout(
        self, override: float | None
    ) -> float | tuple[float, float] | None:
        """Resolve timeout preference."""
        if override is not None:
            if override <= 0:
                raise ValueError("timeout override must be > 0 when provided")
            return override
        if (
            self._config.connect_timeout_seconds is not None
            and self._config.read_timeout_seconds is not None
        ):
            return (
                self._config.connect_timeout_seconds,
                self._config.read_timeout_seconds,
            )
        return self._config.timeout_seconds

    def resolve_url(self, path: str) -> str:
        """Use full URLs verbatim; append anything else to the base URL."""
        if path.startswith(ABSOLUTE_URL_PREFIXES):
            return path
        return f"{self._config.base_url}{path}"

    def execute(
        self,
        path: str,
        *,
        method: str | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | BinaryIO | None = None,
        params: Mapping[str, str] | None = None,
        etag: str | None = None,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> Response:
        """Build and send one request.

        Args:
            path: Absolute path below the base URL, or a full URL.
            method: HTTP method; defaults to POST with a body, GET without.
            headers: Extra headers, applied after the standard ones.
            body: Optional request body, bytes or a readable binary file.
            params: Optional query parameters.
            etag: Entity tag to send as ``If-None-Match``.
            content_type: ``Content-Type`` for the body.
            timeout: Override timeout in seconds for this request.

        Returns:
            The parsed response with its body still unread.

        Raises:
            RequestTimeoutError: The transport timed out.
            TransportError: Any other transport failure.
        """
        if method is None:
            method = "POST" if body is not None else "GET"

        merged: dict[str, str] = {"Accept": self._config.accept}
        if body is not None:
            merged["Content-Type"] = content_type or DEFAULT_CONTENT_TYPE
        if etag:
            merged["If-None-Match"] = f'"{etag}"'
        merged.update(headers or {})

        request = Request(
            method=method.upper(),
            path=path,
            headers=merged,
            body=body,
            params=dict(params or {}),
        )
        return self.send(request, timeout=timeout)

    def send(self, request: Request, *, timeout: float | None = None) -> Response:
        """Issue ``request`` and wrap the streamed result."""
        url = self.resolve_url(request.path)
        resolved_timeout = self._get_timeout(timeout)
        logger.info("%s %s", request.method, url)
        try:
            raw = self._session.request(
                request.method,
                url,
                headers=dict(request.headers),
                params=dict(request.params) or None,
                data=request.body,
                timeout=resolved_timeout,
                stream=True,
                verify=self._config.verify_tls,
            )
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(str(exc)) from exc
        return self._build_response(raw)

    @staticmethod
    def _build_response(raw: requests.Response) -> Response:
        headers: dict[str, str] = {}
        for name, value in _header_items(raw):
            headers[name] = value
        version = _HTTP_VERSIONS.get(getattr(raw.raw, "version", None), "1.1")
        logger.debug("Response status is: %s %s", raw.status_code, raw.reason)
        return Response(
            http_version=version,
            status_code=raw.status_code,
            status_text=raw.reason or "",
            headers=normalize_headers(headers),
            body=_stream_body(raw),
            rate_limit=extract_rate_limit(headers),
            url=raw.url,
            closer=raw.close,
        )

    @staticmethod
    def _trace(response: requests.Response, *args: Any, **kwargs: Any) -> None:
        """Log the full request and response head, the ``-vvv`` wire trace."""
        request = response.request
        logger.debug("> %s %s", request.method, request.url)
        for name, value in request.headers.items():
            if name.lower() == "authorization":
                value = "<redacted>"
            logger.debug("> %s: %s", name, value)
        if isinstance(request.body, (bytes, str)):
            logger.debug("> body: %r", request.body[:1024])
        logger.debug("< %s %s", response.status_code, response.reason)
        for name, value in response.headers.items():
            logger.debug("< %s: %s", name, value)
