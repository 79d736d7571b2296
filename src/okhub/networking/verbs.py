"""GET, POST and DELETE wrappers around :class:`HttpClient`.

Each wrapper runs one request (or one paginated series for GET), classifies
the status code and returns a ``Result``. Nothing here retries: POST in
particular is not idempotent, so repeating a request is left to the caller.
"""

from __future__ import annotations

import itertools
import logging
from threading import Event
from typing import Any, BinaryIO, Iterator, Mapping

from .client import HttpClient
from .config import DEFAULT_CONTENT_TYPE
from .errors import HttpClientError, HttpStatusError, InvalidArgumentError
from .errors import status_error
from .mime import guess_mime_type
from .models import Response
from .pagination import follow
from .types import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_FOLLOW_NEXT_LIMIT = 50


def build_meta(
    method: str,
    request_url: str,
    response: Response | None = None,
    *,
    context: Mapping[str, Any] | None = None,
    status_code: int | None = None,
    final_error: str | None = None,
) -> dict[str, Any]:
    """Construct metadata dictionary from response and context."""
    meta: dict[str, Any] = {}
    meta["method"] = method
    meta["url"] = request_url
    if context:
        context_dict = dict(context)
        meta["context"] = context_dict
        for key, value in context_dict.items():
            meta.setdefault(key, value)

    if response is not None:
        meta["status_code"] = response.status_code
        meta["reason"] = response.status_text
        if response.url:
            meta["url"] = response.url
        if response.rate_limit is not None:
            meta["rate_limit"] = response.rate_limit
    elif status_code is not None:
        meta["status_code"] = status_code
    if final_error is not None:
        meta["final_error"] = final_error

    return meta


def _error_meta(
    method: str,
    request_url: str,
    error: HttpClientError,
    context: Mapping[str, Any] | None,
) -> dict[str, Any]:
    status_code = None
    rate_limit = None
    if isinstance(error, HttpStatusError):
        status_code = error.status_code
        rate_limit = error.rate_limit
    meta = build_meta(
        method,
        request_url,
        context=context,
        status_code=status_code,
        final_error=type(error).__name__,
    )
    if rate_limit is not None:
        meta["rate_limit"] = rate_limit
    return meta


def check_status(response: Response) -> None:
    """Raise ClientError/ServerError for 4xx/5xx; anything else passes."""
    if response.status_code >= 400:
        response.close()
        raise status_error(
            response.status_code, response.status_text, response.rate_limit
        )


def get(
    client: HttpClient,
    path: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
    etag: str | None = None,
    follow_next: bool = True,
    follow_next_limit: int | None = DEFAULT_FOLLOW_NEXT_LIMIT,
    timeout: float | None = None,
    cancel: Event | None = None,
    context: Mapping[str, Any] | None = None,
) -> Result[Iterator[Response], Exception]:
    """Perform a GET and lazily follow its ``next`` links.

    Args:
        client: Executor used for every page.
        path: Path below the base URL, or a full URL.
        params: Optional query parameters for the first request.
        headers: Optional per-request headers.
        etag: Send ``If-None-Match`` for a conditional request.
        follow_next: ``False`` fetches the first page only.
        follow_next_limit: Most next links to follow; ``None`` is unbounded.
        timeout: Override timeout in seconds for each page.
        cancel: Set to stop before the next page is requested.
        context: Optional caller context merged into the metadata.

    Returns:
        ``Ok`` with an iterator over the pages, the first already fetched
        and checked. Later pages are fetched as the iterator advances and a
        failing page raises from it. ``Err`` when the first page fails.
    """
    request_url = client.resolve_url(path)
    max_follows = follow_next_limit if follow_next else 0

    def request_fn(url: str | None) -> Response:
        if url is None:
            return client.execute(
                path,
                method="GET",
                headers=headers,
                params=params,
                etag=etag,
                timeout=timeout,
            )
        return client.execute(
            url, method="GET", headers=headers, timeout=timeout
        )

    pages = follow(request_fn, max_follows, check=check_status, cancel=cancel)
    try:
        first = next(pages)
    except HttpClientError as exc:
        logger.debug("GET %s failed: %s", request_url, exc)
        return Err(exc, meta=_error_meta("GET", request_url, exc, context))

    return Ok(
        itertools.chain([first], pages),
        meta=build_meta("GET", request_url, first, context=context),
    )


def _send_body(
    client: HttpClient,
    path: str,
    *,
    method: str,
    body: bytes | BinaryIO,
    content_type: str,
    headers: Mapping[str, str] | None,
    timeout: float | None,
) -> Response:
    return client.execute(
        path,
        method=method,
        headers=headers,
        body=body,
        content_type=content_type,
        timeout=timeout,
    )


def post(
    client: HttpClient,
    path: str,
    *,
    body: bytes | str | BinaryIO | None = None,
    filename: str | None = None,
    mime_type: str | None = None,
    method: str = "POST",
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
    context: Mapping[str, Any] | None = None,
) -> Result[Response, Exception]:
    """Send a body with POST (or PUT/PATCH via ``method``).

    ``filename`` takes precedence over ``body``; its ``Content-Type`` is
    guessed from the extension unless ``mime_type`` is given. A plain body
    defaults to ``application/json``. The response is never paginated.
    """
    method = method.upper()
    request_url = client.resolve_url(path)
    try:
        if filename:
            content_type = mime_type or guess_mime_type(filename)
            logger.debug("Using %r as %s data.", filename, method)
            try:
                with open(filename, "rb") as stream:
                    response = _send_body(
                        client,
                        path,
                        method=method,
                        body=stream,
                        content_type=content_type,
                        headers=headers,
                        timeout=timeout,
                    )
            except OSError as exc:
                raise InvalidArgumentError(
                    f"file {filename!r} could not be found or read: {exc}"
                ) from exc
        else:
            if body is None:
                body = b""
            elif isinstance(body, str):
                body = body.encode("utf-8")
            response = _send_body(
                client,
                path,
                method=method,
                body=body,
                content_type=mime_type or DEFAULT_CONTENT_TYPE,
                headers=headers,
                timeout=timeout,
            )
        check_status(response)
    except HttpClientError as exc:
        logger.debug("%s %s failed: %s", method, request_url, exc)
        return Err(exc, meta=_error_meta(method, request_url, exc, context))

    return Ok(
        response,
        meta=build_meta(method, request_url, response, context=context),
    )


def delete(
    client: HttpClient,
    path: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
    context: Mapping[str, Any] | None = None,
) -> Result[Response, Exception]:
    """Send a DELETE; only ``204 No Content`` counts as success."""
    request_url = client.resolve_url(path)
    try:
        response = client.execute(
            path, method="DELETE", headers=headers, timeout=timeout
        )
    except HttpClientError as exc:
        return Err(exc, meta=_error_meta("DELETE", request_url, exc, context))

    meta = build_meta("DELETE", request_url, response, context=context)
    if response.status_code != 204:
        response.close()
        return Err(
            status_error(
                response.status_code,
                response.status_text,
                response.rate_limit,
            ),
            meta=meta,
        )
    return Ok(response, meta=meta)
