"""Follow ``rel="next"`` links across sequential requests."""

from __future__ import annotations

import logging
from threading import Event
from typing import Callable, Iterator

from .errors import RequestCancelledError
from .models import PaginationCursor, Response

logger = logging.getLogger(__name__)

RequestFn = Callable[[str | None], Response]
CheckFn = Callable[[Response], None]


def follow(
    request_fn: RequestFn,
    max_follows: int | None,
    *,
    check: CheckFn | None = None,
    cancel: Event | None = None,
) -> Iterator[Response]:
    """Yield the first page and every page reachable through ``Link_next``.

    ``request_fn(None)`` issues the first request and ``request_fn(url)``
    fetches a discovered next URL as-is. Pages are requested one after the
    other and yielded in order. ``max_follows`` bounds the number of next
    links followed: ``0`` stops after the first page, ``None`` never stops
    early. ``check`` runs on each page before it is yielded; whatever it
    raises ends the sequence.
    """
    if max_follows is not None and max_follows < 0:
        raise ValueError("max_follows must be >= 0")

    response = request_fn(None)
    if check is not None:
        check(response)
    cursor = PaginationCursor(
        next_url=response.next_url, remaining_follows=max_follows
    )
    yield response

    while cursor.can_follow():
        if cancel is not None and cancel.is_set():
            raise RequestCancelledError("pagination cancelled")
        logger.info(
            "Remaining next link follows: %s",
            "unlimited"
            if cursor.remaining_follows is None
            else cursor.remaining_follows,
        )
        response = request_fn(cursor.next_url)
        if check is not None:
            check(response)
        cursor.advance(response)
        yield response
