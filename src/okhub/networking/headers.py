"""Derive script-friendly fields from selected response headers."""

from __future__ import annotations

import logging
import time
from typing import Mapping

from .models import RateLimitInfo

logger = logging.getLogger(__name__)

LINK_PREFIX = "Link_"


def parse_link_header(value: str) -> dict[str, str]:
    """Map each ``rel`` of a ``Link`` header to its URL.

    Segments without a ``rel=`` parameter are skipped.
    """
    links: dict[str, str] = {}
    for segment in value.split(", "):
        url, *params = segment.split("; ")
        rel = None
        for param in params:
            param = param.strip()
            if param.startswith("rel="):
                rel = param[len("rel="):].strip('"')
                break
        if not rel:
            logger.debug("Skipping Link segment without rel: %r", segment)
            continue
        url = url.strip()
        if url.startswith("<"):
            url = url[1:]
        if url.endswith(">"):
            url = url[:-1]
        links[rel] = url
    return links


def unquote_etag(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def normalize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with the derived entries added.

    Every relation of ``Link`` becomes a ``Link_<rel>`` entry and ``ETag``
    loses its surrounding quotes. Re-normalizing a normalized mapping
    rewrites the same ``Link_<rel>`` keys in place.
    """
    normalized: dict[str, str] = {}
    for name, value in headers.items():
        if name == "ETag":
            value = unquote_etag(value)
        normalized[name] = value
        if name == "Link":
            for rel, url in parse_link_header(value).items():
                normalized[f"{LINK_PREFIX}{rel}"] = url
    return normalized


def _int_header(headers: Mapping[str, str], name: str) -> int | None:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s header: %r", name, raw)
        return None


def extract_rate_limit(
    headers: Mapping[str, str], now: float | None = None
) -> RateLimitInfo | None:
    """Read the rate limit counters, converting reset to seconds from now."""
    remaining = _int_header(headers, "X-RateLimit-Remaining")
    reset_at = _int_header(headers, "X-RateLimit-Reset")
    if remaining is None and reset_at is None:
        return None
    reset_in = None
    if reset_at is not None:
        current = int(time.time() if now is None else now)
        reset_in = reset_at - current
    return RateLimitInfo(remaining=remaining, reset_in_seconds=reset_in)
