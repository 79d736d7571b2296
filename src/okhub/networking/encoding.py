"""Encode ``name=value`` argument pairs as a JSON object or a query string."""

from __future__ import annotations

import json
import logging
import re
from typing import Iterable, Sequence

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

RESERVED_PREFIX = "_"

_NUMBER = re.compile(r"^([+-]?)(\d+)(\.\d+)?$")
_BOOLEANS = frozenset({"true", "false"})
_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)

Pair = tuple[str, str]


def parse_pair(token: str) -> Pair:
    """Split one ``name=value`` token on its first ``=``."""
    name, sep, value = token.partition("=")
    if not sep or not name:
        raise InvalidArgumentError(
            f"expected name=value argument, got {token!r}"
        )
    return name, value


def parse_pairs(tokens: Iterable[str]) -> list[Pair]:
    return [parse_pair(token) for token in tokens]


def _json_number(value: str) -> str | None:
    match = _NUMBER.match(value)
    if match is None:
        return None
    sign, digits, fraction = match.groups()
    sign = "-" if sign == "-" else ""
    return f"{sign}{digits.lstrip('0') or '0'}{fraction or ''}"


def json_value(value: str) -> str:
    """Render a raw argument value as a JSON literal.

    ``true``/``false`` and numbers are left unquoted; everything else becomes
    a JSON string, so embedded quotes and newlines are escaped.
    """
    if value in _BOOLEANS:
        return value
    number = _json_number(value)
    if number is not None:
        return number
    return json.dumps(value, ensure_ascii=False)


def format_json(pairs: Sequence[Pair]) -> str:
    """Build a flat JSON object, keeping the order of ``pairs``."""
    logger.debug("Formatting %d parameters as JSON.", len(pairs))
    members = (
        f"{json.dumps(name, ensure_ascii=False)}: {json_value(value)}"
        for name, value in pairs
    )
    return "{" + ", ".join(members) + "}"


def percent_encode(value: str) -> str:
    """Escape everything but ASCII letters and digits as ``%XX``."""
    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}"
        for byte in value.encode("utf-8")
    )


def format_urlencode(pairs: Sequence[Pair]) -> str:
    """URL-encode and join pairs, skipping reserved ``_``-prefixed names."""
    logger.debug("Formatting %d parameters as urlencoded.", len(pairs))
    return "&".join(
        f"{name}={percent_encode(value)}"
        for name, value in pairs
        if not name.startswith(RESERVED_PREFIX)
    )


def format_querystring(pairs: Sequence[Pair]) -> str:
    """Return ``?``-prefixed query string, or an empty string."""
    encoded = format_urlencode(pairs)
    return f"?{encoded}" if encoded else ""
