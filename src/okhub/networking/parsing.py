"""Parse a raw HTTP response stream into a :class:`Response`.

The stream is anything with ``readline`` and ``read`` returning bytes, for
instance the output of ``curl -i`` or a socket file. Only the status line and
header block are read eagerly; the body is handed back as a lazy iterator.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

from .errors import ParseError
from .headers import extract_rate_limit, normalize_headers
from .models import Response

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
HEADER_ENCODING = "latin-1"


def _read_line(stream: BinaryIO) -> str | None:
    raw = stream.readline()
    if not raw:
        return None
    return raw.decode(HEADER_ENCODING).rstrip("\n").rstrip("\r")


def _parse_status_line(line: str) -> tuple[str, int, str]:
    version, sep, rest = line.partition(" ")
    code = rest[:3]
    if not sep or len(code) != 3 or not code.isdigit():
        raise ParseError(f"invalid status line: {line!r}")
    text = rest[3:].strip()
    if version.startswith("HTTP/"):
        version = version[len("HTTP/"):]
    return version, int(code), text


def _read_header_block(stream: BinaryIO) -> dict[str, str]:
    headers: dict[str, str] = {}
    while True:
        line = _read_line(stream)
        if not line:
            return headers
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise ParseError(f"invalid header line: {line!r}")
        headers[name.strip()] = value.strip()


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def parse_response(stream: BinaryIO, now: float | None = None) -> Response:
    """Read status line and headers, leaving the body on the stream.

    Interim ``100 Continue`` blocks are skipped, repeated header names keep
    their last value and lines lose any trailing carriage return.
    """
    while True:
        line = _read_line(stream)
        if line is None:
            raise ParseError("missing status line")
        version, status_code, status_text = _parse_status_line(line)
        headers = _read_header_block(stream)
        if status_code != 100:
            break
        logger.debug("Skipping interim 100 Continue response.")

    logger.debug("Response status is: %s %s", status_code, status_text)
    return Response(
        http_version=version,
        status_code=status_code,
        status_text=status_text,
        headers=normalize_headers(headers),
        body=_iter_stream(stream),
        rate_limit=extract_rate_limit(headers, now=now),
    )
