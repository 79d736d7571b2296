"""Write verb results in the positional output format.

Requested header values come first, one per line and blank when absent,
followed by the raw body of every page.
"""

from __future__ import annotations

import itertools
from typing import BinaryIO, Iterable, Sequence

from .networking.errors import HttpClientError
from .networking.models import Response


def write_headers(
    response: Response | None, header_names: Sequence[str], out: BinaryIO
) -> None:
    for name in header_names:
        value = response.header(name) if response is not None else ""
        out.write(value.encode("utf-8") + b"\n")


def write_output(
    pages: Iterable[Response], header_names: Sequence[str], out: BinaryIO
) -> None:
    """Stream headers of the first page, then each page body in order.

    A failing later page raises after the earlier bodies were written.
    """
    pages = iter(pages)
    first = next(pages, None)
    write_headers(first, header_names, out)
    if first is None:
        return
    for page in itertools.chain([first], pages):
        for chunk in page.iter_body():
            out.write(chunk)
    out.flush()


def collect_body(pages: Iterable[Response]) -> tuple[bytes, HttpClientError | None]:
    """Concatenate page bodies, stopping at the first failing page.

    Returns the bytes gathered so far together with the error, if any, so
    the caller can emit the partial output before reporting the failure.
    """
    chunks: list[bytes] = []
    try:
        for page in pages:
            chunks.extend(page.iter_body())
    except HttpClientError as exc:
        return b"".join(chunks), exc
    return b"".join(chunks), None
