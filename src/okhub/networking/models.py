"""Value objects passed between the request pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import BinaryIO, Callable, Iterable, Iterator, Mapping, Sequence

PSEUDO_HEADERS = ("http_version", "status_code", "status_text")


def _no_body() -> Iterator[bytes]:
    return iter(())


@dataclass(frozen=True)
class RateLimitInfo:
    """Quota reported by the API on a single response."""

    remaining: int | None = None
    reset_in_seconds: int | None = None


@dataclass(frozen=True)
class Request:
    """A single outbound request, before path resolution."""

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | BinaryIO | None = None
    params: Mapping[str, str] = field(default_factory=dict)


@dataclass
class Response:
    """A parsed response: status line, ordered headers and a body stream.

    ``headers`` keeps the case of the names as received and is looked up
    case-sensitively. ``body`` yields byte chunks and can be consumed once.
    """

    http_version: str
    status_code: int
    status_text: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Iterable[bytes] = field(default_factory=_no_body)
    rate_limit: RateLimitInfo | None = None
    url: str | None = None
    closer: Callable[[], None] | None = None

    def header(self, name: str) -> str:
        """Return a header (or status pseudo-header) value, blank if absent."""
        if name in PSEUDO_HEADERS:
            return str(getattr(self, name))
        return self.headers.get(name, "")

    def header_values(self, names: Sequence[str]) -> list[str]:
        return [self.header(name) for name in names]

    @property
    def next_url(self) -> str | None:
        return self.headers.get("Link_next") or None

    def iter_body(self) -> Iterator[bytes]:
        """Yield the body chunks, then release the underlying connection."""
        try:
            for chunk in self.body:
                if chunk:
                    yield chunk
        finally:
            self.close()

    def read(self) -> bytes:
        return b"".join(self.iter_body())

    def close(self) -> None:
        if self.closer is not None:
            closer, self.closer = self.closer, None
            closer()


@dataclass
class PaginationCursor:
    """Traversal state of one paginated GET.

    ``remaining_follows`` of ``None`` means the traversal is unbounded.
    """

    next_url: str | None = None
    remaining_follows: int | None = None

    def can_follow(self) -> bool:
        if not self.next_url:
            return False
        return self.remaining_follows is None or self.remaining_follows > 0

    def advance(self, response: Response) -> None:
        if self.remaining_follows is not None:
            self.remaining_follows -= 1
        self.next_url = response.next_url


class RateLimitTracker:
    """Keeps the most recent rate limit seen across responses.

    Each counter is tracked on its own: a response carrying only one of the
    two headers updates that counter and leaves the other as last seen.

    Updates are serialized so several in-flight requests may report to the
    same tracker.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._latest: RateLimitInfo | None = None

    def record(self, info: RateLimitInfo | None) -> None:
        if info is None:
            return
        with self._lock:
            previous = self._latest or RateLimitInfo()
            self._latest = RateLimitInfo(
                remaining=(
                    info.remaining
                    if info.remaining is not None
                    else previous.remaining
                ),
                reset_in_seconds=(
                    info.reset_in_seconds
                    if info.reset_in_seconds is not None
                    else previous.reset_in_seconds
                ),
            )

    @property
    def latest(self) -> RateLimitInfo | None:
        with self._lock:
            return self._latest

    def summary_lines(self) -> list[str]:
        latest = self.latest
        if latest is None:
            return []
        lines = []
        if latest.remaining is not None:
            lines.append(f"GitHub remaining requests: {latest.remaining}")
        if latest.reset_in_seconds is not None:
            lines.append(f"GitHub seconds to reset: {latest.reset_in_seconds}")
        return lines
