# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import Mock

from urllib3 import HTTPHeaderDict

BASE_URL = "https://api.github.com"


def mock_response(
    *,
    content: bytes = b"",
    status: int = 200,
    reason: str = "OK",
    url: str = BASE_URL,
    headers=None,
):
    """Build a stand-in for a streamed ``requests.Response``."""
    raw_headers = HTTPHeaderDict()
    for name, value in (headers or {}).items():
        raw_headers.add(name, value)

    response = Mock()
    response.status_code = status
    response.reason = reason
    response.url = url
    response.raw.version = 11
    response.raw.headers = raw_headers
    response.headers = dict(headers or {})
    response.iter_content.side_effect = lambda chunk_size=1: iter(
        [content] if content else []
    )
    return response
