import io

import pytest

from okhub.networking.errors import ParseError
from okhub.networking.models import RateLimitInfo
from okhub.networking.parsing import parse_response

RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Baz: Baz!\r\n"
    b"Foo: Foo!\r\n"
    b'ETag: "a1b2"\r\n'
    b"\r\n"
    b'{"hello": "world"}\n'
)


def test_parse_status_line_headers_and_body():
    response = parse_response(io.BytesIO(RESPONSE))

    assert response.http_version == "1.1"
    assert response.status_code == 200
    assert response.status_text == "OK"
    assert response.headers == {"Baz": "Baz!", "Foo": "Foo!", "ETag": "a1b2"}
    assert response.read() == b'{"hello": "world"}\n'


def test_requested_headers_in_order_with_blank_for_missing():
    response = parse_response(io.BytesIO(RESPONSE))

    assert response.header_values(["Baz", "Bad", "Foo"]) == ["Baz!", "", "Foo!"]


def test_status_pseudo_headers():
    response = parse_response(io.BytesIO(b"HTTP/1.1 404 Not Found\n\n"))

    assert response.header_values(["status_code", "status_text", "http_version"]) == [
        "404",
        "Not Found",
        "1.1",
    ]


def test_interim_continue_responses_are_skipped():
    with_continue = (
        b"HTTP/1.1 100 Continue\r\n\r\n"
        b"HTTP/1.1 100 Continue\r\n\r\n" + RESPONSE
    )

    interim = parse_response(io.BytesIO(with_continue))
    final = parse_response(io.BytesIO(RESPONSE))

    assert interim.status_code == final.status_code
    assert interim.status_text == final.status_text
    assert interim.headers == final.headers
    assert interim.read() == final.read()


def test_last_repeated_header_wins():
    raw = b"HTTP/1.1 200 OK\nX-Dup: one\nX-Dup: two\n\n"

    assert parse_response(io.BytesIO(raw)).headers["X-Dup"] == "two"


def test_header_lookup_is_case_sensitive():
    response = parse_response(io.BytesIO(b"HTTP/1.1 200 OK\ncontent-type: a/b\n\n"))

    assert response.header("content-type") == "a/b"
    assert response.header("Content-Type") == ""


def test_value_may_contain_colons():
    raw = b"HTTP/1.1 200 OK\nLocation: https://example.com:8443/x\n\n"

    assert parse_response(io.BytesIO(raw)).headers["Location"] == (
        "https://example.com:8443/x"
    )


def test_status_text_may_be_empty_or_multiword():
    assert parse_response(io.BytesIO(b"HTTP/1.1 204\r\n\r\n")).status_text == ""
    response = parse_response(io.BytesIO(b"HTTP/1.1 500 INTERNAL SERVER ERROR\n\n"))
    assert response.status_text == "INTERNAL SERVER ERROR"


def test_headers_without_blank_line_end_at_eof():
    response = parse_response(io.BytesIO(b"HTTP/1.1 200 OK\nFoo: bar\n"))

    assert response.headers == {"Foo": "bar"}
    assert response.read() == b""


def test_body_is_left_on_the_stream_until_read():
    stream = io.BytesIO(RESPONSE)

    response = parse_response(stream)

    assert stream.read() == b'{"hello": "world"}\n'
    assert response.read() == b""


def test_derived_headers_and_rate_limit():
    raw = (
        b"HTTP/1.1 200 OK\r\n"
        b'Link: <https://api.github.com/x?page=2>; rel="next", '
        b'<https://api.github.com/x?page=5>; rel="last"\r\n'
        b"X-RateLimit-Remaining: 10\r\n"
        b"X-RateLimit-Reset: 1300\r\n"
        b"\r\n"
    )

    response = parse_response(io.BytesIO(raw), now=1000)

    assert response.headers["Link_next"] == "https://api.github.com/x?page=2"
    assert response.headers["Link_last"] == "https://api.github.com/x?page=5"
    assert response.rate_limit == RateLimitInfo(remaining=10, reset_in_seconds=300)


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"HTTP/1.1\n\n",
        b"HTTP/1.1 2x0 OK\n\n",
        b"HTTP/1.1 20\n\n",
        b"HTTP/1.1 100 Continue\n\n",
    ],
)
def test_malformed_status_raises_parse_error(raw):
    with pytest.raises(ParseError):
        parse_response(io.BytesIO(raw))


def test_header_line_without_colon_raises_parse_error():
    with pytest.raises(ParseError):
        parse_response(io.BytesIO(b"HTTP/1.1 200 OK\nnot a header\n\n"))
