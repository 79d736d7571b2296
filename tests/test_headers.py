from okhub.networking.headers import (
    extract_rate_limit,
    normalize_headers,
    parse_link_header,
    unquote_etag,
)
from okhub.networking.models import RateLimitInfo, RateLimitTracker

LINK = (
    '<https://api.github.com/user/repos?page=3>; rel="next", '
    '<https://api.github.com/user/repos?page=9>; rel="last", '
    '<https://api.github.com/user/repos?page=1>; rel="first", '
    '<https://api.github.com/user/repos?page=1>; rel="prev"'
)


def test_parse_link_header_maps_every_relation():
    assert parse_link_header(LINK) == {
        "next": "https://api.github.com/user/repos?page=3",
        "last": "https://api.github.com/user/repos?page=9",
        "first": "https://api.github.com/user/repos?page=1",
        "prev": "https://api.github.com/user/repos?page=1",
    }


def test_parse_link_header_skips_segments_without_rel():
    value = '<https://a.example/1>; title="x", <https://a.example/2>; rel="next"'

    assert parse_link_header(value) == {"next": "https://a.example/2"}


def test_normalize_adds_link_entries_next_to_link():
    headers = normalize_headers({"Link": LINK, "Server": "GitHub.com"})

    assert headers["Link"] == LINK
    assert headers["Server"] == "GitHub.com"
    assert headers["Link_next"] == "https://api.github.com/user/repos?page=3"
    assert headers["Link_prev"] == "https://api.github.com/user/repos?page=1"


def test_normalize_unquotes_etag():
    assert normalize_headers({"ETag": '"abc"'})["ETag"] == "abc"
    assert normalize_headers({"ETag": "abc"})["ETag"] == "abc"


def test_unquote_etag_strips_one_quote_each_side():
    assert unquote_etag('"abc') == "abc"
    assert unquote_etag('W/"abc"') == 'W/"abc'


def test_normalize_is_idempotent():
    once = normalize_headers({"ETag": '"abc"', "Link": LINK, "Vary": "Accept"})
    twice = normalize_headers(once)

    assert twice == once
    assert list(twice) == list(once)


def test_normalize_does_not_mutate_input():
    headers = {"ETag": '"abc"'}

    normalize_headers(headers)

    assert headers == {"ETag": '"abc"'}


def test_extract_rate_limit_counts_down_to_reset():
    info = extract_rate_limit(
        {"X-RateLimit-Remaining": "59", "X-RateLimit-Reset": "1500"}, now=1000
    )

    assert info == RateLimitInfo(remaining=59, reset_in_seconds=500)


def test_extract_rate_limit_can_be_negative():
    info = extract_rate_limit({"X-RateLimit-Reset": "900"}, now=1000)

    assert info == RateLimitInfo(remaining=None, reset_in_seconds=-100)


def test_extract_rate_limit_absent_or_invalid():
    assert extract_rate_limit({}) is None
    assert extract_rate_limit({"X-RateLimit-Remaining": "lots"}) is None


def test_tracker_updates_each_counter_independently():
    tracker = RateLimitTracker()
    tracker.record(RateLimitInfo(remaining=10, reset_in_seconds=100))
    tracker.record(None)
    tracker.record(RateLimitInfo(remaining=9))

    assert tracker.latest == RateLimitInfo(remaining=9, reset_in_seconds=100)
    assert tracker.summary_lines() == [
        "GitHub remaining requests: 9",
        "GitHub seconds to reset: 100",
    ]


def test_tracker_without_data_has_no_summary():
    assert RateLimitTracker().summary_lines() == []
