# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
# pyright: reportUnknownVariableType=false, reportMissingParameterType=false
from unittest.mock import patch

import pytest
import requests
from helpers import mock_response

from okhub.networking import verbs
from okhub.networking.client import HttpClient
from okhub.networking.config import HttpClientConfig
from okhub.networking.errors import (
    ClientError,
    InvalidArgumentError,
    ServerError,
    TransportError,
    UnexpectedStatusError,
)
from okhub.networking.models import RateLimitInfo


@pytest.fixture
def client():
    return HttpClient(HttpClientConfig(timeout_seconds=5.0))


def test_get_404_is_client_error_without_body(client):
    raw = mock_response(content=b"not found", status=404, reason="Not Found")

    with patch("requests.Session.request", return_value=raw):
        result = verbs.get(client, "/path/does/not/exist")

    assert not result.ok
    assert isinstance(result.error, ClientError)
    assert str(result.error) == "Client Error: 404 Not Found"
    assert result.meta["status_code"] == 404
    assert result.meta["final_error"] == "ClientError"
    raw.iter_content.assert_not_called()
    raw.close.assert_called_once_with()


def test_get_500_is_server_error_without_body(client):
    raw = mock_response(
        content=b"server error", status=500, reason="Internal Server Error"
    )

    with patch("requests.Session.request", return_value=raw):
        result = verbs.get(client, "/test_error")

    assert not result.ok
    assert isinstance(result.error, ServerError)
    assert result.error.status_code == 500
    assert result.error.status_text == "Internal Server Error"
    raw.iter_content.assert_not_called()


def test_get_200_is_ok_with_pages(client):
    with patch(
        "requests.Session.request", return_value=mock_response(content=b"[1]")
    ):
        result = verbs.get(client, "/user/repos")
        pages = list(result.value)

    assert result.ok
    assert result.meta["method"] == "GET"
    assert result.meta["status_code"] == 200
    assert [page.read() for page in pages] == [b"[1]"]


def test_get_304_is_not_a_failure(client):
    raw = mock_response(status=304, reason="Not Modified")

    with patch("requests.Session.request", return_value=raw):
        result = verbs.get(client, "/user", etag="abc")

    assert result.ok
    assert result.meta["status_code"] == 304


def test_get_transport_error_is_err_result(client):
    with patch(
        "requests.Session.request",
        side_effect=requests.exceptions.ConnectionError("refused"),
    ):
        result = verbs.get(client, "/user")

    assert not result.ok
    assert isinstance(result.error, TransportError)
    assert result.meta["url"] == "https://api.github.com/user"


def test_context_is_merged_into_metadata(client):
    with patch("requests.Session.request", return_value=mock_response()):
        result = verbs.get(client, "/user", context={"command": "show_scopes"})

    assert result.meta["command"] == "show_scopes"
    assert result.meta["context"] == {"command": "show_scopes"}


def test_delete_204_is_success(client):
    raw = mock_response(status=204, reason="No Content")

    with patch("requests.Session.request", return_value=raw) as mock_request:
        result = verbs.delete(client, "/repos/o/r")

    assert result.ok
    assert mock_request.call_args.args[0] == "DELETE"


def test_delete_200_is_failure(client):
    with patch("requests.Session.request", return_value=mock_response()):
        result = verbs.delete(client, "/repos/o/r")

    assert not result.ok
    assert isinstance(result.error, UnexpectedStatusError)
    assert result.error.status_code == 200


def test_delete_404_is_client_error(client):
    raw = mock_response(status=404, reason="Not Found")

    with patch("requests.Session.request", return_value=raw):
        result = verbs.delete(client, "/repos/o/missing")

    assert isinstance(result.error, ClientError)


def test_post_json_body(client):
    raw = mock_response(content=b'{"id": 1}', status=201, reason="Created")

    with patch("requests.Session.request", return_value=raw) as mock_request:
        result = verbs.post(client, "/user/repos", body='{"name": "foo"}')

    assert result.ok
    assert result.value.read() == b'{"id": 1}'
    args, kwargs = mock_request.call_args
    assert args[0] == "POST"
    assert kwargs["data"] == b'{"name": "foo"}'
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_post_put_method(client):
    with patch(
        "requests.Session.request", return_value=mock_response()
    ) as mock_request:
        verbs.post(client, "/x", body=b"{}", method="put")

    assert mock_request.call_args.args[0] == "PUT"


def test_post_422_is_client_error(client):
    raw = mock_response(status=422, reason="Unprocessable Entity")

    with patch("requests.Session.request", return_value=raw):
        result = verbs.post(client, "/user/repos", body=b"{}")

    assert isinstance(result.error, ClientError)
    assert result.meta["status_code"] == 422


def test_post_file_guesses_content_type(client, tmp_path):
    archive = tmp_path / "release.tar"
    archive.write_bytes(b"tarball")

    with patch(
        "requests.Session.request", return_value=mock_response(status=201)
    ) as mock_request:
        result = verbs.post(client, "/upload", filename=str(archive))

    assert result.ok
    kwargs = mock_request.call_args.kwargs
    assert kwargs["headers"]["Content-Type"] == "application/x-tar"
    assert kwargs["data"].name == str(archive)


def test_post_file_explicit_mime_type_wins(client, tmp_path):
    notes = tmp_path / "notes.unknown"
    notes.write_bytes(b"notes")

    with patch(
        "requests.Session.request", return_value=mock_response(status=201)
    ) as mock_request:
        result = verbs.post(
            client, "/upload", filename=str(notes), mime_type="text/plain"
        )

    assert result.ok
    assert mock_request.call_args.kwargs["headers"]["Content-Type"] == "text/plain"


def test_post_file_unknown_extension_is_invalid_argument(client, tmp_path):
    notes = tmp_path / "notes.unknown"
    notes.write_bytes(b"notes")

    with patch("requests.Session.request") as mock_request:
        result = verbs.post(client, "/upload", filename=str(notes))

    assert isinstance(result.error, InvalidArgumentError)
    mock_request.assert_not_called()


def test_post_missing_file_is_invalid_argument(client, tmp_path):
    with patch("requests.Session.request") as mock_request:
        result = verbs.post(client, "/upload", filename=str(tmp_path / "gone.zip"))

    assert isinstance(result.error, InvalidArgumentError)
    mock_request.assert_not_called()


def test_status_error_keeps_rate_limit(client):
    raw = mock_response(
        status=403, reason="Forbidden", headers={"X-RateLimit-Remaining": "0"}
    )

    with patch("requests.Session.request", return_value=raw):
        result = verbs.get(client, "/user")

    assert isinstance(result.error, ClientError)
    assert result.error.rate_limit == RateLimitInfo(remaining=0)
    assert result.meta["rate_limit"] == RateLimitInfo(remaining=0)


def test_delete_status_error_keeps_rate_limit(client):
    raw = mock_response(headers={"X-RateLimit-Remaining": "4"})

    with patch("requests.Session.request", return_value=raw):
        result = verbs.delete(client, "/repos/o/r")

    assert result.error.rate_limit == RateLimitInfo(remaining=4)
