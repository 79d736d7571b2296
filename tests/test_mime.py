import pytest

from okhub.networking.errors import InvalidArgumentError
from okhub.networking.mime import guess_mime_type


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("dist/okhub.zip", "application/zip"),
        ("okhub-0.1.0.tar.gz", "application/x-gzip"),
        ("photo.JPG", "image/jpeg"),
        ("config.yaml", "application/x-yaml"),
        ("logo.svgz", "image/svg+xml"),
    ],
)
def test_guess_by_last_extension(filename, expected):
    assert guess_mime_type(filename) == expected


@pytest.mark.parametrize("filename", ["README", "notes.txt", "archive.tar.xz"])
def test_unknown_extension(filename):
    with pytest.raises(InvalidArgumentError):
        guess_mime_type(filename)
