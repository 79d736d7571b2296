"""Fixed file extension to MIME type table used for uploads."""

from __future__ import annotations

import logging
import os

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

# Taken from Apache's mime.types file (public domain).
MIME_TYPES = {
    "bz2": "application/x-bzip2",
    "exe": "application/x-msdownload",
    "gz": "application/x-gzip",
    "tgz": "application/x-gzip",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpe": "image/jpeg",
    "jfif": "image/jpeg",
    "json": "application/json",
    "pdf": "application/pdf",
    "png": "image/png",
    "rpm": "application/x-rpm",
    "svg": "image/svg+xml",
    "svgz": "image/svg+xml",
    "tar": "application/x-tar",
    "yaml": "application/x-yaml",
    "zip": "application/zip",
}


def guess_mime_type(filename: str) -> str:
    """Look up the MIME type for the last extension of ``filename``."""
    ext = os.path.splitext(filename)[1].lstrip(".").lower()
    try:
        mime_type = MIME_TYPES[ext]
    except KeyError:
        raise InvalidArgumentError(
            f"the MIME type of {filename!r} could not be guessed; "
            "pass mime_type explicitly"
        ) from None
    logger.debug("Guessed mime type of %r for %r.", mime_type, filename)
    return mime_type
