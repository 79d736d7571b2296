"""Pretty-print and filter JSON output with an external ``jq`` binary."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import TextIO

from .settings import Settings

logger = logging.getLogger(__name__)


def jq_path(settings: Settings) -> str | None:
    """Return the jq executable to use, or None for raw output."""
    if settings.raw_json:
        return None
    return shutil.which(settings.jq_bin)


def filter_json(
    data: bytes, jq_filter: str | None, settings: Settings, stderr: TextIO
) -> bytes:
    """Run ``jq -c -r`` over ``data``; pass it through when jq is unavailable."""
    jq = jq_path(settings)
    if jq is None or not data.strip():
        return data
    logger.debug("Filtering JSON with %r.", jq_filter)
    completed = subprocess.run(
        [jq, "-c", "-r", jq_filter or "."],
        input=data,
        capture_output=True,
        check=False,
    )
    if completed.returncode != 0:
        logger.debug("jq stderr: %s", completed.stderr.decode(errors="replace"))
        stderr.write("jq parse error; invalid JSON.\n")
    return completed.stdout
