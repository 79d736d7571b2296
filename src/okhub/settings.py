"""Process settings, read once from the environment and CLI flags."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from . import __version__
from .networking.config import DEFAULT_ACCEPT, DEFAULT_BASE_URL, HttpClientConfig

MAX_VERBOSITY = 3


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "0").strip() not in ("", "0")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Everything the CLI needs to know before running a command.

    ``verbosity`` is 0 (quiet) to 3 (full wire trace).
    """

    base_url: str = DEFAULT_BASE_URL
    accept: str = DEFAULT_ACCEPT
    verbosity: int = 0
    rate_limit: bool = False
    destructive: bool = False
    raw_json: bool = False
    quiet: bool = False
    jq_bin: str = "jq"
    token: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.verbosity <= MAX_VERBOSITY:
            raise ValueError(f"verbosity must be between 0 and {MAX_VERBOSITY}")
        if not self.jq_bin:
            raise ValueError("jq_bin must not be empty")

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "Settings":
        return cls(
            base_url=environ.get("OKHUB_URL") or DEFAULT_BASE_URL,
            accept=environ.get("OKHUB_ACCEPT") or DEFAULT_ACCEPT,
            verbosity=min(_env_int(environ, "OKHUB_VERBOSE", 0), MAX_VERBOSITY),
            rate_limit=_env_flag(environ, "OKHUB_RATE_LIMIT"),
            destructive=_env_flag(environ, "OKHUB_DESTRUCTIVE"),
            jq_bin=environ.get("OKHUB_JQ_BIN") or "jq",
            token=environ.get("OKHUB_TOKEN") or environ.get("GITHUB_TOKEN") or None,
        )

    def client_config(self) -> HttpClientConfig:
        return HttpClientConfig(
            base_url=self.base_url,
            accept=self.accept,
            user_agent=f"okhub/{__version__}",
            trace=self.verbosity >= MAX_VERBOSITY,
        )
