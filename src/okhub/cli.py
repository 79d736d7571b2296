"""Command-line entry point for okhub.

Usage: ``okhub [<flags>] command [<arg>...] [<name=value>...]``

Flags must come before the command. The process exit code reflects the
class of error the command ended with, see :class:`ExitCode`.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import re
import sys
from contextlib import ExitStack
from enum import IntEnum
from typing import BinaryIO, Callable, Mapping, Sequence, TextIO

from . import __version__
from .commands import COMMANDS, CommandContext, public_commands
from .credentials import resolve_auth
from .networking.client import HttpClient
from .networking.errors import (
    ClientError,
    HttpClientError,
    HttpStatusError,
    InvalidArgumentError,
    ParseError,
    ServerError,
    TransportError,
)
from .settings import MAX_VERBOSITY, Settings

logger = logging.getLogger(__name__)

NAME = "okhub"
LOG_FORMAT = "%(name)s %(levelname)s: %(message)s"
_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}
_YES = re.compile(r"^[yY]")


class ExitCode(IntEnum):
    OK = 0
    FAILURE = 1
    NO_COMMAND = 2
    INVALID_ARGUMENTS = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5
    TRANSPORT_ERROR = 6
    PARSE_ERROR = 7


def exit_code_for(error: Exception) -> ExitCode:
    if isinstance(error, ClientError):
        return ExitCode.CLIENT_ERROR
    if isinstance(error, ServerError):
        return ExitCode.SERVER_ERROR
    if isinstance(error, InvalidArgumentError):
        return ExitCode.INVALID_ARGUMENTS
    if isinstance(error, TransportError):
        return ExitCode.TRANSPORT_ERROR
    if isinstance(error, ParseError):
        return ExitCode.PARSE_ERROR
    return ExitCode.FAILURE


def configure_logging(verbosity: int, stream: TextIO) -> None:
    """Send okhub's log records to ``stream`` at the level ``-v`` asks for."""
    package_logger = logging.getLogger("okhub")
    package_logger.setLevel(_LOG_LEVELS.get(verbosity, logging.DEBUG))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=NAME,
        description="A GitHub v3 API client for the command line.",
        epilog="Available commands: " + ", ".join(public_commands()),
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"Version: {__version__}"
    )
    parser.add_argument(
        "-j", dest="raw_json", action="store_true",
        help="Output raw JSON; don't process with jq.",
    )
    parser.add_argument(
        "-q", dest="quiet", action="store_true",
        help="Quiet; don't print to stdout.",
    )
    parser.add_argument(
        "-r", dest="rate_limit", action="store_true",
        help="Print current GitHub API rate limit to stderr.",
    )
    parser.add_argument(
        "-v", dest="verbose", action="count", default=0,
        help="Logging output; specify multiple times: info, debug, trace.",
    )
    parser.add_argument(
        "-y", dest="destructive", action="store_true",
        help="Answer 'yes' to any prompts.",
    )
    parser.add_argument("command", nargs="?", help="Command to run, or 'help'.")
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def _apply_flags(settings: Settings, flags: argparse.Namespace) -> Settings:
    return dataclasses.replace(
        settings,
        verbosity=min(settings.verbosity + flags.verbose, MAX_VERBOSITY),
        raw_json=settings.raw_json or flags.raw_json,
        quiet=settings.quiet or flags.quiet,
        rate_limit=settings.rate_limit or flags.rate_limit,
        destructive=settings.destructive or flags.destructive,
    )


def _help(args: Sequence[str], out: BinaryIO, err: TextIO) -> ExitCode:
    """Print usage, or the docstring of one command, to ``out``."""
    if not args:
        text = _build_parser().format_help()
    else:
        fn = COMMANDS.get(args[0])
        if fn is None:
            err.write(f"Unknown command: {args[0]}\n")
            return ExitCode.INVALID_ARGUMENTS
        text = f"{args[0]}: {fn.__doc__ or ''}\n"
    out.write(text.encode("utf-8"))
    out.flush()
    return ExitCode.OK


def _prompt(stdin: TextIO, stderr: TextIO) -> Callable[[str], bool]:
    def confirm(message: str) -> bool:
        stderr.write(f"{message} ")
        stderr.flush()
        return bool(_YES.match(stdin.readline().strip()))

    return confirm


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
    stderr: TextIO | None = None,
    confirm: Callable[[str], bool] | None = None,
) -> int:
    """Run one command and return the process exit code."""
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    stderr = stderr if stderr is not None else sys.stderr

    flags = _build_parser().parse_args(argv)
    try:
        settings = _apply_flags(
            Settings.from_env(os.environ if environ is None else environ), flags
        )
    except ValueError as exc:
        stderr.write(f"{NAME}: {exc}\n")
        return ExitCode.INVALID_ARGUMENTS

    if not flags.command:
        stderr.write(
            "No command given. Available commands:\n\n"
            + ", ".join(public_commands())
            + "\n"
        )
        return ExitCode.NO_COMMAND
    if flags.command == "help":
        return _help(flags.args, stdout, stderr)
    fn = COMMANDS.get(flags.command)
    if fn is None:
        stderr.write(f"Unknown command: {flags.command}\n")
        return ExitCode.INVALID_ARGUMENTS

    with ExitStack() as stack:
        if settings.quiet:
            stdout = stack.enter_context(open(os.devnull, "wb"))
        configure_logging(settings.verbosity, stderr)

        try:
            client_config = settings.client_config()
        except ValueError as exc:
            stderr.write(f"{NAME}: {exc}\n")
            return ExitCode.INVALID_ARGUMENTS
        client = HttpClient(
            client_config, auth=resolve_auth(settings.base_url, settings.token)
        )
        ctx = CommandContext(
            client=client,
            settings=settings,
            stdout=stdout,
            stderr=stderr,
            stdin=stdin,
            confirm=confirm or _prompt(sys.stdin, stderr),
        )

        logger.debug("Running command %s.", flags.command)
        code = ExitCode.OK
        try:
            fn(ctx, flags.args)
        except HttpClientError as exc:
            if isinstance(exc, HttpStatusError):
                ctx.rate_limits.record(exc.rate_limit)
            stderr.write(f"{exc}\n")
            code = exit_code_for(exc)
        logger.debug("Command %s exited with %d.", flags.command, code)

        if settings.rate_limit:
            for line in ctx.rate_limits.summary_lines():
                stderr.write(f"{line}\n")
        stdout.flush()
        return code


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
