"""GitHub commands built on the GET/POST/DELETE primitives.

Every command receives its raw CLI tokens: required positionals first, then
``name=value`` pairs. Pairs without the ``_`` prefix become query string or
JSON body parameters; ``_``-prefixed ones are control options validated
against the command's options class.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
import re
from dataclasses import dataclass, field
from threading import Event
from typing import BinaryIO, Callable, Iterable, Iterator, Sequence, TextIO, TypeVar

from .jsonfilter import filter_json, jq_path
from .networking import verbs
from .networking.client import HttpClient
from .networking.encoding import (
    Pair,
    format_json,
    format_querystring,
    format_urlencode,
    parse_pairs,
    percent_encode,
)
from .networking.errors import InvalidArgumentError
from .networking.models import RateLimitTracker, Response
from .networking.parsing import parse_response
from .networking.types import Err, Result
from .options import (
    DeleteOptions,
    GetOptions,
    PostOptions,
    parse_options,
)
from .output import collect_body, write_headers, write_output
from .settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UPLOAD_TEMPLATE = re.compile(r"\{\?[^}]*\}")


@dataclass
class CommandContext:
    """What a command needs to talk to the API and to the terminal."""

    client: HttpClient
    settings: Settings
    stdout: BinaryIO
    stderr: TextIO
    stdin: BinaryIO
    confirm: Callable[[str], bool]
    rate_limits: RateLimitTracker = field(default_factory=RateLimitTracker)
    cancel: Event | None = None


Command = Callable[[CommandContext, Sequence[str]], None]

COMMANDS: dict[str, Command] = {}


def command(name: str) -> Callable[[Command], Command]:
    def register(fn: Command) -> Command:
        COMMANDS[name] = fn
        return fn

    return register


def public_commands() -> list[str]:
    return sorted(name for name in COMMANDS if not name.startswith("_"))


def _split_args(
    args: Sequence[str], required: Sequence[str]
) -> tuple[list[str], list[Pair]]:
    """Take the required positionals, parse the rest as pairs.

    Each entry of ``required`` is the error message used when that
    positional is missing.
    """
    count = len(required)
    if len(args) < count:
        raise InvalidArgumentError(required[len(args)])
    return list(args[:count]), parse_pairs(args[count:])


def _split_optional(args: Sequence[str]) -> tuple[str | None, list[Pair]]:
    """Take one optional positional, present only if it has no ``=``."""
    if args and "=" not in args[0]:
        return args[0], parse_pairs(args[1:])
    return None, parse_pairs(args)


def _unwrap(result: Result[T, Exception]) -> T:
    if isinstance(result, Err):
        raise result.error
    return result.value


def _recorded(ctx: CommandContext, pages: Iterable[Response]) -> Iterator[Response]:
    for page in pages:
        ctx.rate_limits.record(page.rate_limit)
        yield page


def _emit(
    ctx: CommandContext,
    pages: Iterable[Response],
    header_names: Sequence[str] = (),
    jq_filter: str | None = None,
) -> None:
    """Write requested headers then the bodies, through jq when filtering."""
    pages = _recorded(ctx, pages)
    if jq_filter is None or jq_path(ctx.settings) is None:
        write_output(pages, header_names, ctx.stdout)
        return

    first = next(pages, None)
    write_headers(first, header_names, ctx.stdout)
    remaining = itertools.chain([first], pages) if first is not None else ()
    body, error = collect_body(remaining)
    ctx.stdout.write(filter_json(body, jq_filter, ctx.settings, ctx.stderr))
    ctx.stdout.flush()
    if error is not None:
        raise error


def _get(
    ctx: CommandContext,
    path: str,
    options: GetOptions,
    query: Sequence[Pair] = (),
) -> None:
    result = verbs.get(
        ctx.client,
        f"{path}{format_querystring(query)}",
        etag=options.etag,
        follow_next=options.follow_next,
        follow_next_limit=options.follow_next_limit,
        cancel=ctx.cancel,
    )
    pages = _unwrap(result)
    _emit(ctx, pages, options.headers, options.filter)


def _post_json(
    ctx: CommandContext, path: str, data: Sequence[Pair], options: PostOptions
) -> None:
    result = verbs.post(
        ctx.client,
        path,
        body=format_json(data),
        method=options.method,
        mime_type=options.mime_type,
    )
    response = _unwrap(result)
    _emit(ctx, [response], options.headers, options.filter)


def _delete(ctx: CommandContext, path: str, header_names: Sequence[str] = ()) -> None:
    response = _unwrap(verbs.delete(ctx.client, path))
    _emit(ctx, [response], header_names)


def _get_options(
    pairs: Sequence[Pair], jq_filter: str
) -> tuple[GetOptions, list[Pair]]:
    return parse_options(GetOptions, pairs, defaults={"filter": jq_filter})


def _post_options(
    pairs: Sequence[Pair], jq_filter: str
) -> tuple[PostOptions, list[Pair]]:
    return parse_options(PostOptions, pairs, defaults={"filter": jq_filter})


# Primitives


@command("get")
def get_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """GET a path or URL, following ``next`` links.

    Usage: get /some/path [name=value...] [_follow_next=0]
    [_follow_next_limit=N] [_headers=ETag,Link_next] [_etag=...] [_filter=...]
    """
    (path,), pairs = _split_args(args, ["Path is required."])
    options, query = parse_options(GetOptions, pairs)
    _get(ctx, path, options, query)


@command("post")
def post_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """POST name=value pairs as JSON, stdin, or a file.

    Usage: post /some/path [name=value...] [_method=PUT] [_filename=f.tar]
    [_mime_type=...] [_headers=...] [_filter=...]
    """
    (path,), pairs = _split_args(args, ["Path is required."])
    options, data = parse_options(PostOptions, pairs)
    if options.filename:
        result = verbs.post(
            ctx.client,
            path,
            filename=options.filename,
            mime_type=options.mime_type,
            method=options.method,
        )
    elif data:
        result = verbs.post(
            ctx.client,
            path,
            body=format_json(data),
            mime_type=options.mime_type,
            method=options.method,
        )
    else:
        logger.debug("Using stdin as %s data.", options.method)
        result = verbs.post(
            ctx.client,
            path,
            body=ctx.stdin.read(),
            mime_type=options.mime_type,
            method=options.method,
        )
    _emit(ctx, [_unwrap(result)], options.headers, options.filter)


@command("delete")
def delete_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """DELETE a path or URL; succeeds only on 204 No Content.

    Usage: delete /some/path [_headers=...]
    """
    (path,), pairs = _split_args(args, ["URL is required."])
    options, extra = parse_options(DeleteOptions, pairs)
    if extra:
        raise InvalidArgumentError(f"unexpected arguments: {extra!r}")
    _delete(ctx, path, options.headers)


@command("response")
def response_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """Parse a raw HTTP response from stdin (e.g. ``curl -i``).

    Prints the requested header values, one per line, then the body.

    Usage: curl -isS https://api.github.com | okhub response status_code ETag
    """
    response = parse_response(ctx.stdin)
    _emit(ctx, [response], list(args))


@command("format_json")
def format_json_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """Print name=value pairs as a flat JSON object.

    Usage: format_json foo=Foo bar=123 baz=true
    """
    ctx.stdout.write(format_json(parse_pairs(args)).encode("utf-8") + b"\n")


@command("format_urlencode")
def format_urlencode_command(ctx: CommandContext, args: Sequence[str]) -> None:
    """Print name=value pairs URL-encoded; ``_``-prefixed names are skipped.

    Usage: format_urlencode foo='Foo Foo' bar='<Bar>&/Bar/'
    """
    ctx.stdout.write(format_urlencode(parse_pairs(args)).encode("utf-8") + b"\n")


# Authorization


@command("show_scopes")
def show_scopes(ctx: CommandContext, args: Sequence[str]) -> None:
    """Show the permission scopes for the currently authenticated user.

    Usage: show_scopes
    """
    pages = _unwrap(verbs.get(ctx.client, "/", follow_next=False))
    first = next(_recorded(ctx, pages))
    write_headers(first, ["X-OAuth-Scopes"], ctx.stdout)
    first.close()


# Repository


@command("org_repos")
def org_repos(ctx: CommandContext, args: Sequence[str]) -> None:
    """List organization repositories.

    Usage: org_repos myorg [type=private] [per_page=10] [_filter=...]
    """
    (org,), pairs = _split_args(args, ["Org name required."])
    options, query = _get_options(pairs, '.[] | "\\(.name)\\t\\(.ssh_url)"')
    _get(ctx, f"/orgs/{org}/repos", options, query)


@command("org_teams")
def org_teams(ctx: CommandContext, args: Sequence[str]) -> None:
    """List teams of an organization.

    Usage: org_teams myorg
    """
    (org,), pairs = _split_args(args, ["Org name required."])
    options, query = _get_options(
        pairs, '.[] | "\\(.name)\\t\\(.id)\\t\\(.permission)"'
    )
    _get(ctx, f"/orgs/{org}/teams", options, query)


@command("list_repos")
def list_repos(ctx: CommandContext, args: Sequence[str]) -> None:
    """List repositories of a user, or of the authenticated user.

    Usage: list_repos [user] [type=...] [sort=...] [direction=...]
    """
    user, pairs = _split_optional(args)
    options, query = _get_options(pairs, '.[] | "\\(.name)\\t\\(.html_url)"')
    path = f"/users/{user}/repos" if user else "/user/repos"
    _get(ctx, path, options, query)


@command("create_repo")
def create_repo(ctx: CommandContext, args: Sequence[str]) -> None:
    """Create a repository for the authenticated user or an organization.

    Usage: create_repo name [description=...] [organization=myorg] ...
    """
    (name,), pairs = _split_args(args, ["Repo name required."])
    options, data = _post_options(pairs, '"\\(.name)\\t\\(.html_url)"')
    organization = None
    body: list[Pair] = [("name", name)]
    for key, value in data:
        if key == "organization":
            organization = value
        else:
            body.append((key, value))
    path = f"/orgs/{organization}/repos" if organization else "/user/repos"
    _post_json(ctx, path, body, options)


def _confirmed(ctx: CommandContext, message: str) -> bool:
    if ctx.settings.destructive:
        return True
    return ctx.confirm(message)


@command("delete_repo")
def delete_repo(ctx: CommandContext, args: Sequence[str]) -> None:
    """Delete a repository; requires the ``delete_repo`` scope.

    Usage: delete_repo owner repo
    """
    (owner, repo), _ = _split_args(
        args, ["Owner name required.", "Repo name required."]
    )
    if not _confirmed(ctx, "This will permanently delete a repository! Continue?"):
        return
    _delete(ctx, f"/repos/{owner}/{repo}")


# Releases


@command("list_releases")
def list_releases(ctx: CommandContext, args: Sequence[str]) -> None:
    """List releases for a repository.

    Usage: list_releases owner repo
    """
    (owner, repo), pairs = _split_args(
        args, ["Owner name required.", "Repo name required."]
    )
    options, query = _get_options(
        pairs, '.[] | "\\(.name)\\t\\(.id)\\t\\(.html_url)"'
    )
    _get(ctx, f"/repos/{owner}/{repo}/releases", options, query)


@command("release")
def release(ctx: CommandContext, args: Sequence[str]) -> None:
    """Get a release.

    Usage: release owner repo release_id
    """
    (owner, repo, release_id), pairs = _split_args(
        args,
        ["Owner name required.", "Repo name required.", "Release ID required."],
    )
    options, query = _get_options(pairs, '"\\(.author.login)\\t\\(.published_at)"')
    _get(ctx, f"/repos/{owner}/{repo}/releases/{release_id}", options, query)


@command("create_release")
def create_release(ctx: CommandContext, args: Sequence[str]) -> None:
    """Create a release.

    Usage: create_release owner repo v1.2.3 [draft=true] [name=...] [body=...]
    """
    (owner, repo, tag_name), pairs = _split_args(
        args,
        ["Owner name required.", "Repo name required.", "Tag name required."],
    )
    options, data = _post_options(pairs, '"\\(.name)\\t\\(.id)\\t\\(.html_url)"')
    body = [("tag_name", tag_name), *data]
    _post_json(ctx, f"/repos/{owner}/{repo}/releases", body, options)


@command("delete_release")
def delete_release(ctx: CommandContext, args: Sequence[str]) -> None:
    """Delete a release.

    Usage: delete_release owner repo release_id
    """
    (owner, repo, release_id), _ = _split_args(
        args,
        ["Owner name required.", "Repo name required.", "Release ID required."],
    )
    if not _confirmed(ctx, "This will permanently delete a release. Continue?"):
        return
    _delete(ctx, f"/repos/{owner}/{repo}/releases/{release_id}")


@command("release_assets")
def release_assets(ctx: CommandContext, args: Sequence[str]) -> None:
    """List release assets.

    Usage: release_assets owner repo release_id
    """
    (owner, repo, release_id), pairs = _split_args(
        args,
        ["Owner name required.", "Repo name required.", "Release ID required."],
    )
    options, query = _get_options(
        pairs, '.[] | "\\(.id)\\t\\(.name)\\t\\(.updated_at)"'
    )
    _get(ctx, f"/repos/{owner}/{repo}/releases/{release_id}/assets", options, query)


@command("upload_asset")
def upload_asset(ctx: CommandContext, args: Sequence[str]) -> None:
    """Upload a file as a release asset.

    Usage: upload_asset owner repo release_id path/to/foo.tar [_mime_type=...]
    """
    (owner, repo, release_id, filename), pairs = _split_args(
        args,
        [
            "Owner name required.",
            "Repo name required.",
            "Release ID required.",
            "File name is required.",
        ],
    )
    options, _ = _post_options(pairs, '"\\(.state)\\t\\(.browser_download_url)"')

    pages = _unwrap(
        verbs.get(
            ctx.client,
            f"/repos/{owner}/{repo}/releases/{release_id}",
            follow_next=False,
        )
    )
    payload = next(_recorded(ctx, pages)).read()
    try:
        upload_url = json.loads(payload)["upload_url"]
    except (ValueError, KeyError, TypeError) as exc:
        raise InvalidArgumentError("Upload URL could not be retrieved.") from exc

    name = percent_encode(os.path.basename(filename))
    upload_url = _UPLOAD_TEMPLATE.sub(f"?name={name}", upload_url)
    result = verbs.post(
        ctx.client,
        upload_url,
        filename=filename,
        mime_type=options.mime_type,
    )
    _emit(ctx, [_unwrap(result)], options.headers, options.filter)


# Issues


@command("list_milestones")
def list_milestones(ctx: CommandContext, args: Sequence[str]) -> None:
    """List milestones for a repository.

    Usage: list_milestones owner/repo [state=closed] [_follow_next_limit=N]
    """
    (repository,), pairs = _split_args(args, ["Repo name required."])
    options, query = _get_options(
        pairs,
        '.[] | "\\(.number)\\t\\(.open_issues)/\\(.closed_issues)\\t\\(.title)"',
    )
    _get(ctx, f"/repos/{repository}/milestones", options, query)


@command("create_milestone")
def create_milestone(ctx: CommandContext, args: Sequence[str]) -> None:
    """Create a milestone for a repository.

    Usage: create_milestone owner/repo Title [due_on=...] [description=...]
    """
    (repository, title), pairs = _split_args(
        args, ["Repo name required.", "Milestone name required."]
    )
    options, data = _post_options(pairs, '"\\(.number)\\t\\(.html_url)"')
    body = [("title", title), *data]
    _post_json(ctx, f"/repos/{repository}/milestones", body, options)


@command("list_issues")
def list_issues(ctx: CommandContext, args: Sequence[str]) -> None:
    """List issues for a repository, or for the authenticated user.

    Usage: list_issues [owner/repo] [state=closed] [labels=foo,bar]
    """
    repository, pairs = _split_optional(args)
    options, query = _get_options(pairs, '.[] | "\\(.number)\\t\\(.title)"')
    path = f"/repos/{repository}/issues" if repository else "/user/issues"
    _get(ctx, path, options, query)


@command("user_issues")
def user_issues(ctx: CommandContext, args: Sequence[str]) -> None:
    """List issues across owned and member repositories.

    Usage: user_issues [since=2015-06-11T00:09:00Z]
    """
    pairs = parse_pairs(args)
    options, query = _get_options(pairs, '.[] | "\\(.number)\\t\\(.title)"')
    _get(ctx, "/issues", options, query)


@command("org_issues")
def org_issues(ctx: CommandContext, args: Sequence[str]) -> None:
    """List issues of an organization for the authenticated user.

    Usage: org_issues myorg [state=...]
    """
    (org,), pairs = _split_args(args, ["Organization name required."])
    options, query = _get_options(pairs, '.[] | "\\(.number)\\t\\(.title)"')
    _get(ctx, f"/orgs/{org}/issues", options, query)


@command("labels")
def labels(ctx: CommandContext, args: Sequence[str]) -> None:
    """List available labels for a repository.

    Usage: labels owner/repo
    """
    (repository,), pairs = _split_args(args, ["Repo name required."])
    options, query = _get_options(pairs, '.[] | "\\(.name)\\t\\(.color)"')
    _get(ctx, f"/repos/{repository}/labels", options, query)


@command("add_label")
def add_label(ctx: CommandContext, args: Sequence[str]) -> None:
    """Add a label to a repository.

    Usage: add_label owner/repo LabelName color
    """
    (repository, label, color), pairs = _split_args(
        args,
        ["Repo name required.", "Label name required.", "Hex color required."],
    )
    options, _ = _post_options(pairs, '"\\(.name)\\t\\(.color)"')
    _post_json(
        ctx,
        f"/repos/{repository}/labels",
        [("name", label), ("color", color)],
        options,
    )
