"""Typed control options passed as ``_name=value`` command arguments.

Commands accept request parameters and control options in one argument
list. Control options carry the reserved ``_`` prefix; they are pulled out
here into a per-operation options object and unknown ones are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Sequence, TypeVar

from .networking.encoding import RESERVED_PREFIX, Pair
from .networking.errors import InvalidArgumentError
from .networking.verbs import DEFAULT_FOLLOW_NEXT_LIMIT

OptionsT = TypeVar("OptionsT")

_TRUE = frozenset({"1", "true", "yes"})
_FALSE = frozenset({"0", "false", "no"})


def _to_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise InvalidArgumentError(f"{name} expects 0 or 1, got {value!r}")


def _to_limit(name: str, value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise InvalidArgumentError(
            f"{name} expects an integer, got {value!r}"
        ) from None
    if limit < 0:
        raise InvalidArgumentError(f"{name} must be >= 0")
    return limit


def _to_names(name: str, value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _to_str(name: str, value: str) -> str:
    return value


_CONVERTERS: dict[str, Callable[[str, str], Any]] = {
    "follow_next": _to_bool,
    "follow_next_limit": _to_limit,
    "headers": _to_names,
}


@dataclass(frozen=True)
class GetOptions:
    follow_next: bool = True
    follow_next_limit: int = DEFAULT_FOLLOW_NEXT_LIMIT
    filter: str | None = None
    headers: tuple[str, ...] = ()
    etag: str | None = None


@dataclass(frozen=True)
class PostOptions:
    method: str = "POST"
    filename: str | None = None
    mime_type: str | None = None
    filter: str | None = None
    headers: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeleteOptions:
    headers: tuple[str, ...] = ()


def parse_options(
    options_cls: type[OptionsT],
    pairs: Sequence[Pair],
    *,
    defaults: dict[str, Any] | None = None,
) -> tuple[OptionsT, list[Pair]]:
    """Split ``pairs`` into an options object and the remaining data pairs.

    Args:
        options_cls: Dataclass whose fields name the accepted options.
        pairs: Parsed ``name=value`` arguments.
        defaults: Per-command overrides of the dataclass defaults.

    Raises:
        InvalidArgumentError: An ``_``-prefixed name that is not a field of
            ``options_cls``, or a value of the wrong shape.
    """
    known = {f.name for f in fields(options_cls)}  # type: ignore[arg-type]
    values: dict[str, Any] = dict(defaults or {})
    data: list[Pair] = []
    for name, value in pairs:
        if not name.startswith(RESERVED_PREFIX):
            data.append((name, value))
            continue
        key = name[len(RESERVED_PREFIX):]
        if key not in known:
            raise InvalidArgumentError(f"unknown option {name!r}")
        values[key] = _CONVERTERS.get(key, _to_str)(name, value)
    return options_cls(**values), data
