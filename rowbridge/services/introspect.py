from __future__ import annotations

import dataclasses
import threading
import types
import typing
from collections.abc import Iterator
from typing import Any, Union

from ..models.field_descriptor import EMBED_KEY, FieldDescriptor

"""Field introspection for record dataclasses.

``flatten`` yields the visible fields of a record type in declaration order,
splicing embedded dataclasses in place (depth-first). ``field_values`` walks a
record instance in exactly the same order so both stay index-aligned.

The flattened list depends only on the type, so it is memoised per type in a
lock-guarded cache that may be shared between threads.
"""

__all__ = [
    "SchemaContractError",
    "flatten",
    "field_values",
    "is_record_type",
    "unwrap_optional",
]


class SchemaContractError(TypeError):
    """Raised when a value that must be a record type (or a sequence of records) is not."""


_cache: dict[type, tuple[FieldDescriptor, ...]] = {}
_cache_lock = threading.Lock()


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``; other annotations return ``(tp, False)``."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(tp)
        members = tuple(a for a in args if a is not type(None))
        nullable = len(members) != len(args)
        if not nullable:
            return tp, False
        if len(members) == 1:
            return members[0], True
        return Union[members], True  # type: ignore[return-value]
    return tp, False


def _walk(record_type: type, prefix: tuple[str, ...], stack: tuple[type, ...]) -> Iterator[FieldDescriptor]:
    try:
        hints = typing.get_type_hints(record_type)
    except NameError as e:
        raise SchemaContractError(f"cannot resolve annotations of {record_type.__qualname__}: {e}") from e

    for f in dataclasses.fields(record_type):
        if f.name.startswith("_"):
            continue
        declared = hints.get(f.name, f.type)
        inner, nullable = unwrap_optional(declared)
        if f.metadata.get(EMBED_KEY):
            if not is_record_type(inner):
                raise SchemaContractError(
                    f"embedded field {record_type.__qualname__}.{f.name} is not a dataclass: {declared!r}"
                )
            if inner in stack:
                raise SchemaContractError(
                    f"embedded field {record_type.__qualname__}.{f.name} embeds {inner.__qualname__} recursively"
                )
            yield from _walk(inner, prefix + (f.name,), stack + (inner,))
            continue
        yield FieldDescriptor(
            name=f.name,
            type=declared,
            value_type=inner,
            nullable=nullable,
            path=prefix + (f.name,),
            metadata=f.metadata,
        )


def flatten(record_type: Any) -> tuple[FieldDescriptor, ...]:
    """Return the visible flattened fields of ``record_type``.

    Raises:
        SchemaContractError: ``record_type`` is not a dataclass type, an
            embedded field is not a dataclass, or embedding is recursive
    """
    if not is_record_type(record_type):
        raise SchemaContractError(f"record type must be a dataclass type, got {record_type!r}")
    with _cache_lock:
        cached = _cache.get(record_type)
        if cached is None:
            cached = tuple(_walk(record_type, (), (record_type,)))
            _cache[record_type] = cached
    return cached


def field_values(record: Any) -> list[Any]:
    """Return the live values of ``record`` aligned with ``flatten(type(record))``."""
    return [fd.get(record) for fd in flatten(type(record))]
