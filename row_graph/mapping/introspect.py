"""Destination type introspection.

Turns a destination type (a record class, a sequence of records, or a
sequence of primitives) into an unallocated Schema tree. Records may be
dataclasses, Pydantic models, or plain classes with an annotated __init__.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, NamedTuple

from pydantic import BaseModel

from row_graph.core.exceptions import SchemaError
from row_graph.mapping.schema import Cardinality, FieldSpec, Schema, ValueKind

logger = logging.getLogger(__name__)

_PRIMITIVE_KINDS: dict[Any, ValueKind] = {
    bool: ValueKind.BOOL,
    int: ValueKind.INT,
    float: ValueKind.FLOAT,
    Decimal: ValueKind.DECIMAL,
    str: ValueKind.TEXT,
    datetime: ValueKind.DATETIME,
    date: ValueKind.DATE,
    Any: ValueKind.ANY,
    object: ValueKind.ANY,
}

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence)


class _RecordField(NamedTuple):
    attribute: str  # constructor keyword
    name: str  # column matching name
    annotation: Any
    delimiter: str | None


def column(
    name: str | None = None,
    *,
    delimiter: str | None = None,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with column matching options.

    Args:
        name: Column (or association prefix) name to match instead of the
            attribute name.
        delimiter: Separator used between this association's name and its
            fields' names, e.g. ``"->"`` for ``author->id``.
        **kwargs: Passed through to :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if name is not None:
        metadata["column"] = name
    if delimiter is not None:
        metadata["delimiter"] = delimiter
    return dataclasses.field(metadata=metadata, **kwargs)


def _is_pydantic_model(cls: Any) -> bool:
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``; other types pass through."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) != 1:
            raise SchemaError(f"Unsupported union type: {tp!r}")
        return args[0], True
    return tp, False


def _sequence_item(tp: Any) -> Any | None:
    """Return the item type of ``list[X]`` / ``Sequence[X]``, else None."""
    if tp in (list, collections.abc.Sequence, typing.List, typing.Sequence):  # noqa: UP006
        raise SchemaError(f"Sequence type {tp!r} must declare its item type")
    origin = typing.get_origin(tp)
    if origin in _SEQUENCE_ORIGINS:
        args = typing.get_args(tp)
        if len(args) != 1:
            raise SchemaError(f"Unsupported sequence type: {tp!r}")
        return args[0]
    return None


def _record_fields(cls: Any) -> list[_RecordField] | None:
    """Extract constructor fields from a record class, or None if not a record."""
    if typing.get_origin(cls) is not None or not isinstance(cls, type):
        return None
    if cls.__module__ == "builtins":
        return None

    # Pydantic model
    if _is_pydantic_model(cls):
        result = []
        for attr, info in cls.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            delimiter = extra.get("delimiter")
            result.append(
                _RecordField(
                    attribute=info.alias or attr,
                    name=info.alias or attr,
                    annotation=info.annotation,
                    delimiter=delimiter if isinstance(delimiter, str) else None,
                )
            )
        return result

    # Dataclass
    if dataclasses.is_dataclass(cls):
        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError) as e:
            raise SchemaError(f"Cannot resolve annotations of {cls.__name__}: {e}") from e
        return [
            _RecordField(
                attribute=f.name,
                name=f.metadata.get("column", f.name),
                annotation=hints.get(f.name, Any),
                delimiter=f.metadata.get("delimiter"),
            )
            for f in dataclasses.fields(cls)
            if f.init
        ]

    # Plain class - use __init__ parameters
    try:
        sig = inspect.signature(cls.__init__)  # type: ignore[misc]
        hints = typing.get_type_hints(cls.__init__)  # type: ignore[misc]
    except (ValueError, TypeError, NameError):
        return None
    params = [
        param
        for name, param in sig.parameters.items()
        if name != "self"
        and param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
    ]
    if not params:
        return None
    return [
        _RecordField(
            attribute=param.name,
            name=param.name,
            annotation=hints.get(param.name, Any),
            delimiter=None,
        )
        for param in params
    ]


def _scalar_schema(tp: Any, kind: ValueKind, nullable: bool, delimiter: str) -> Schema:
    return Schema(
        target=tp,
        fields=[FieldSpec(name="", attribute="", kind=kind, nullable=nullable)],
        delimiter=delimiter,
        is_scalar=True,
    )


def _element_schema(
    tp: Any,
    nullable: bool,
    delimiter: str,
    default_delimiter: str,
    seen: tuple[type, ...],
) -> Schema:
    kind = _PRIMITIVE_KINDS.get(tp)
    if kind is not None:
        return _scalar_schema(tp, kind, nullable, delimiter)
    return _record_schema(tp, delimiter, default_delimiter, seen)


def _record_schema(
    cls: Any,
    delimiter: str,
    default_delimiter: str,
    seen: tuple[type, ...],
) -> Schema:
    fields = _record_fields(cls)
    if fields is None:
        raise SchemaError(f"{cls!r} is not a mappable record type")
    if cls in seen:
        raise SchemaError(f"Recursive record type {cls.__name__} cannot be mapped")
    seen = (*seen, cls)

    schema = Schema(target=cls, delimiter=delimiter, is_pydantic=_is_pydantic_model(cls))
    for i, rf in enumerate(fields):
        annotation, nullable = _unwrap_optional(rf.annotation)
        child_delimiter = rf.delimiter or default_delimiter

        kind = _PRIMITIVE_KINDS.get(annotation)
        if kind is not None:
            schema.fields.append(
                FieldSpec(name=rf.name, attribute=rf.attribute, kind=kind, nullable=nullable)
            )
            continue

        item = _sequence_item(annotation)
        if item is not None:
            item, item_nullable = _unwrap_optional(item)
            schema.children[i] = _element_schema(
                item, item_nullable, child_delimiter, default_delimiter, seen
            )
            cardinality = Cardinality.MANY
        elif _record_fields(annotation) is not None:
            schema.children[i] = _record_schema(
                annotation, child_delimiter, default_delimiter, seen
            )
            cardinality = Cardinality.ONE
        else:
            raise SchemaError(
                f"Unsupported type {annotation!r} for field '{rf.attribute}' "
                f"of {cls.__name__}"
            )
        schema.fields.append(
            FieldSpec(
                name=rf.name,
                attribute=rf.attribute,
                nullable=nullable,
                cardinality=cardinality,
                delimiter=rf.delimiter,
            )
        )
    return schema


def build_schema(target: Any, delimiter: str = "_") -> tuple[Schema, Cardinality]:
    """Build an unallocated schema tree for a destination type.

    Args:
        target: ``list[Record]``, ``Sequence[Record]``, ``list[Record | None]``,
            a bare ``Record`` for a single result, or ``list[primitive]``.
        delimiter: Default separator between association and field names.

    Returns:
        The root schema and whether the destination holds one or many elements.

    Raises:
        SchemaError: the destination type cannot be mapped.
    """
    item = _sequence_item(target)
    if item is None:
        item, nullable, cardinality = target, False, Cardinality.ONE
        if item in _PRIMITIVE_KINDS:
            raise SchemaError(
                f"Cannot map into a single {item!r}; use a sequence such as list[{item!r}]"
            )
    else:
        item, nullable = _unwrap_optional(item)
        cardinality = Cardinality.MANY

    schema = _element_schema(item, nullable, delimiter, delimiter, ())
    logger.debug(
        "Built schema for %r: %d node(s), %s destination",
        target,
        len(schema.walk()),
        cardinality.value,
    )
    return schema, cardinality
