"""Destination assembly.

Walks resolver output in first-seen order and builds destination values.
Supports dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from row_graph.core.exceptions import ColumnMismatchError, NullConstraintError
from row_graph.mapping.resolver import Element, Resolver
from row_graph.mapping.schema import Cardinality, FieldSpec, Schema


def _construct(schema: Schema, kwargs: dict[str, Any]) -> Any:
    """Instantiate the schema's target class.

    Detection order:
    1. Pydantic BaseModel -> model_validate(kwargs)
    2. dataclass or plain class -> target(**kwargs)
    """
    target = schema.target
    if schema.is_pydantic:
        try:
            return target.model_validate(kwargs)  # type: ignore[attr-defined]
        except ValidationError as e:
            raise ColumnMismatchError(target.__name__, [str(e)]) from e

    try:
        return target(**kwargs)
    except TypeError as e:
        raise ColumnMismatchError(target.__name__, [str(e)]) from e


def _association_value(
    schema: Schema,
    spec: FieldSpec,
    resolver: Resolver | None,
) -> Any:
    items = assemble_elements(schema, resolver) if resolver is not None else []
    if spec.cardinality is Cardinality.MANY:
        if not items and spec.nullable:
            return None
        return items
    if items:
        return items[0]
    if spec.nullable:
        return None
    raise NullConstraintError(None, spec.attribute)


def build_element(schema: Schema, element: Element) -> Any:
    """Build one destination value from a resolved element."""
    if schema.is_scalar:
        return element.values.get(0)

    kwargs: dict[str, Any] = {}
    for i, spec in enumerate(schema.fields):
        if spec.is_association:
            kwargs[spec.attribute] = _association_value(
                schema.children[i], spec, element.children.get(i)
            )
        elif i in element.values:
            kwargs[spec.attribute] = element.values[i]
    return _construct(schema, kwargs)


def assemble_elements(schema: Schema, resolver: Resolver) -> list[Any]:
    """Build every element of ``resolver`` in first-seen order."""
    return [build_element(schema, element) for element in resolver]


def assemble(schema: Schema, resolver: Resolver, cardinality: Cardinality) -> Any:
    """Materialize the root resolver into the destination shape.

    Sequence destinations receive a list; single-record destinations receive
    the first element, or None when no rows were resolved.
    """
    items = assemble_elements(schema, resolver)
    if cardinality is Cardinality.ONE:
        return items[0] if items else None
    return items
