"""Unit tests for destination type introspection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pytest
from pydantic import BaseModel, Field

from row_graph.core.exceptions import SchemaError
from row_graph.mapping.introspect import build_schema, column
from row_graph.mapping.schema import Cardinality, ValueKind


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Order:
    id: int
    total: float


@dataclass
class Customer:
    id: int
    name: str | None
    address: Address | None = None
    orders: list[Order] = field(default_factory=list)
    tags: list[str] | None = None


@dataclass
class AllKinds:
    flag: bool
    count: int
    ratio: float
    amount: Decimal
    label: str
    seen_at: datetime
    born_on: date
    extra: Any


@dataclass
class TaggedUser:
    id: int = column("user_id")
    name: str = column("user_name")


@dataclass
class Node:
    id: int
    children: list[Node] = field(default_factory=list)


class AuthorModel(BaseModel):
    id: int
    name: str


class PostModel(BaseModel):
    id: int
    title: str = Field(alias="headline")
    author: AuthorModel | None = Field(default=None, json_schema_extra={"delimiter": "->"})


class PlainUser:
    def __init__(self, id: int, email: str) -> None:
        self.id = id
        self.email = email


class TestBuildSchema:
    def test_sequence_of_records(self) -> None:
        schema, cardinality = build_schema(list[Customer])

        assert cardinality is Cardinality.MANY
        assert schema.target is Customer
        assert [f.attribute for f in schema.fields] == ["id", "name", "address", "orders", "tags"]
        assert not schema.is_scalar

    def test_single_record(self) -> None:
        _, cardinality = build_schema(Customer)
        assert cardinality is Cardinality.ONE

    def test_sequence_abc(self) -> None:
        schema, cardinality = build_schema(Sequence[Order])
        assert cardinality is Cardinality.MANY
        assert schema.target is Order

    def test_optional_items(self) -> None:
        schema, _ = build_schema(list[Order | None])
        assert schema.target is Order

    def test_field_descriptors(self) -> None:
        schema, _ = build_schema(list[Customer])
        id_, name, address, orders, tags = schema.fields

        assert id_.kind is ValueKind.INT and not id_.nullable
        assert name.kind is ValueKind.TEXT and name.nullable
        assert address.cardinality is Cardinality.ONE and address.nullable
        assert orders.cardinality is Cardinality.MANY and not orders.nullable
        assert tags.cardinality is Cardinality.MANY and tags.nullable
        assert set(schema.children) == {2, 3, 4}
        assert schema.children[4].is_scalar
        assert schema.children[4].fields[0].kind is ValueKind.TEXT

    def test_value_kinds(self) -> None:
        schema, _ = build_schema(list[AllKinds])
        assert [f.kind for f in schema.fields] == [
            ValueKind.BOOL,
            ValueKind.INT,
            ValueKind.FLOAT,
            ValueKind.DECIMAL,
            ValueKind.TEXT,
            ValueKind.DATETIME,
            ValueKind.DATE,
            ValueKind.ANY,
        ]

    def test_scalar_sequence(self) -> None:
        schema, cardinality = build_schema(list[str | None])
        assert schema.is_scalar
        assert schema.fields[0].nullable
        assert cardinality is Cardinality.MANY

    def test_column_override(self) -> None:
        schema, _ = build_schema(list[TaggedUser])
        assert [f.name for f in schema.fields] == ["user_id", "user_name"]
        assert [f.attribute for f in schema.fields] == ["id", "name"]

    def test_delimiter_propagates(self) -> None:
        schema, _ = build_schema(list[Customer], delimiter="__")
        assert schema.delimiter == "__"
        assert schema.children[2].delimiter == "__"

    def test_pydantic_model(self) -> None:
        schema, _ = build_schema(list[PostModel])

        assert schema.is_pydantic
        assert [f.name for f in schema.fields] == ["id", "headline", "author"]
        author = schema.children[2]
        assert author.is_pydantic
        assert author.delimiter == "->"

    def test_plain_class(self) -> None:
        schema, _ = build_schema(list[PlainUser])
        assert [(f.attribute, f.kind) for f in schema.fields] == [
            ("id", ValueKind.INT),
            ("email", ValueKind.TEXT),
        ]


class TestSchemaErrors:
    @pytest.mark.parametrize("target", [int, str, dict, list, list[dict[str, int]], Any])
    def test_unmappable_destinations(self, target: Any) -> None:
        with pytest.raises(SchemaError):
            build_schema(target)

    def test_recursive_type(self) -> None:
        with pytest.raises(SchemaError, match="Recursive"):
            build_schema(list[Node])

    def test_unsupported_field_type(self) -> None:
        @dataclass
        class WithBytes:
            payload: bytes

        with pytest.raises(SchemaError, match="payload"):
            build_schema(list[WithBytes])

    def test_ambiguous_union(self) -> None:
        @dataclass
        class WithUnion:
            value: int | str

        with pytest.raises(SchemaError, match="union"):
            build_schema(list[WithUnion])
