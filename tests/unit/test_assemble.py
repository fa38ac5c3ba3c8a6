"""Unit tests for destination assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from pydantic import BaseModel

from row_graph.core.exceptions import ColumnMismatchError, NullConstraintError
from row_graph.mapping.allocate import allocate_columns
from row_graph.mapping.assemble import assemble
from row_graph.mapping.introspect import build_schema
from row_graph.mapping.resolver import Element, Resolver, load_row
from row_graph.mapping.schema import Column
from row_graph.value.cell import Cell


@dataclass
class User:
    ID: int
    Name: str


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Order:
    id: int


@dataclass
class Customer:
    id: int
    address: Address
    orders: list[Order] | None = None


@dataclass
class Member:
    id: int
    address: Address | None = None
    orders: list[Order] = field(default_factory=list)


class UserModel(BaseModel):
    id: int
    name: str


def _resolve(target: Any, columns: list[str], rows: list[tuple[Any, ...]]) -> Any:
    schema, cardinality = build_schema(target)
    allocate_columns(schema, {name: Column(name=name, index=i) for i, name in enumerate(columns)})
    resolver = Resolver()
    for i, row in enumerate(rows):
        load_row(schema, [Cell.from_value("", v) for v in row], resolver, i)
    return assemble(schema, resolver, cardinality)


class TestAssemble:
    def test_hand_built_resolver(self) -> None:
        schema, cardinality = build_schema(User)
        resolver = Resolver()
        resolver.add("1", Element({0: 1, 1: "John Doe"}))

        assert assemble(schema, resolver, cardinality) == User(ID=1, Name="John Doe")

    def test_single_destination_without_rows(self) -> None:
        assert _resolve(User, ["ID", "Name"], []) is None

    def test_sequence_destination_without_rows(self) -> None:
        assert _resolve(list[User], ["ID", "Name"], []) == []

    def test_empty_optional_sequence_is_none(self) -> None:
        result = _resolve(
            list[Customer],
            ["id", "address_street", "address_city", "orders_id"],
            [(1, "Main", "Town", None)],
        )
        assert result == [Customer(id=1, address=Address("Main", "Town"), orders=None)]

    def test_missing_optional_record_is_none(self) -> None:
        result = _resolve(
            list[Member],
            ["id", "address_street", "address_city", "orders_id"],
            [(1, None, None, 5), (1, None, None, 6)],
        )
        assert result == [Member(id=1, address=None, orders=[Order(5), Order(6)])]

    def test_missing_required_record(self) -> None:
        with pytest.raises(NullConstraintError, match="address"):
            _resolve(
                list[Customer],
                ["id", "address_street", "address_city"],
                [(1, None, None)],
            )

    def test_unbound_required_field(self) -> None:
        with pytest.raises(ColumnMismatchError, match="User"):
            _resolve(list[User], ["ID"], [(1,)])

    def test_pydantic_destination(self) -> None:
        result = _resolve(list[UserModel], ["id", "name"], [(1, "Alice"), (2, "Bob")])
        assert result == [UserModel(id=1, name="Alice"), UserModel(id=2, name="Bob")]

    def test_pydantic_validation_failure(self) -> None:
        with pytest.raises(ColumnMismatchError, match="UserModel"):
            _resolve(list[UserModel], ["id"], [(1,)])
