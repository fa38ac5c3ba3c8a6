"""Scanned column values.

A Cell holds one column's value for one row as a small tagged union and
knows how to coerce it into the types a destination field declares. Cells
are created fresh for every column of every row; getters never mutate.
"""

from __future__ import annotations

import calendar
import math
import re
import struct
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from row_graph.core.exceptions import ConversionError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
UINT32_MAX = 2**32 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1

_MASK64 = 2**64 - 1
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

NULL_UID = "cnull"
TRUE_UID = "ctrue"
FALSE_UID = "cfalse"
_RESERVED_UIDS = frozenset({NULL_UID, TRUE_UID, FALSE_UID})
_TEXT_ESCAPE = "\x00"

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TRUE_TEXT = frozenset({"1", "t", "true"})
_FALSE_TEXT = frozenset({"0", "f", "false"})


class CellKind(Enum):
    """Tag describing which payload slot of a Cell is meaningful."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    TIME = "time"


class ColumnHint(Enum):
    """Value width declared by the driver for a column."""

    UNKNOWN = "unknown"
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    TEXT = "text"
    TIME = "time"


_HINTS_BY_NAME: dict[str, ColumnHint] = {
    "BOOL": ColumnHint.BOOL,
    "BOOLEAN": ColumnHint.BOOL,
    "BIT": ColumnHint.BOOL,
    "TINYINT": ColumnHint.INT32,
    "SMALLINT": ColumnHint.INT32,
    "MEDIUMINT": ColumnHint.INT32,
    "INT": ColumnHint.INT32,
    "INT2": ColumnHint.INT32,
    "INT4": ColumnHint.INT32,
    "SERIAL": ColumnHint.INT32,
    "INTEGER": ColumnHint.INT64,
    "BIGINT": ColumnHint.INT64,
    "INT8": ColumnHint.INT64,
    "BIGSERIAL": ColumnHint.INT64,
    "FLOAT": ColumnHint.FLOAT32,
    "FLOAT4": ColumnHint.FLOAT32,
    "REAL": ColumnHint.FLOAT64,
    "DOUBLE": ColumnHint.FLOAT64,
    "DOUBLE PRECISION": ColumnHint.FLOAT64,
    "FLOAT8": ColumnHint.FLOAT64,
    "NUMERIC": ColumnHint.DECIMAL,
    "DECIMAL": ColumnHint.DECIMAL,
    "CHAR": ColumnHint.TEXT,
    "VARCHAR": ColumnHint.TEXT,
    "NVARCHAR": ColumnHint.TEXT,
    "VARCHAR2": ColumnHint.TEXT,
    "TEXT": ColumnHint.TEXT,
    "STRING": ColumnHint.TEXT,
    "UUID": ColumnHint.TEXT,
    "DATE": ColumnHint.TIME,
    "DATETIME": ColumnHint.TIME,
    "TIMESTAMP": ColumnHint.TIME,
    "TIMESTAMPTZ": ColumnHint.TIME,
}

_UNSIGNED = {ColumnHint.INT32: ColumnHint.UINT32, ColumnHint.INT64: ColumnHint.UINT64}


def hint_for_type_name(type_name: str | None) -> ColumnHint:
    """Map a driver column type name (e.g. 'BIGINT UNSIGNED') to a ColumnHint."""
    if not type_name:
        return ColumnHint.UNKNOWN
    name = re.sub(r"\(.*?\)", "", type_name).strip().upper()
    unsigned = name.endswith(" UNSIGNED")
    if unsigned:
        name = name[: -len(" UNSIGNED")].strip()
    hint = _HINTS_BY_NAME.get(name)
    if hint is None:
        if name.startswith("TIMESTAMP"):
            return ColumnHint.TIME
        return ColumnHint.UNKNOWN
    if unsigned:
        return _UNSIGNED.get(hint, hint)
    return hint


def base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def _float_bits(value: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", value))[0]


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except (OverflowError, struct.error) as e:
        raise ConversionError(f"value {value!r} overflows a 32-bit float") from e


def _epoch_seconds(value: datetime) -> int:
    # Naive timestamps are read as UTC.
    return calendar.timegm(value.utctimetuple())


def _check_range(value: int, low: int, high: int, type_name: str) -> int:
    if value < low or value > high:
        raise ConversionError(f"value {value} out of range for {type_name}")
    return value


class Cell:
    """A tagged container for one scanned column value."""

    __slots__ = ("_hint", "_kind", "_scalar", "_text", "_time", "_type_name")

    def __init__(self, type_name: str = "") -> None:
        self._type_name = type_name
        self._hint = hint_for_type_name(type_name)
        self._kind = CellKind.NULL
        self._scalar: bool | int | float = 0
        self._text = ""
        self._time = ZERO_TIME

    @classmethod
    def from_value(cls, type_name: str, src: Any) -> Cell:
        """Create a cell for the given column type and scan ``src`` into it."""
        cell = cls(type_name)
        cell.scan(src)
        return cell

    def __repr__(self) -> str:
        return f"Cell(type_name={self._type_name!r}, kind={self._kind.value})"

    # --- properties ---

    @property
    def kind(self) -> CellKind:
        return self._kind

    @property
    def hint(self) -> ColumnHint:
        return self._hint

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def is_valid(self) -> bool:
        return self._kind is not CellKind.NULL

    # --- setters ---

    def _reset(self, kind: CellKind) -> None:
        self._kind = kind
        self._scalar = 0
        self._text = ""
        self._time = ZERO_TIME

    def set_null(self) -> None:
        self._reset(CellKind.NULL)

    def set_bool(self, value: bool) -> None:
        self._reset(CellKind.BOOL)
        self._scalar = bool(value)

    def set_int64(self, value: int) -> None:
        """Store an integer.

        Values up to the unsigned 64-bit maximum are accepted so that
        unsigned BIGINT columns survive; anything wider is rejected.
        """
        _check_range(value, INT64_MIN, UINT64_MAX, "a 64-bit integer")
        self._reset(CellKind.INT)
        self._scalar = int(value)

    def set_float64(self, value: float) -> None:
        self._reset(CellKind.FLOAT)
        self._scalar = float(value)

    def set_string(self, value: str) -> None:
        self._reset(CellKind.TEXT)
        self._text = value

    def set_time(self, value: datetime) -> None:
        self._reset(CellKind.TIME)
        self._time = value

    def scan(self, src: Any) -> None:
        """Classify a raw driver value and store it."""
        if src is None:
            self.set_null()
        elif isinstance(src, bool):
            self.set_bool(src)
        elif isinstance(src, int):
            self.set_int64(src)
        elif isinstance(src, float):
            self.set_float64(src)
        elif isinstance(src, Decimal):
            # Kept as text so no digits are lost.
            self.set_string(str(src))
        elif isinstance(src, str):
            self.set_string(src)
        elif isinstance(src, (bytes, bytearray, memoryview)):
            try:
                self.set_string(bytes(src).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise ConversionError(f"cannot decode bytes as UTF-8: {e}") from e
        elif isinstance(src, datetime):
            self.set_time(src)
        elif isinstance(src, date):
            self.set_time(datetime.combine(src, time.min, tzinfo=timezone.utc))
        else:
            raise ConversionError(f"unsupported scan type {type(src).__name__}")

    # --- getters ---

    def bool(self) -> bool:
        kind = self._kind
        if kind is CellKind.NULL:
            return False
        if kind in (CellKind.BOOL, CellKind.INT, CellKind.FLOAT):
            return bool(self._scalar)
        if kind is CellKind.TEXT:
            text = self._text.strip().lower()
            if text in _TRUE_TEXT:
                return True
            if text in _FALSE_TEXT:
                return False
            raise ConversionError(f"cannot parse {self._text!r} as a boolean")
        raise ConversionError("cannot convert a timestamp to a boolean")

    def int64(self) -> int:
        return _check_range(self._integer(), INT64_MIN, INT64_MAX, "int64")

    def integer(self) -> int:
        """Return the value as an int, signed or unsigned 64-bit."""
        return _check_range(self._integer(), INT64_MIN, UINT64_MAX, "a 64-bit integer")

    def int32(self) -> int:
        return _check_range(self._integer(), INT32_MIN, INT32_MAX, "int32")

    def uint64(self) -> int:
        return _check_range(self._integer(), 0, UINT64_MAX, "uint64")

    def uint32(self) -> int:
        return _check_range(self._integer(), 0, UINT32_MAX, "uint32")

    def float64(self) -> float:
        kind = self._kind
        if kind is CellKind.NULL:
            return 0.0
        if kind in (CellKind.BOOL, CellKind.INT, CellKind.FLOAT):
            return float(self._scalar)
        if kind is CellKind.TEXT:
            try:
                return float(self._text)
            except ValueError as e:
                raise ConversionError(f"cannot parse {self._text!r} as a float") from e
        return float(_epoch_seconds(self._time))

    def float32(self) -> float:
        return _to_float32(self.float64())

    def string(self) -> str:
        kind = self._kind
        if kind is CellKind.NULL:
            return ""
        if kind is CellKind.TEXT:
            return self._text
        if kind is CellKind.BOOL:
            return "true" if self._scalar else "false"
        if kind is CellKind.INT:
            return str(self._scalar)
        if kind is CellKind.FLOAT:
            return repr(self._scalar)
        return self._time.isoformat()

    def time(self) -> datetime:
        kind = self._kind
        if kind is CellKind.NULL:
            return ZERO_TIME
        if kind is CellKind.TIME:
            return self._time
        if kind in (CellKind.INT, CellKind.FLOAT):
            try:
                return datetime.fromtimestamp(self._scalar, tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as e:
                raise ConversionError(f"{self._scalar!r} is not a valid epoch time") from e
        if kind is CellKind.TEXT:
            try:
                return datetime.fromisoformat(self._text)
            except ValueError as e:
                raise ConversionError(f"cannot parse {self._text!r} as a timestamp") from e
        raise ConversionError("cannot convert a boolean to a timestamp")

    def decimal(self) -> Decimal:
        kind = self._kind
        if kind is CellKind.NULL:
            return Decimal(0)
        if kind is CellKind.TEXT:
            try:
                return Decimal(self._text)
            except InvalidOperation as e:
                raise ConversionError(f"cannot parse {self._text!r} as a decimal") from e
        if kind is CellKind.INT:
            return Decimal(self._scalar)
        if kind is CellKind.FLOAT:
            return Decimal(repr(self._scalar))
        raise ConversionError(f"cannot convert a {kind.value} value to a decimal")

    def epoch_seconds(self) -> int:
        """Return the stored timestamp as whole seconds since the Unix epoch."""
        return _epoch_seconds(self.time())

    def _integer(self) -> int:
        kind = self._kind
        if kind is CellKind.NULL:
            return 0
        if kind in (CellKind.BOOL, CellKind.INT):
            return int(self._scalar)
        if kind is CellKind.FLOAT:
            if math.isnan(self._scalar) or math.isinf(self._scalar):
                raise ConversionError(f"cannot convert {self._scalar!r} to an integer")
            return int(self._scalar)
        if kind is CellKind.TEXT:
            try:
                return int(self._text)
            except ValueError:
                pass
            try:
                value = Decimal(self._text)
            except InvalidOperation as e:
                raise ConversionError(f"cannot parse {self._text!r} as an integer") from e
            if not value.is_finite() or value != value.to_integral_value():
                raise ConversionError(f"cannot parse {self._text!r} as an integer")
            return int(value)
        return _epoch_seconds(self._time)

    # --- nullable getters ---

    def null_bool(self) -> bool | None:
        return self.bool() if self.is_valid else None

    def null_int64(self) -> int | None:
        return self.int64() if self.is_valid else None

    def null_int32(self) -> int | None:
        return self.int32() if self.is_valid else None

    def null_uint64(self) -> int | None:
        return self.uint64() if self.is_valid else None

    def null_uint32(self) -> int | None:
        return self.uint32() if self.is_valid else None

    def null_float64(self) -> float | None:
        return self.float64() if self.is_valid else None

    def null_float32(self) -> float | None:
        return self.float32() if self.is_valid else None

    def null_string(self) -> str | None:
        return self.string() if self.is_valid else None

    def null_time(self) -> datetime | None:
        return self.time() if self.is_valid else None

    def null_decimal(self) -> Decimal | None:
        return self.decimal() if self.is_valid else None

    # --- reflection helpers ---

    def as_value(self) -> Any:
        """Return the value in the width declared by the column type hint.

        Null cells return None. Columns without a recognised hint return the
        stored payload as scanned.
        """
        if not self.is_valid:
            return None
        hint = self._hint
        if hint is ColumnHint.BOOL:
            return self.bool()
        if hint is ColumnHint.INT32:
            return self.int32()
        if hint is ColumnHint.INT64:
            return self.int64()
        if hint is ColumnHint.UINT32:
            return self.uint32()
        if hint is ColumnHint.UINT64:
            return self.uint64()
        if hint is ColumnHint.FLOAT32:
            return self.float32()
        if hint is ColumnHint.FLOAT64:
            return self.float64()
        if hint is ColumnHint.DECIMAL:
            return self.decimal()
        if hint is ColumnHint.TEXT:
            return self.string()
        if hint is ColumnHint.TIME:
            return self.time()
        return self._payload()

    def _payload(self) -> Any:
        if self._kind is CellKind.TEXT:
            return self._text
        if self._kind is CellKind.TIME:
            return self._time
        return self._scalar

    def uid(self) -> str:
        """Return an identity token for this value.

        Tokens are only compared against each other; equal logical values
        yield equal tokens whatever width they were scanned with.
        """
        kind = self._kind
        if kind is CellKind.NULL:
            return NULL_UID
        if kind is CellKind.BOOL:
            return TRUE_UID if self._scalar else FALSE_UID
        if kind is CellKind.TEXT:
            text = self._text
            if text in _RESERVED_UIDS or text.startswith(_TEXT_ESCAPE):
                return _TEXT_ESCAPE + text
            return text
        if kind is CellKind.INT:
            return base36(int(self._scalar) & _MASK64)
        if kind is CellKind.FLOAT:
            return base36(_float_bits(self._scalar))
        return base36(_epoch_seconds(self._time) & _MASK64)
