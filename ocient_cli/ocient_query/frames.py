"""Convert collection-format rows into typed, column-oriented frames.

Column types are inferred from the first row only and every later row is
coerced into that type. Coercion never fails by default: a cell that does not
fit its column becomes the type's zero value (``0.0``, ``""``, ``False`` or
the zero instant). Dashboards keep rendering when a column carries mixed data,
at the cost of hiding bad values; ``strict=True`` raises ``ConversionError``
instead for numeric, boolean and timestamp mismatches.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ocient_cli.shared.exceptions import ConversionError

from . import timestamps
from .types import BOOLEAN, FLOAT, TEXT, TIMESTAMP, Field, Frame, zero_value
from .values import JsonBool, JsonNull, JsonNumber, JsonScalar, JsonString, decode_scalar, format_scalar

FRAME_NAME = "response"


def infer_column_type(scalar: JsonScalar) -> str:
    """Classify a sampled value; timestamp text refines the string variant."""
    if isinstance(scalar, JsonString) and timestamps.is_timestamp(scalar.value):
        return TIMESTAMP
    if isinstance(scalar, JsonNumber):
        return FLOAT
    if isinstance(scalar, JsonBool):
        return BOOLEAN
    return TEXT


def infer_schema(first_row: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Return ``(column, type)`` pairs in the row's key order."""
    return [(column, infer_column_type(decode_scalar(value))) for column, value in first_row.items()]


def build_frame(rows: Sequence[Mapping[str, Any]], *, strict: bool = False) -> Frame:
    """Build a frame with one field per key of the first row."""
    if not rows:
        return Frame(name=FRAME_NAME)

    schema = infer_schema(rows[0])
    columns: dict[str, list[Any]] = {name: [] for name, _ in schema}
    for row_index, row in enumerate(rows):
        for name, column_type in schema:
            scalar = decode_scalar(row.get(name))
            columns[name].append(
                coerce(scalar, column_type, strict=strict, column=name, row_index=row_index)
            )

    fields = tuple(Field(name=name, type=column_type, values=columns[name]) for name, column_type in schema)
    return Frame(name=FRAME_NAME, fields=fields)


def coerce(
    scalar: JsonScalar,
    column_type: str,
    *,
    strict: bool = False,
    column: str = "",
    row_index: int = 0,
) -> Any:
    """Coerce one decoded cell into ``column_type``.

    Nulls and missing cells always resolve to the zero value, even in strict
    mode; only present values of the wrong shape count as conversion errors.
    """
    if column_type == TEXT:
        if isinstance(scalar, JsonNull):
            return ""
        return format_scalar(scalar)

    if isinstance(scalar, JsonNull):
        return zero_value(column_type)

    if column_type == FLOAT and isinstance(scalar, JsonNumber):
        return scalar.value
    if column_type == BOOLEAN and isinstance(scalar, JsonBool):
        return scalar.value
    if column_type == TIMESTAMP and isinstance(scalar, JsonString):
        parsed = timestamps.parse_timestamp(scalar.value)
        if parsed is not None:
            return parsed

    if strict:
        raise ConversionError(column, row_index, _raw(scalar), column_type)
    return zero_value(column_type)


def _raw(scalar: JsonScalar) -> Any:
    return getattr(scalar, "value", None)
