"""Closed decoding of JSON scalars returned in the collection format."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class JsonNumber:
    value: float


@dataclass(frozen=True, slots=True)
class JsonString:
    value: str


@dataclass(frozen=True, slots=True)
class JsonBool:
    value: bool


@dataclass(frozen=True, slots=True)
class JsonNull:
    pass


JsonScalar = Union[JsonNumber, JsonString, JsonBool, JsonNull]

NULL = JsonNull()


def decode_scalar(raw: Any) -> JsonScalar:
    """Decode a value from ``json.loads`` into one of the four variants.

    ``bool`` is tested before numbers because it subclasses ``int``. Nested
    arrays and objects, and integers too large for a float, are kept as text.
    """
    if raw is None:
        return NULL
    if isinstance(raw, bool):
        return JsonBool(raw)
    if isinstance(raw, float):
        return JsonNumber(raw)
    if isinstance(raw, int):
        try:
            return JsonNumber(float(raw))
        except OverflowError:
            return JsonString(str(raw))
    if isinstance(raw, str):
        return JsonString(raw)
    return JsonString(json.dumps(raw, separators=(",", ":"), sort_keys=False, default=str))


def format_number(value: float) -> str:
    """Shortest text for a float; integral values print without ``.0``."""
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def format_scalar(scalar: JsonScalar) -> str:
    """Generic text rendering used when a non-text value lands in a text slot."""
    if isinstance(scalar, JsonString):
        return scalar.value
    if isinstance(scalar, JsonNumber):
        return format_number(scalar.value)
    if isinstance(scalar, JsonBool):
        return "true" if scalar.value else "false"
    return ""


def format_value(raw: Any) -> str:
    return format_scalar(decode_scalar(raw))
