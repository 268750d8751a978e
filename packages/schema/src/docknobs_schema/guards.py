"""Type predicates used by the type-guard filters."""

from __future__ import annotations

import math
import re
from datetime import datetime
from numbers import Number
from re import Pattern
from typing import Any

from .values import DocumentReference, GeoPoint, Timestamp

STORE_TYPES = [
    "Array",
    "Map",
    "Boolean",
    "Number",
    "DocumentReference",
    "GeoPoint",
    "String",
    "Timestamp",
]


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_number(value: Any) -> bool:
    """True for ints and floats other than NaN; booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def is_integer(value: Any) -> bool:
    """True for ints and for finite floats with an integral value (``1.0``)."""
    if not is_number(value):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return True


def is_map(value: Any) -> bool:
    return isinstance(value, dict)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_null(value: Any) -> bool:
    return value is None


def is_document_reference(value: Any) -> bool:
    return isinstance(value, DocumentReference)


def is_geo_point(value: Any) -> bool:
    return isinstance(value, GeoPoint)


def is_timestamp(value: Any) -> bool:
    return isinstance(value, (Timestamp, datetime))


def is_any(value: Any) -> bool:
    """True for every type a document may store, including null."""
    return (
        is_array(value)
        or is_boolean(value)
        or is_document_reference(value)
        or is_geo_point(value)
        or is_map(value)
        or is_number(value)
        or is_string(value)
        or is_timestamp(value)
        or is_null(value)
    )


def is_in_range(minimum: Any, maximum: Any, value: Any) -> bool:
    """Inclusive range check; non-numeric values are never in range."""
    if not is_number(value):
        return False
    return minimum <= value <= maximum


def is_matching(regex: Pattern[str], value: Any) -> bool:
    return isinstance(value, str) and regex.search(value) is not None


def has_length(value: Any) -> bool:
    return hasattr(value, "__len__") and not isinstance(value, Number)


def compile_pattern(pattern: str | Pattern[str]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern
