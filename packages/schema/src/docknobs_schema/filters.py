"""Catalogue of filter constructors.

A filter constructor takes configuration (a bound, a pattern, an optional
error template) and returns a filter: a callable ``value -> value`` that
either returns the value, possibly transformed, or raises
``FieldValidationError``. Error templates contain ``{label}``, which the
Field running the filter replaces with its label.

Constructors are pure: the same arguments always produce an equivalent
filter, and filters keep no state between calls.

The catalogue lives in ``FILTERS``, a registry consulted by ``Field.apply``.
Additional filters can be added with ``register_filter``:

    ```python
    def slug(error="{label} must be a slug."):
        pattern = re.compile(r"^[a-z0-9-]+$")

        def check(value):
            if not isinstance(value, str) or not pattern.match(value):
                raise FieldValidationError(error, value=value)
            return value

        return check

    register_filter("slug", slug)
    field("handle").string().apply("slug")
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from re import Pattern
from typing import Any

from docknobs_common import Registry

from . import dates, guards
from .exceptions import FieldValidationError, StructureError

logger = logging.getLogger(__name__)

Filter = Callable[[Any], Any]
FilterConstructor = Callable[..., Filter]

EMAIL_PATTERN = guards.compile_pattern(r"^[-\w.+]+@[-\w.+]+\.\w{2,}$")


def _guard(predicate: Callable[[Any], bool], error: str) -> Filter:
    def check(value: Any) -> Any:
        if not predicate(value):
            raise FieldValidationError(error, value=value)
        return value

    return check


# Type guards

def any_(
    error: str = (
        "{label} must be of one of the types accepted by the store: "
        + ", ".join(guards.STORE_TYPES) + "."
    ),
) -> Filter:
    return _guard(guards.is_any, error)


def array(error: str = "{label} must be an Array.") -> Filter:
    return _guard(guards.is_array, error)


def boolean(error: str = "{label} must be a Boolean.") -> Filter:
    return _guard(guards.is_boolean, error)


def integer(error: str = "{label} must be an Integer Number.") -> Filter:
    return _guard(guards.is_integer, error)


def number(error: str = "{label} must be a Number.") -> Filter:
    return _guard(guards.is_number, error)


def object_(error: str = "{label} must be a Map.") -> Filter:
    return _guard(guards.is_map, error)


def string(error: str = "{label} must be a String.") -> Filter:
    return _guard(guards.is_string, error)


def reference(error: str = "{label} must be an instance of DocumentReference.") -> Filter:
    return _guard(guards.is_document_reference, error)


def geopoint(error: str = "{label} must be an instance of GeoPoint.") -> Filter:
    return _guard(guards.is_geo_point, error)


def timestamp(error: str = "{label} must be an instance of Timestamp.") -> Filter:
    return _guard(guards.is_timestamp, error)


# Comparison

def _same_value(expected: Any, value: Any) -> bool:
    # True == 1 in Python; booleans only match booleans
    return guards.is_boolean(expected) == guards.is_boolean(value) and value == expected


def equal(compare: Any, error: str | None = None) -> Filter:
    error = error or f"{{label}} must equal {compare}."
    return _guard(lambda value: _same_value(compare, value), error)


def one_of(acceptable_values: list[Any], error: str | None = None) -> Filter:
    """Accept only the listed scalar values.

    Raises:
        StructureError: If ``acceptable_values`` is empty, not a list, or
            holds anything other than booleans, numbers and strings
    """
    if not isinstance(acceptable_values, (list, tuple)) or not acceptable_values:
        raise StructureError(
            "Field.one_of(): acceptable_values must be a list with at least one item."
        )
    if not all(
        guards.is_boolean(v) or guards.is_number(v) or guards.is_string(v)
        for v in acceptable_values
    ):
        raise StructureError(
            "Field.one_of(): each of acceptable_values must be of one of the "
            "accepted types (Boolean, Number, String)."
        )

    allowed = tuple(acceptable_values)
    error = error or (
        f"{{label}} must be one of the accepted values "
        f"({', '.join(str(v) for v in allowed)})."
    )

    def is_one_of(value: Any) -> bool:
        return any(_same_value(v, value) for v in allowed)

    return _guard(is_one_of, error)


def min_(minimum: float, error: str | None = None) -> Filter:
    error = error or f"{{label}} must be a Number greater than or equal to {minimum}."
    return _guard(lambda value: guards.is_in_range(minimum, float("inf"), value), error)


def max_(maximum: float, error: str | None = None) -> Filter:
    error = error or f"{{label}} must be a Number less than or equal to {maximum}."
    return _guard(lambda value: guards.is_in_range(float("-inf"), maximum, value), error)


def range_(minimum: float, maximum: float, error: str | None = None) -> Filter:
    if minimum > maximum:
        raise StructureError(
            f"Field.range(): min ({minimum}) cannot be greater than max ({maximum})."
        )
    error = error or f"{{label}} must be a Number between {minimum} and {maximum}."
    return _guard(lambda value: guards.is_in_range(minimum, maximum, value), error)


def _date_bound(name: str, bound: Any):
    parsed = dates.to_aware_datetime(bound)
    if parsed is None:
        raise StructureError(
            f"Field.{name}(): {bound!r} is not a date, datetime, Timestamp or ISO-8601 string."
        )
    return parsed


def after(date: Any, error: str | None = None) -> Filter:
    bound = _date_bound("after", date)
    error = error or f"{{label}} must be after {date}."

    def is_after(value: Any) -> bool:
        parsed = dates.to_aware_datetime(value)
        return parsed is not None and parsed > bound

    return _guard(is_after, error)


def before(date: Any, error: str | None = None) -> Filter:
    bound = _date_bound("before", date)
    error = error or f"{{label}} must be before {date}."

    def is_before(value: Any) -> bool:
        parsed = dates.to_aware_datetime(value)
        return parsed is not None and parsed < bound

    return _guard(is_before, error)


# Shape

def length(size: int, error: str | None = None) -> Filter:
    error = error or f"{{label}} must have length of {size}."
    return _guard(lambda value: guards.has_length(value) and len(value) == size, error)


def min_length(size: int, error: str | None = None) -> Filter:
    error = error or f"{{label}} must have length of at least {size}."
    return _guard(lambda value: guards.has_length(value) and len(value) >= size, error)


def max_length(size: int, error: str | None = None) -> Filter:
    error = error or f"{{label}} must have length of at most {size}."
    return _guard(lambda value: guards.has_length(value) and len(value) <= size, error)


def match(pattern: str | Pattern[str], error: str | None = None) -> Filter:
    regex = guards.compile_pattern(pattern)
    error = error or f"{{label}} must match {regex.pattern} pattern."
    return _guard(lambda value: guards.is_matching(regex, value), error)


# Transforms

def _string_transform(transform: Callable[[str], str], error: str) -> Filter:
    def apply(value: Any) -> Any:
        if not isinstance(value, str):
            raise FieldValidationError(error, value=value)
        return transform(value)

    return apply


def trim(error: str = "Couldn't trim {label}.") -> Filter:
    return _string_transform(str.strip, error)


def to_lower_case(error: str = "Couldn't turn {label} to lower case.") -> Filter:
    return _string_transform(str.lower, error)


def to_upper_case(error: str = "Couldn't turn {label} to upper case.") -> Filter:
    return _string_transform(str.upper, error)


def email(error: str = "{label} must be a valid email.") -> Filter:
    def check(value: Any) -> Any:
        if not guards.is_matching(EMAIL_PATTERN, value):
            raise FieldValidationError(error, value=value)
        return value.lower()

    return check


def date(format: str | None = None, error: str | None = None) -> Filter:
    """Accept date strings, strictly matching ``format`` when one is given.

    Raises:
        StructureError: If ``format`` uses a token ``dates`` cannot parse
    """
    if format and "%" not in format:
        try:
            dates.compile_format(format)
        except ValueError as e:
            raise StructureError(f"Field.date(): {e}.") from e
    error = error or (
        f"{{label}} must be a valid Date in {format} format."
        if format
        else "{label} must be a valid Date."
    )

    if format:
        return _guard(
            lambda value: isinstance(value, str) and dates.parse_strict(value, format) is not None,
            error,
        )
    return _guard(lambda value: dates.parse_iso(value) is not None, error)


@dataclass(frozen=True)
class FilterSpec:
    """A named filter constructor.

    Attributes:
        name: Name the builder uses to look the filter up
        constructor: Callable producing the filter from its configuration
        defines_type: Whether applying it fixes the field's fundamental type
    """

    name: str
    constructor: FilterConstructor
    defines_type: bool = False


class FilterRegistry(Registry[FilterSpec]):
    """Registry of filter constructors keyed by name."""

    def __init__(self) -> None:
        super().__init__("filters")

    def add(
        self,
        name: str,
        constructor: FilterConstructor,
        defines_type: bool = False,
        allow_overwrite: bool = False,
    ) -> FilterSpec:
        if not name or not callable(constructor):
            raise StructureError(
                "A filter needs a name and a callable constructor.",
                context={"name": name},
            )
        spec = FilterSpec(name, constructor, defines_type)
        self.register(name, spec, allow_overwrite=allow_overwrite)
        logger.debug(f"Registered filter '{name}' (defines_type={defines_type})")
        return spec

    def lookup(self, name: str) -> FilterSpec:
        spec = self.get_optional(name)
        if spec is None:
            raise StructureError(
                f"Unknown filter: {name}",
                context={"name": name, "available": self.list_keys()},
            )
        return spec


FILTERS = FilterRegistry()

for _name, _constructor, _defines_type in (
    ("any", any_, True),
    ("array", array, True),
    ("boolean", boolean, True),
    ("date", date, True),
    ("geopoint", geopoint, True),
    ("integer", integer, True),
    ("number", number, True),
    ("object", object_, True),
    ("one_of", one_of, True),
    ("reference", reference, True),
    ("string", string, True),
    ("timestamp", timestamp, True),
    ("after", after, False),
    ("before", before, False),
    ("email", email, False),
    ("equal", equal, False),
    ("length", length, False),
    ("match", match, False),
    ("max", max_, False),
    ("max_length", max_length, False),
    ("min", min_, False),
    ("min_length", min_length, False),
    ("range", range_, False),
    ("to_lower_case", to_lower_case, False),
    ("to_upper_case", to_upper_case, False),
    ("trim", trim, False),
):
    FILTERS.add(_name, _constructor, _defines_type)


def register_filter(
    name: str,
    constructor: FilterConstructor,
    defines_type: bool = False,
    allow_overwrite: bool = False,
) -> FilterSpec:
    """Add a filter constructor to the catalogue used by every Field."""
    return FILTERS.add(name, constructor, defines_type, allow_overwrite)
