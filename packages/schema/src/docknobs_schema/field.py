"""Field definition with a fluent builder API.

A Field describes the contract for one value: its fundamental type, whether
it may be null or omitted, a default, and an ordered pipeline of filters.
Fields nest through ``object_of`` and ``array_of``.

Example:
    ```python
    address = field("address").object_of({
        "street": field("street").string().trim(),
        "city": field("city").string(),
        "zip": field("zip").string().match(r"^\\d{5}$").optional(),
    })

    outcome = await address.validate({"street": " Main St ", "city": "Springfield"})
    outcome.value
    # {'street': 'Main St', 'city': 'Springfield'}
    ```

Builder methods mutate the Field and return it. Once the defining code is
done a Field is only read, so one instance can serve any number of
concurrent validations.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from re import Pattern
from typing import Any

from . import filters
from .exceptions import FieldValidationError, RequiredFieldError, StructureError
from .filters import FILTERS, Filter
from .values import MISSING, Outcome


async def gather_outcomes(validations: Iterable[Awaitable[Outcome]]) -> list[Outcome]:
    """Run validations concurrently and return their outcomes in order.

    Every validation runs to completion. If any failed, the first failure
    in input order is raised, so one representative error surfaces and no
    sibling failure is left unretrieved.
    """
    results = await asyncio.gather(*validations, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class Field:
    """Validation contract for one named value."""

    def __init__(self, label: str):
        """Initialize the field.

        Args:
            label: Name used in error messages

        Raises:
            StructureError: If label is empty or not a string
        """
        if not label or not isinstance(label, str):
            raise StructureError("Field label must be defined.")

        self._label = label
        self._pipeline: list[Filter] = []
        self._object_of: dict[str, Field] | None = None
        self._array_of: Field | None = None
        self._default: Any = MISSING
        self._is_type_defined = False
        self._is_nullable = False
        self._is_optional = False

    @property
    def label(self) -> str:
        return self._label

    @property
    def is_type_defined(self) -> bool:
        return self._is_type_defined

    @property
    def is_nullable(self) -> bool:
        return self._is_nullable

    @property
    def is_optional(self) -> bool:
        return self._is_optional

    @property
    def default_value(self) -> Any:
        return self._default

    @property
    def pipeline(self) -> tuple[Filter, ...]:
        return tuple(self._pipeline)

    @property
    def object_of_fields(self) -> Mapping[str, Field] | None:
        return self._object_of

    @property
    def array_of_field(self) -> Field | None:
        return self._array_of

    async def validate(self, value: Any = MISSING) -> Outcome:
        """Validate a value against this field.

        Steps, each short-circuiting the rest:

        1. An absent value is replaced by the default, if one is set.
           Callable defaults are called on every validation.
        2. Optional and still absent: resolve to absent.
        3. Nullable and null or absent: resolve to null.
        4. Still absent or null: fail as required.
        5. Run the filter pipeline in order.
        6. ``object_of``: validate each nested field against its key,
           leaving out keys that resolve to absent.
        7. ``array_of``: validate each element, leaving out elements that
           resolve to absent.

        Args:
            value: Value to validate; ``MISSING`` when never supplied

        Returns:
            Outcome of the validation

        Raises:
            FieldValidationError: If the value, or any nested value, is invalid
        """
        if self._default is not MISSING and value is MISSING:
            value = self._default() if callable(self._default) else self._default

        if self._is_optional and value is MISSING:
            return Outcome.absent()

        if self._is_nullable and (value is None or value is MISSING):
            return Outcome.null()

        if value is None or value is MISSING:
            raise RequiredFieldError(self._label)

        value = await self._run_pipeline(value)

        if self._object_of is not None:
            value = await self._validate_object(self._object_of, value)

        if self._array_of is not None:
            value = await self._validate_array(self._array_of, value)

        return Outcome.present(value)

    async def clean(self, value: Any = MISSING) -> Any:
        """Validate and return the plain value (``None`` or ``MISSING`` when not present)."""
        outcome = await self.validate(value)
        return outcome.unwrap()

    async def _run_pipeline(self, value: Any) -> Any:
        for step in self._pipeline:
            try:
                value = step(value)
                if inspect.isawaitable(value):
                    value = await value
            except FieldValidationError as error:
                raise error.bind(self._label)
        return value

    @staticmethod
    async def _validate_object(fields: Mapping[str, Field], value: Mapping[str, Any]) -> dict[str, Any]:
        names = list(fields)
        outcomes = await gather_outcomes(
            fields[name].validate(value.get(name, MISSING)) for name in names
        )
        return {
            name: outcome.value
            for name, outcome in zip(names, outcomes)
            if not outcome.is_absent
        }

    @staticmethod
    async def _validate_array(item_field: Field, value: Iterable[Any]) -> list[Any]:
        outcomes = await gather_outcomes(item_field.validate(item) for item in value)
        return [outcome.value for outcome in outcomes if not outcome.is_absent]

    def _define_type(self) -> None:
        if self._is_type_defined:
            raise StructureError(
                "Type has already been defined.",
                context={"label": self._label},
            )
        self._is_type_defined = True

    def _add(self, step: Filter) -> Field:
        self._pipeline.append(step)
        return self

    def apply(self, name: str, *args: Any, **kwargs: Any) -> Field:
        """Append the registered filter ``name`` built with the given arguments.

        Raises:
            StructureError: If the filter is unknown, or defines a type on a
                field whose type is already defined
        """
        spec = FILTERS.lookup(name)
        if spec.defines_type:
            self._define_type()
        return self._add(spec.constructor(*args, **kwargs))

    def _apply(self, name: str, *args: Any, error: str | None = None) -> Field:
        if error is None:
            return self.apply(name, *args)
        return self.apply(name, *args, error=error)

    def custom(self, step: Callable[[Any], Any]) -> Field:
        """Append an arbitrary (sync or async) filter at this point of the pipeline."""
        if not callable(step):
            raise StructureError(
                "Field.custom(): filter must be callable.",
                context={"label": self._label},
            )
        return self._add(step)

    def default(self, value: Any) -> Field:
        """Use ``value`` (or its result, if callable) when input is absent."""
        self._default = value
        return self

    def nullable(self) -> Field:
        self._is_nullable = True
        return self

    def optional(self) -> Field:
        self._is_optional = True
        return self

    def array_of(self, item: Field, error: str | None = None) -> Field:
        """Define the field as an array whose elements match ``item``."""
        if not isinstance(item, Field):
            raise StructureError(
                "Field.array_of(): item must be a Field.",
                context={"label": self._label},
            )
        self._define_type()
        self._array_of = item
        return self._add(filters.array() if error is None else filters.array(error))

    def object_of(self, fields: Mapping[str, Field], error: str | None = None) -> Field:
        """Define the field as a map whose entries match ``fields``."""
        if not isinstance(fields, Mapping) or not all(
            isinstance(f, Field) for f in fields.values()
        ):
            raise StructureError(
                "Field.object_of(): fields must be a mapping of Fields.",
                context={"label": self._label},
            )
        self._define_type()
        self._object_of = dict(fields)
        return self._add(filters.object_() if error is None else filters.object_(error))

    # Type-defining filters

    def any(self, error: str | None = None) -> Field:
        return self._apply("any", error=error)

    def array(self, error: str | None = None) -> Field:
        return self._apply("array", error=error)

    def boolean(self, error: str | None = None) -> Field:
        return self._apply("boolean", error=error)

    def date(self, format: str | None = None, error: str | None = None) -> Field:
        return self._apply("date", format, error=error)

    def geopoint(self, error: str | None = None) -> Field:
        return self._apply("geopoint", error=error)

    def integer(self, error: str | None = None) -> Field:
        return self._apply("integer", error=error)

    def number(self, error: str | None = None) -> Field:
        return self._apply("number", error=error)

    def object(self, error: str | None = None) -> Field:
        return self._apply("object", error=error)

    def one_of(self, acceptable_values: list[Any], error: str | None = None) -> Field:
        return self._apply("one_of", acceptable_values, error=error)

    def reference(self, error: str | None = None) -> Field:
        return self._apply("reference", error=error)

    def string(self, error: str | None = None) -> Field:
        return self._apply("string", error=error)

    def timestamp(self, error: str | None = None) -> Field:
        return self._apply("timestamp", error=error)

    # Constraints and transforms

    def after(self, date: Any, error: str | None = None) -> Field:
        return self._apply("after", date, error=error)

    def before(self, date: Any, error: str | None = None) -> Field:
        return self._apply("before", date, error=error)

    def email(self, error: str | None = None) -> Field:
        return self._apply("email", error=error)

    def equal(self, compare: Any, error: str | None = None) -> Field:
        return self._apply("equal", compare, error=error)

    def length(self, size: int, error: str | None = None) -> Field:
        return self._apply("length", size, error=error)

    def match(self, pattern: str | Pattern[str], error: str | None = None) -> Field:
        return self._apply("match", pattern, error=error)

    def max(self, maximum: float, error: str | None = None) -> Field:
        return self._apply("max", maximum, error=error)

    def max_length(self, size: int, error: str | None = None) -> Field:
        return self._apply("max_length", size, error=error)

    def min(self, minimum: float, error: str | None = None) -> Field:
        return self._apply("min", minimum, error=error)

    def min_length(self, size: int, error: str | None = None) -> Field:
        return self._apply("min_length", size, error=error)

    def range(self, minimum: float, maximum: float, error: str | None = None) -> Field:
        return self._apply("range", minimum, maximum, error=error)

    def to_lower_case(self, error: str | None = None) -> Field:
        return self._apply("to_lower_case", error=error)

    def to_upper_case(self, error: str | None = None) -> Field:
        return self._apply("to_upper_case", error=error)

    def trim(self, error: str | None = None) -> Field:
        return self._apply("trim", error=error)

    def __repr__(self) -> str:
        flags = [
            name
            for name, enabled in (
                ("nullable", self._is_nullable),
                ("optional", self._is_optional),
            )
            if enabled
        ]
        return (
            f"Field({self._label!r}, filters={len(self._pipeline)}"
            + (f", {', '.join(flags)}" if flags else "")
            + ")"
        )


def field(label: str) -> Field:
    """Create a Field builder."""
    return Field(label)
