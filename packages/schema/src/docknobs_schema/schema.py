"""Document schema: a named collection of Fields.

``Schema.validate`` checks a whole document. ``Schema.validate_selected``
checks only the top-level fields touched by a set of changed paths and
passes every other key through as it is, which keeps partial writes cheap
while still re-checking the whole of any field that was touched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from .exceptions import StructureError
from .field import Field, gather_outcomes
from .values import MISSING

logger = logging.getLogger(__name__)


class Schema:
    """Mapping of field name to Field describing one document shape.

    Example:
        ```python
        users = schema({
            "name": field("name").string().trim(),
            "email": field("email").string().to_lower_case().email(),
            "age": field("age").integer().min(0).optional(),
        })

        document = await users.validate({"name": " Ada ", "email": "ADA@x.org"})
        # {'name': 'Ada', 'email': 'ada@x.org'}
        ```
    """

    def __init__(self, fields: Mapping[str, Field]):
        """Initialize schema.

        Args:
            fields: Mapping of field name to Field

        Raises:
            StructureError: If fields is not a mapping of Field instances
        """
        if not isinstance(fields, Mapping):
            raise StructureError("Schema fields must be a mapping of name to Field.")
        for name, definition in fields.items():
            if not isinstance(name, str) or not name:
                raise StructureError(f"Schema field names must be non-empty strings: {name!r}")
            if not isinstance(definition, Field):
                raise StructureError(
                    f"Schema field '{name}' must be a Field, got {type(definition).__name__}",
                    context={"field": name},
                )
        self._fields = MappingProxyType(dict(fields))

    @property
    def fields(self) -> Mapping[str, Field]:
        return self._fields

    def names(self) -> list[str]:
        return list(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({', '.join(self._fields)})"

    @staticmethod
    def top_level_names(changed_paths: Iterable[str]) -> set[str]:
        """Return the first dot-segment of every changed path."""
        return {path.split(".", 1)[0] for path in changed_paths if path}

    async def validate(self, document: dict[str, Any]) -> dict[str, Any]:
        """Validate every declared field of a document.

        Args:
            document: Document data

        Returns:
            Validated document holding the keys whose fields were not absent

        Raises:
            StructureError: If document is not a dict
            FieldValidationError: If any field is invalid
        """
        self._check_document(document)
        return await self._validate_fields(document, self.names())

    async def validate_selected(
        self,
        document: dict[str, Any],
        changed_paths: Iterable[str],
    ) -> dict[str, Any]:
        """Validate only the top-level fields implicated by ``changed_paths``.

        A change anywhere beneath a top-level field (``address.city``)
        re-validates that entire field (``address``). The validated fields
        are merged over a shallow copy of the document; untouched keys pass
        through unvalidated. A selected field that resolves to absent is
        dropped from the result.

        Args:
            document: Document data
            changed_paths: Dot-joined paths written since the last pass

        Returns:
            Merged document

        Raises:
            StructureError: If document is not a dict
            FieldValidationError: If any selected field is invalid
        """
        self._check_document(document)

        touched = self.top_level_names(changed_paths)
        selected = [name for name in self._fields if name in touched]
        unknown = touched.difference(self._fields)
        if unknown:
            logger.debug(f"Ignoring changed paths outside the schema: {sorted(unknown)}")
        logger.debug(f"Selective validation of fields: {selected}")

        validated = await self._validate_fields(document, selected)

        merged = {**document, **validated}
        for name in selected:
            if name not in validated:
                merged.pop(name, None)
        return merged

    async def _validate_fields(self, document: dict[str, Any], names: list[str]) -> dict[str, Any]:
        outcomes = await gather_outcomes(
            self._fields[name].validate(document.get(name, MISSING)) for name in names
        )
        return {
            name: outcome.value
            for name, outcome in zip(names, outcomes)
            if not outcome.is_absent
        }

    @staticmethod
    def _check_document(document: Any) -> None:
        if not isinstance(document, dict):
            raise StructureError(
                f"Document must be a dict, got {type(document).__name__}",
                context={"type": type(document).__name__},
            )


def schema(fields: Mapping[str, Field]) -> Schema:
    """Create a Schema from a mapping of field name to Field."""
    return Schema(fields)
