"""Factory building schemas from configuration."""

import logging
from pathlib import Path
from typing import Any

from docknobs_config import FactoryBase, load_config

from .exceptions import StructureError
from .field import Field
from .schema import Schema

logger = logging.getLogger(__name__)

FIELD_KEYS = {
    "type", "label", "nullable", "optional", "default", "filters",
    "fields", "items", "values", "format", "error", "description",
}


class SchemaFactory(FactoryBase):
    """Factory for creating schemas from configuration.

    Configuration Options:
        name (str): Schema name, used for logging
        fields (dict): Field name to field definition

    Field Definition Options:
        type (str): string, number, integer, boolean, any, array, object,
            date, timestamp, reference, geopoint or one_of
        label (str): Label for error messages (defaults to the field name)
        nullable (bool): Allow null
        optional (bool): Allow the field to be omitted
        default (any): Value used when the field is absent
        filters (list): Filter names, or single-key maps of name to arguments
        fields (dict): Nested field definitions, for type object
        items (dict): Element field definition, for type array
        values (list): Accepted values, for type one_of
        format (str): Date format, for type date
        error (str): Error template for the type filter

    Example Configuration:
        name: users
        fields:
          name:
            type: string
            filters: [trim, {min_length: 2}]
          role:
            type: one_of
            values: [admin, member]
            default: member
          tags:
            type: array
            items: {type: string}
          address:
            type: object
            optional: true
            fields:
              city: {type: string}
    """

    def create(self, **config: Any) -> Schema:
        """Create a Schema from configuration.

        Raises:
            StructureError: If a field definition is malformed
        """
        name = config.get("name", "unnamed_schema")
        fields = config.get("fields") or {}
        if not isinstance(fields, dict):
            raise StructureError(f"Schema '{name}': fields must be a mapping")

        logger.info(f"Creating schema: {name}")
        return Schema({
            field_name: self.build_field(field_name, field_config)
            for field_name, field_config in fields.items()
        })

    def from_file(self, path: str | Path) -> Schema:
        """Create a Schema from a YAML or JSON configuration file."""
        return self.create(**load_config(path))

    def build_field(self, name: str, config: dict[str, Any] | str) -> Field:
        """Build one Field from its definition (or from a bare type name)."""
        if isinstance(config, str):
            config = {"type": config}
        if not isinstance(config, dict):
            raise StructureError(f"Field '{name}': definition must be a mapping")

        unknown = set(config) - FIELD_KEYS
        if unknown:
            logger.warning(f"Field '{name}': ignoring unknown keys {sorted(unknown)}")

        result = Field(config.get("label", name))
        self._apply_type(result, name, config)

        for entry in config.get("filters") or []:
            self._apply_filter(result, name, entry)

        if config.get("nullable"):
            result.nullable()
        if config.get("optional"):
            result.optional()
        if "default" in config:
            result.default(config["default"])

        return result

    def _apply_type(self, result: Field, name: str, config: dict[str, Any]) -> None:
        field_type = config.get("type")
        error = config.get("error")
        if field_type is None:
            return

        if field_type == "object" and "fields" in config:
            nested = config["fields"]
            if not isinstance(nested, dict):
                raise StructureError(f"Field '{name}': fields must be a mapping")
            result.object_of(
                {key: self.build_field(key, value) for key, value in nested.items()},
                error=error,
            )
        elif field_type == "array" and "items" in config:
            result.array_of(self.build_field(name, config["items"]), error=error)
        elif field_type == "one_of":
            result.one_of(config.get("values") or [], error=error)
        elif field_type == "date":
            result.date(config.get("format"), error=error)
        else:
            self._call(result, name, field_type, [], {} if error is None else {"error": error})

    def _apply_filter(self, result: Field, name: str, entry: Any) -> None:
        if isinstance(entry, str):
            self._call(result, name, entry, [], {})
            return
        if not isinstance(entry, dict) or len(entry) != 1:
            raise StructureError(
                f"Field '{name}': filter entries must be a name or a single-key mapping, got {entry!r}"
            )

        filter_name, arguments = next(iter(entry.items()))
        if arguments is None:
            self._call(result, name, filter_name, [], {})
        elif isinstance(arguments, dict):
            self._call(result, name, filter_name, [], arguments)
        elif isinstance(arguments, list):
            self._call(result, name, filter_name, arguments, {})
        else:
            self._call(result, name, filter_name, [arguments], {})

    @staticmethod
    def _call(result: Field, name: str, filter_name: str, args: list[Any], kwargs: dict[str, Any]) -> None:
        try:
            result.apply(filter_name, *args, **kwargs)
        except TypeError as e:
            raise StructureError(
                f"Field '{name}': bad arguments for filter '{filter_name}': {e}",
                context={"field": name, "filter": filter_name},
            ) from e


schema_factory = SchemaFactory()
