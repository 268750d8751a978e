"""Custom exceptions for the docknobs_schema package.

Two kinds of failure are distinguished:

- ``StructureError``: a defect in how a schema was written (missing label,
  two type definitions on one field, malformed ``one_of`` values). Raised
  while the schema is being defined, independent of any document.
- ``FieldValidationError``: a defect in the data being validated. Its
  message is a template holding a ``{label}`` placeholder that the nearest
  enclosing Field fills in before the error leaves it.
"""

from __future__ import annotations

from typing import Any

from docknobs_common import (
    ConfigurationError,
    NotFoundError,
    ValidationError,
)

LABEL_PLACEHOLDER = "{label}"


class StructureError(ConfigurationError):
    """Raised when a schema or field definition is malformed."""

    pass


class ModelDefinitionError(StructureError):
    """Raised when a Model subclass is missing its collection path or schema."""

    pass


class FieldValidationError(ValidationError):
    """Raised when a value fails a filter or a presence check.

    Attributes:
        template: Message template containing the ``{label}`` placeholder
        label: Label substituted into the template, once bound
    """

    def __init__(self, template: str, value: Any = None, context: dict[str, Any] | None = None):
        self.template = template
        self.label: str | None = None
        self.value = value
        super().__init__(template, context=dict(context or {}))

    @property
    def message(self) -> str:
        return str(self.args[0])

    def bind(self, label: str) -> FieldValidationError:
        """Substitute ``label`` into the template unless already bound.

        Only the first (innermost) Field to see the error binds it, so a
        failure inside a nested field keeps the nested field's label.

        Returns:
            Self for re-raising
        """
        if self.label is None:
            self.label = label
            self.args = (self.template.replace(LABEL_PLACEHOLDER, label),)
            self.context["label"] = label
        return self


class RequiredFieldError(FieldValidationError):
    """Raised when a required field is absent or null."""

    def __init__(self, label: str):
        super().__init__(f"{LABEL_PLACEHOLDER} is required.")
        self.bind(label)


class DocumentNotFoundError(NotFoundError):
    """Raised when a document does not exist in the store."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document '{path}' not found", context={"path": path})
