"""Common exception hierarchy for all docknobs packages.

Every error raised by a docknobs package derives from ``DocknobsError``, which
carries an optional ``context`` dictionary describing what was being processed
when the failure happened (a field label, a document path, a config key).

Example:
    ```python
    from docknobs_common.exceptions import NotFoundError, ValidationError

    raise ValidationError("email is not valid", context={"label": "email"})

    try:
        await store.update(reference, data)
    except DocknobsError as e:
        logger.error(f"Error: {e} ({e.context})")
    ```

Packages extend these bases with their own narrower types, e.g. the schema
package's ``StructureError`` (a ``ConfigurationError``) and
``FieldValidationError`` (a ``ValidationError``).
"""

from typing import Any, Dict


class DocknobsError(Exception):
    """Base exception for all docknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (labels, paths, IDs)
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = DocknobsError(
            "Update failed",
            context={"path": "users/123"}
        )
        str(error)
        # 'Update failed'
        error.context
        # {'path': 'users/123'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(DocknobsError):
    """Raised when input data fails validation.

    Example:
        ```python
        raise ValidationError(
            "age must be a Number.",
            context={"label": "age", "value": "ten"}
        )
        ```
    """

    pass


class ConfigurationError(DocknobsError):
    """Raised when configuration or a definition is invalid or missing.

    Covers missing configuration files, unknown backends, and definitions
    that can never be valid regardless of the data they are applied to.
    """

    pass


class NotFoundError(DocknobsError):
    """Raised when a requested item is not found.

    Example:
        ```python
        raise NotFoundError(
            "Document not found",
            context={"path": "users/123"}
        )
        ```
    """

    pass


class OperationError(DocknobsError):
    """Raised when an operation fails.

    Used for registry conflicts, store operations on invalid state, and
    other failures that do not fit a narrower category.
    """

    pass


__all__ = [
    "DocknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]
