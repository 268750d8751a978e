"""Docknobs Schema Package

Schema-driven validation for documents held in a document store, with
change-aware partial re-validation.

- **Fields**: fluent builders composing type guards, constraints and transforms
- **Schemas**: full and selective validation of documents
- **Change tracking**: dot-paths written since the last validation pass
- **Hooks**: per-field pre- and post-validation callbacks
- **Models**: documents with a schema, a store and a lifecycle

Example:
    ```python
    from docknobs_schema import field, schema

    users = schema({
        "name": field("name").string().trim().min_length(1),
        "role": field("role").one_of(["admin", "member"]).default("member"),
    })

    await users.validate({"name": " Ada "})
    # {'name': 'Ada', 'role': 'member'}
    ```
"""

from .changes import ChangeTracker, mark_changed
from .exceptions import (
    DocumentNotFoundError,
    FieldValidationError,
    ModelDefinitionError,
    RequiredFieldError,
    StructureError,
)
from .factory import SchemaFactory, schema_factory
from .field import Field, field
from .filters import FILTERS, FilterSpec, register_filter
from .hooks import HookPipeline
from .model import Model
from .schema import Schema, schema
from .store import DocumentStore, MemoryDocumentStore
from .values import (
    MISSING,
    DocumentReference,
    GeoPoint,
    Outcome,
    OutcomeKind,
    Timestamp,
    is_missing,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Definition
    "Field",
    "field",
    "Schema",
    "schema",
    "SchemaFactory",
    "schema_factory",
    "FILTERS",
    "FilterSpec",
    "register_filter",
    # Change tracking and hooks
    "ChangeTracker",
    "mark_changed",
    "HookPipeline",
    # Models and stores
    "Model",
    "DocumentStore",
    "MemoryDocumentStore",
    # Values
    "MISSING",
    "is_missing",
    "Outcome",
    "OutcomeKind",
    "DocumentReference",
    "GeoPoint",
    "Timestamp",
    # Exceptions
    "StructureError",
    "ModelDefinitionError",
    "FieldValidationError",
    "RequiredFieldError",
    "DocumentNotFoundError",
]
