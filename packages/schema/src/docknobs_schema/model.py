"""Models: documents with a schema, change tracking and a lifecycle.

A Model subclass names its collection and schema. Writes go through
explicit setters which record the dot-paths they touch; saving runs the
validation pass over exactly those paths and hands the result to the store.

Example:
    ```python
    class User(Model):
        collection_path = "users"
        schema = schema({
            "name": field("name").string().trim(),
            "email": field("email").string().email(),
            "address": field("address").object_of({
                "city": field("city").string(),
            }).optional(),
        })

    @User.prehook("email")
    def strip_email(data, user):
        return {**data, "email": data["email"].strip()}

    user = User({"name": "Ada", "email": " ADA@x.org "}, store=store)
    await user.create()

    user.set_path("address.city", "London")
    await user.save()  # re-validates only "address"
    ```

The validation pass: pre hooks, then ``Schema.validate_selected`` over the
recorded paths, then post hooks. The validated data and the cleared paths
are committed only once the store accepts the write. A failed validation or
a failed store call leaves the model as it was, so the write can be
corrected and retried.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from docknobs_common import OperationError
from docknobs_common.events import Event, EventType

from .changes import ChangeTracker, split_path
from .exceptions import DocumentNotFoundError, ModelDefinitionError, StructureError
from .hooks import Hook, HookPipeline
from .schema import Schema
from .store import DocumentStore
from .values import MISSING, DocumentReference

if TYPE_CHECKING:
    from docknobs_common.events import EventBus

logger = logging.getLogger(__name__)


class Model:
    """Base class for schema-backed documents."""

    collection_path: ClassVar[str | None] = None
    schema: ClassVar[Schema | None] = None
    hooks: ClassVar[HookPipeline] = HookPipeline()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Each subclass starts from its parent's hooks without sharing the tables
        cls.hooks = cls.hooks.copy()

    def __init__(
        self,
        data: dict[str, Any] | None = None,
        *,
        store: DocumentStore | None = None,
        event_bus: EventBus | None = None,
        reference: DocumentReference | None = None,
    ):
        """Initialize a model instance.

        Args:
            data: Initial document data
            store: Store used by the lifecycle operations
            event_bus: Optional bus receiving lifecycle events
            reference: Reference of an already stored document

        Raises:
            ModelDefinitionError: If used on Model itself, or the subclass
                lacks a collection path or schema
            StructureError: If data is not a dict
        """
        cls = type(self)
        self._collection_path, self._schema = cls._definition()
        if data is not None and not isinstance(data, dict):
            raise StructureError(f"{cls.__name__} data must be a dict, got {type(data).__name__}")

        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}
        self._store = store
        self._event_bus = event_bus
        self._reference = reference
        self._changes = ChangeTracker()

    @classmethod
    def _definition(cls) -> tuple[str, Schema]:
        if cls is Model:
            raise ModelDefinitionError("Model can't be used directly and must be extended instead.")
        if not isinstance(cls.collection_path, str) or not cls.collection_path:
            raise ModelDefinitionError(f"{cls.__name__} must define a collection_path string.")
        if not isinstance(cls.schema, Schema):
            raise ModelDefinitionError(f"{cls.__name__}.schema must be an instance of Schema.")
        return cls.collection_path, cls.schema

    @classmethod
    def prehook(cls, name: str, callback: Hook | None = None) -> Any:
        """Register a pre-validation hook for a top-level field."""
        return cls.hooks.prehook(name, callback)

    @classmethod
    def posthook(cls, name: str, callback: Hook | None = None) -> Any:
        """Register a post-validation hook for a top-level field."""
        return cls.hooks.posthook(name, callback)

    @property
    def reference(self) -> DocumentReference | None:
        return self._reference

    @property
    def id(self) -> str | None:
        return self._reference.id if self._reference else None

    @property
    def is_new(self) -> bool:
        return self._reference is None

    @property
    def changed_paths(self) -> frozenset[str]:
        return self._changes.paths

    @property
    def store(self) -> DocumentStore | None:
        return self._store

    # Accessors

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of a top-level value; mutate through the setters."""
        return copy.deepcopy(self._data.get(key, default))

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._data[key])

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get_path(self, path: str, default: Any = None) -> Any:
        """Return a copy of the value at a dotted path, or ``default``."""
        current: Any = self._data
        for segment in split_path(path):
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return default
        return copy.deepcopy(current)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    # Mutators

    def _check_key(self, key: str) -> None:
        if key not in self._schema:
            raise KeyError(f"'{key}' is not a field of {type(self).__name__}")

    def set(self, key: str, value: Any) -> Model:
        """Set a top-level field, recording it and every path beneath the value."""
        self._check_key(key)
        self._data[key] = copy.deepcopy(value)
        self._changes.record((key,), value)
        return self

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def set_path(self, path: str, value: Any) -> Model:
        """Set a nested value by dotted path, creating intermediate maps."""
        segments = split_path(path)
        self._check_key(segments[0])

        container: Any = self._data
        for segment in segments[:-1]:
            if isinstance(container, list):
                container = container[int(segment)]
                continue
            child = container.get(segment)
            if not isinstance(child, (dict, list)):
                child = {}
                container[segment] = child
            container = child

        last = segments[-1]
        if isinstance(container, list):
            container[int(last)] = copy.deepcopy(value)
        else:
            container[last] = copy.deepcopy(value)

        self._changes.record(segments, value)
        return self

    def update_fields(self, **values: Any) -> Model:
        for key, value in values.items():
            self.set(key, value)
        return self

    def unset(self, key: str) -> Model:
        """Remove a top-level field; it is re-validated as absent on save."""
        self._check_key(key)
        self._data.pop(key, None)
        self._changes.record((key,), MISSING)
        return self

    # Lifecycle

    async def validate(self) -> dict[str, Any]:
        """Validate the whole document, ignoring recorded changes."""
        return await self._schema.validate(self._data)

    async def _run_pass(self) -> tuple[dict[str, Any], frozenset[str]]:
        """Validate a copy of the data over the recorded paths; the model is untouched."""
        paths = self._changes.paths

        data = await self.hooks.run_pre(copy.deepcopy(self._data), paths, self)
        data = await self._schema.validate_selected(data, paths)
        data = await self.hooks.run_post(data, paths, self)
        return data, paths

    def _commit(self, data: dict[str, Any], paths: frozenset[str]) -> None:
        self._data = data
        self._changes.discard(paths)

    def _require_store(self) -> DocumentStore:
        if self._store is None:
            raise OperationError(
                f"{type(self).__name__} has no store attached",
                context={"collection": self._collection_path},
            )
        return self._store

    async def create(self, id: str | None = None) -> DocumentReference:
        """Validate every supplied field and store the document as new.

        Raises:
            OperationError: If the document was already created or no store is attached
            FieldValidationError: If any supplied field is invalid
        """
        store = self._require_store()
        if not self.is_new:
            raise OperationError(
                f"Document '{self._reference}' already exists",
                context={"path": str(self._reference)},
            )

        self._changes.record_document(self._data)
        data, paths = await self._run_pass()

        self._reference = await store.create(self._collection_path, data, id)
        self._commit(data, paths)
        logger.debug(f"Created {type(self).__name__} {self._reference}")
        await self._publish(EventType.CREATED, paths)
        return self._reference

    async def update(self) -> dict[str, Any]:
        """Re-validate the changed fields and write the document back.

        Does nothing when no change was recorded.

        Raises:
            OperationError: If the document has not been created
            FieldValidationError: If a changed field is invalid
        """
        store = self._require_store()
        if self._reference is None:
            raise OperationError(
                f"{type(self).__name__} must be created before it is updated",
                context={"collection": self._collection_path},
            )
        if not self._changes:
            return self.to_dict()

        data, paths = await self._run_pass()
        await store.update(self._reference, data)
        self._commit(data, paths)
        logger.debug(f"Updated {type(self).__name__} {self._reference}: {sorted(paths)}")
        await self._publish(EventType.UPDATED, paths)
        return self.to_dict()

    async def save(self) -> DocumentReference:
        """Create the document if new, otherwise update it."""
        if self._reference is None:
            return await self.create()
        await self.update()
        return self._reference

    async def delete(self) -> bool:
        store = self._require_store()
        if self._reference is None:
            return False
        deleted = await store.delete(self._reference)
        if deleted:
            logger.debug(f"Deleted {type(self).__name__} {self._reference}")
            await self._publish(EventType.DELETED, frozenset())
        return deleted

    @classmethod
    async def load(
        cls,
        store: DocumentStore,
        id_or_reference: str | DocumentReference,
        event_bus: EventBus | None = None,
    ) -> Model:
        """Read a stored document into a model instance.

        Args:
            store: Store to read from
            id_or_reference: Document id within the collection, full path, or reference
            event_bus: Optional bus for lifecycle events

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        if isinstance(id_or_reference, DocumentReference):
            reference = id_or_reference
        elif "/" in id_or_reference:
            reference = DocumentReference(id_or_reference)
        else:
            collection_path, _ = cls._definition()
            reference = DocumentReference.of(collection_path, id_or_reference)

        data = await store.get(reference)
        if data is None:
            raise DocumentNotFoundError(reference.path)
        return cls(data, store=store, event_bus=event_bus, reference=reference)

    async def _publish(self, event_type: EventType, paths: frozenset[str]) -> None:
        if self._event_bus is None or self._reference is None:
            return
        topic = f"documents:{self._collection_path}"
        await self._event_bus.publish(topic, Event(
            type=event_type,
            topic=topic,
            payload={
                "id": self._reference.id,
                "path": self._reference.path,
                "changed": sorted(paths),
            },
            source=type(self).__name__,
        ))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._reference or 'new'}, changed={sorted(self._changes.paths)})"
