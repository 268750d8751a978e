"""Value types shared by the validation engine and the store layer.

``MISSING`` marks input that was never supplied, as opposed to ``None``
which is an explicit null. ``Outcome`` is what ``Field.validate`` returns:
a field either resolved to absent (omit the key), to null, or to a value.

``DocumentReference``, ``GeoPoint`` and ``Timestamp`` are the opaque
store-defined types that documents may carry. The engine never looks inside
them; only the type-guard filters recognise them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class _Missing:
    """Sentinel type for values that were never supplied."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


class OutcomeKind(Enum):
    """How a field resolved."""

    ABSENT = "absent"
    NULL = "null"
    PRESENT = "present"


@dataclass(frozen=True)
class Outcome:
    """Result of validating one field.

    An absent outcome tells the enclosing object, array or schema to leave
    the key (or element) out of its output. A null outcome is kept as
    ``None``.
    """

    kind: OutcomeKind
    value: Any = None

    @classmethod
    def absent(cls) -> Outcome:
        return _ABSENT

    @classmethod
    def null(cls) -> Outcome:
        return _NULL

    @classmethod
    def present(cls, value: Any) -> Outcome:
        return cls(OutcomeKind.PRESENT, value)

    @property
    def is_absent(self) -> bool:
        return self.kind is OutcomeKind.ABSENT

    @property
    def is_null(self) -> bool:
        return self.kind is OutcomeKind.NULL

    @property
    def is_present(self) -> bool:
        return self.kind is OutcomeKind.PRESENT

    def unwrap(self) -> Any:
        """Return the plain value: the value, ``None`` for null, ``MISSING`` for absent."""
        if self.kind is OutcomeKind.ABSENT:
            return MISSING
        return self.value


_ABSENT = Outcome(OutcomeKind.ABSENT)
_NULL = Outcome(OutcomeKind.NULL)


@dataclass(frozen=True)
class DocumentReference:
    """Reference to a document by its slash-separated path.

    Example:
        ```python
        ref = DocumentReference("users/abc")
        ref.id               # 'abc'
        ref.collection_path  # 'users'
        ```
    """

    path: str

    def __post_init__(self) -> None:
        segments = [s for s in self.path.split("/") if s]
        if len(segments) < 2 or len(segments) % 2:
            raise ValueError(
                f"Document path must have an even number of segments: {self.path!r}"
            )
        object.__setattr__(self, "path", "/".join(segments))

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[1]

    @property
    def collection_path(self) -> str:
        return self.path.rsplit("/", 1)[0]

    @property
    def parent(self) -> DocumentReference | None:
        """The document owning this document's collection, if nested."""
        segments = self.collection_path.split("/")
        if len(segments) < 3:
            return None
        return DocumentReference("/".join(segments[:-1]))

    @classmethod
    def of(cls, collection_path: str, id: str) -> DocumentReference:
        return cls(f"{collection_path.strip('/')}/{id}")

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be in [-90, 90]: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be in [-180, 180]: {self.longitude}")


@dataclass(frozen=True, order=True)
class Timestamp:
    """Point in time as seconds and nanoseconds since the Unix epoch (UTC)."""

    seconds: int
    nanoseconds: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanoseconds < 1_000_000_000:
            raise ValueError(f"Nanoseconds must be in [0, 1e9): {self.nanoseconds}")

    @classmethod
    def from_datetime(cls, value: datetime) -> Timestamp:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds, delta.microseconds * 1000)

    @classmethod
    def now(cls) -> Timestamp:
        return cls.from_datetime(datetime.now(timezone.utc))

    def to_datetime(self) -> datetime:
        """Convert to an aware UTC datetime (truncated to microseconds)."""
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.nanoseconds // 1000
        )
