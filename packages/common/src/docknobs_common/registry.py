"""Named catalogues shared between docknobs packages.

The schema package keeps its filter constructors in a ``Registry`` so that a
Field can look a filter up by name and applications can add their own.

Example:
    ```python
    from docknobs_common.registry import Registry

    class FormatRegistry(Registry[str]):
        def __init__(self):
            super().__init__("formats")

    formats = FormatRegistry()
    formats.register("iso_day", "YYYY-MM-DD")
    formats.get("iso_day")
    # 'YYYY-MM-DD'
    ```
"""

import threading
from typing import Generic, TypeVar

from docknobs_common.exceptions import NotFoundError, OperationError

T = TypeVar("T")


class Registry(Generic[T]):
    """Thread-safe mapping of unique keys to items, in registration order.

    Args:
        name: Name reported in error context
    """

    def __init__(self, name: str):
        self._name = name
        self._entries: dict[str, T] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def register(self, key: str, item: T, allow_overwrite: bool = False) -> None:
        """Store ``item`` under ``key``.

        Raises:
            OperationError: If ``key`` is taken and ``allow_overwrite`` is False
        """
        with self._lock:
            if key in self._entries and not allow_overwrite:
                raise OperationError(
                    f"'{key}' is already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._entries[key] = item

    def unregister(self, key: str) -> T:
        """Remove and return the item under ``key``.

        Raises:
            NotFoundError: If nothing is registered under ``key``
        """
        with self._lock:
            if key not in self._entries:
                raise NotFoundError(
                    f"'{key}' is not registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            return self._entries.pop(key)

    def get(self, key: str) -> T:
        """Return the item under ``key``.

        Raises:
            NotFoundError: If nothing is registered under ``key``; the context
                lists the keys that are
        """
        with self._lock:
            if key not in self._entries:
                raise NotFoundError(
                    f"'{key}' is not registered in {self._name}",
                    context={
                        "key": key,
                        "registry": self._name,
                        "available_keys": list(self._entries),
                    },
                )
            return self._entries[key]

    def get_optional(self, key: str) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def list_keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
