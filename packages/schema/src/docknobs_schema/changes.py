"""Change tracking: recording which dot-paths of a document were written."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any


def mark_changed(
    changed_paths: set[str],
    value: Any,
    path: Sequence[str | int] = (),
) -> set[str]:
    """Record ``path`` and every path reachable beneath ``value`` as changed.

    Replacing a compound value records the path of each nested map key and
    array index, so a wholesale replacement enumerates every leaf. The empty
    path is never recorded.

    Example:
        >>> sorted(mark_changed(set(), {"p": {"q": 1}}))
        ['p', 'p.q']

    Args:
        changed_paths: Set to add paths to
        value: The value written at ``path``
        path: Keys (and array indexes) from the document root

    Returns:
        ``changed_paths``, for chaining
    """
    if path:
        changed_paths.add(".".join(str(segment) for segment in path))

    if isinstance(value, dict):
        for key, member in value.items():
            mark_changed(changed_paths, member, (*path, key))
    elif isinstance(value, (list, tuple)):
        for index, member in enumerate(value):
            mark_changed(changed_paths, member, (*path, index))

    return changed_paths


def split_path(path: str | Sequence[str | int]) -> tuple[str, ...]:
    """Split a dotted path string into segments; sequences are normalised to strings.

    Raises:
        ValueError: If the path is empty or has an empty segment
    """
    if isinstance(path, str):
        segments = tuple(path.split("."))
    else:
        segments = tuple(str(segment) for segment in path)
    if not segments or not all(segments):
        raise ValueError(f"Invalid path: {path!r}")
    return segments


class ChangeTracker:
    """The set of paths written on one document since its last validation pass.

    One tracker belongs to one model instance. It must not be written to
    while a validation pass over its paths is running.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def record(self, path: str | Sequence[str | int], value: Any) -> None:
        """Record a write of ``value`` at ``path`` (dotted string or segments)."""
        mark_changed(self._paths, value, split_path(path))

    def record_document(self, data: dict[str, Any]) -> None:
        """Record every key of a newly supplied document."""
        for key, value in data.items():
            mark_changed(self._paths, value, (key,))

    @property
    def paths(self) -> frozenset[str]:
        return frozenset(self._paths)

    def top_level(self) -> set[str]:
        return {path.split(".", 1)[0] for path in self._paths}

    def clear(self) -> None:
        self._paths.clear()

    def discard(self, paths: Iterable[str]) -> None:
        """Forget the given paths, keeping any recorded since they were read."""
        self._paths.difference_update(paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))
