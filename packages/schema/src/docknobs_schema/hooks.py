"""Pre- and post-validation hooks keyed by top-level field name.

A hook is a callable ``(data, model) -> data``, sync or async. During a
validation pass the hooks registered for each changed top-level field run in
registration order, one after another, each receiving the previous hook's
output. A hook that raises aborts the pass.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from .exceptions import StructureError

logger = logging.getLogger(__name__)

Hook = Callable[[dict[str, Any], Any], Any]


class HookTable:
    """Ordered mapping of field name to an ordered list of hooks."""

    def __init__(self, stage: str):
        self.stage = stage
        self._hooks: dict[str, list[Hook]] = {}

    def add(self, name: str, hook: Hook) -> None:
        if not name or not isinstance(name, str):
            raise StructureError(f"A {self.stage} hook needs a field name.")
        if not callable(hook):
            raise StructureError(
                f"{self.stage} hook for '{name}' must be callable.",
                context={"field": name},
            )
        self._hooks.setdefault(name, []).append(hook)

    def get(self, name: str) -> list[Hook]:
        return list(self._hooks.get(name, ()))

    def names(self) -> list[str]:
        return list(self._hooks)

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    async def run(self, data: dict[str, Any], changed_paths: Iterable[str], model: Any) -> dict[str, Any]:
        touched = {path.split(".", 1)[0] for path in changed_paths if path}
        for name, hooks in self._hooks.items():
            if name not in touched:
                continue
            for hook in hooks:
                logger.debug(f"Running {self.stage} hook {getattr(hook, '__name__', hook)!s} for '{name}'")
                data = hook(data, model)
                if inspect.isawaitable(data):
                    data = await data
        return data


class HookPipeline:
    """The pre-validation and post-validation hook tables of one model.

    Example:
        ```python
        hooks = HookPipeline()

        @hooks.prehook("email")
        def normalise(data, model):
            return {**data, "email": data["email"].strip()}

        hooks.posthook("email", send_confirmation)
        ```
    """

    def __init__(self) -> None:
        self.pre = HookTable("pre")
        self.post = HookTable("post")

    def prehook(self, name: str, callback: Hook | None = None) -> Any:
        """Register a hook run before validation; usable as a decorator."""
        return self._register(self.pre, name, callback)

    def posthook(self, name: str, callback: Hook | None = None) -> Any:
        """Register a hook run after validation; usable as a decorator."""
        return self._register(self.post, name, callback)

    @staticmethod
    def _register(table: HookTable, name: str, callback: Hook | None) -> Any:
        if callback is not None:
            table.add(name, callback)
            return callback

        def decorator(func: Hook) -> Hook:
            table.add(name, func)
            return func

        return decorator

    async def run_pre(self, data: dict[str, Any], changed_paths: Iterable[str], model: Any) -> dict[str, Any]:
        return await self.pre.run(data, changed_paths, model)

    async def run_post(self, data: dict[str, Any], changed_paths: Iterable[str], model: Any) -> dict[str, Any]:
        return await self.post.run(data, changed_paths, model)

    def copy(self) -> HookPipeline:
        """Return a pipeline holding the same hooks, for subclass inheritance."""
        clone = HookPipeline()
        for source, target in ((self.pre, clone.pre), (self.post, clone.post)):
            for name in source.names():
                for hook in source.get(name):
                    target.add(name, hook)
        return clone
