"""Common utilities and base classes for docknobs packages.

- **Exceptions**: Unified exception hierarchy with context support
- **Registry**: Generic registry pattern for managing named items
- **Events**: Publish-subscribe bus for lifecycle notifications

Example:
    ```python
    from docknobs_common import DocknobsError, Registry

    raise DocknobsError("Something went wrong", context={"details": "here"})

    registry = Registry[MyType]("my_registry")
    registry.register("key", my_item)
    ```
"""

from docknobs_common.exceptions import (
    ConfigurationError,
    DocknobsError,
    NotFoundError,
    OperationError,
    ValidationError,
)
from docknobs_common.registry import Registry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Exceptions
    "DocknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    # Registry
    "Registry",
]
