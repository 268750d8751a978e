"""Docknobs Config Package

Configuration loading shared by the docknobs packages: YAML/JSON files with
``extends`` inheritance and environment variable substitution, plus the
factory and configurable base classes.
"""

from .builders import ConfigurableBase, FactoryBase
from .exceptions import CircularReferenceError, ConfigError, ConfigNotFoundError
from .loader import deep_merge, load_config, substitute_env_vars

__version__ = "0.1.0"
__all__ = [
    "CircularReferenceError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigurableBase",
    "FactoryBase",
    "deep_merge",
    "load_config",
    "substitute_env_vars",
]
