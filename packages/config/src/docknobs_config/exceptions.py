"""Custom exceptions for the config package.

Built on the common exception framework from docknobs_common.
"""

from docknobs_common import (
    ConfigurationError as BaseConfigurationError,
    NotFoundError,
)

ConfigError = BaseConfigurationError


class ConfigNotFoundError(NotFoundError):
    """Raised when a configuration file cannot be found."""

    pass


class CircularReferenceError(BaseConfigurationError):
    """Raised when configuration files extend each other in a cycle."""

    pass
