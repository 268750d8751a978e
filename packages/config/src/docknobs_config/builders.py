"""Base classes for objects built from configuration."""

from typing import Any


class ConfigurableBase:
    """Base class for objects that can be configured.

    Classes that inherit from this can override ``from_config`` with
    custom configuration loading logic.
    """

    @classmethod
    def from_config(cls, config: dict) -> "ConfigurableBase":
        """Create an instance from a configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            Instance of the class
        """
        return cls(**config)


class FactoryBase:
    """Base class for factory objects.

    Factories that inherit from this should implement the create method.
    """

    def create(self, **config: Any) -> Any:
        """Create an object from configuration.

        Args:
            **config: Configuration parameters

        Returns:
            Created object
        """
        raise NotImplementedError("Subclasses must implement create method")
