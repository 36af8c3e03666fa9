"""
singleton_registry.utils.exceptions
===================================

Custom exceptions raised by registries and their configuration layer.
"""


class SingletonError(Exception):
    """Base exception for all singleton registry errors."""
    pass


class ConstructionError(SingletonError):
    """The payload factory failed; the registry slot stays empty."""

    def __init__(self, message: str, registry_name: str = "") -> None:
        super().__init__(message)
        self.registry_name = registry_name


class ReentrantConstructionError(SingletonError):
    """The payload factory called back into the registry it is building for."""
    pass


class ConfigurationError(SingletonError):
    """Error in configuration settings."""
    pass


class UnknownStrategyError(ConfigurationError):
    """No registry strategy is registered under the requested name."""
    pass


class ConfigurationConflictError(SingletonError):
    """Construction parameters differ from the ones the instance was built with."""

    def __init__(self, message: str, recorded: tuple = (), requested: tuple = ()) -> None:
        super().__init__(message)
        self.recorded = recorded
        self.requested = requested
