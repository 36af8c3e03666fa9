"""
Utility functions and classes.

Exceptions and logging helpers shared by the registry strategies.
"""

from singleton_registry.utils.exceptions import (
    SingletonError, ConstructionError, ReentrantConstructionError,
    ConfigurationError, UnknownStrategyError, ConfigurationConflictError
)
from singleton_registry.utils.logging import configure_logging, get_logger

__all__ = [
    'SingletonError',
    'ConstructionError',
    'ReentrantConstructionError',
    'ConfigurationError',
    'UnknownStrategyError',
    'ConfigurationConflictError',
    'configure_logging',
    'get_logger',
]
