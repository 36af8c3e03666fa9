"""
singleton-registry package initialization.

Thread-safe, lazily initialised singleton registries. This module re-exports
the public API.
"""

__version__ = "0.1.0"


# --------------------------------------------------------------------------- #
# Config                                                                      #
# --------------------------------------------------------------------------- #
from singleton_registry.config.settings import AppConfig, settings, load_settings

# --------------------------------------------------------------------------- #
# Registries                                                                  #
# --------------------------------------------------------------------------- #
from singleton_registry.registry import (
    SingletonRegistry,
    DoubleCheckedRegistry,
    SynchronizedRegistry,
    EagerRegistry,
    ImportHolderRegistry,
    available_strategies,
    create_registry,
    get_strategy,
    register_strategy,
    lazy_singleton,
)
from singleton_registry.utils.singleton_meta import SingletonMeta

# --------------------------------------------------------------------------- #
# Errors and logging                                                          #
# --------------------------------------------------------------------------- #
from singleton_registry.utils.exceptions import (
    SingletonError,
    ConstructionError,
    ReentrantConstructionError,
    ConfigurationError,
    UnknownStrategyError,
    ConfigurationConflictError,
)
from singleton_registry.utils.logging import configure_logging, get_logger
