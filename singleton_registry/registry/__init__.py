"""
Registry strategies.

Importing this package registers every built-in strategy:

* ``double_checked`` - lazy, lock only while empty (default)
* ``synchronized``   - lazy, lock on every call
* ``eager``          - built when the registry is created
* ``import_holder``  - lazy, run-once guaranteed by the import system
"""

from singleton_registry.registry.base import SingletonRegistry
from singleton_registry.registry.factory import (
    available_strategies,
    create_registry,
    get_strategy,
    register_strategy,
)
from singleton_registry.registry.double_checked import DoubleCheckedRegistry
from singleton_registry.registry.synchronized import SynchronizedRegistry
from singleton_registry.registry.eager import EagerRegistry
from singleton_registry.registry.import_holder import ImportHolderRegistry
from singleton_registry.registry.decorators import lazy_singleton

__all__ = [
    'SingletonRegistry',
    'DoubleCheckedRegistry',
    'SynchronizedRegistry',
    'EagerRegistry',
    'ImportHolderRegistry',
    'available_strategies',
    'create_registry',
    'get_strategy',
    'register_strategy',
    'lazy_singleton',
]
