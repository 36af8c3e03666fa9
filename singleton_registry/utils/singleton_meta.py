"""
singleton_registry.utils.singleton_meta
=======================================

Metaclass for implementing the Singleton pattern.
"""

import threading

from singleton_registry.registry.double_checked import DoubleCheckedRegistry


class SingletonMeta(type):
    """
    Metaclass that implements the Singleton pattern.

    Each class using this metaclass (subclasses included) gets its own
    ``DoubleCheckedRegistry``; calling the class is the only way to reach
    its constructor, and it runs at most once.

    Example
    -------
    >>> class MyClass(metaclass=SingletonMeta):
    ...     pass
    >>> a = MyClass()
    >>> b = MyClass()
    >>> a is b  # True
    """

    _registries = {}
    _registries_lock = threading.Lock()

    def __call__(cls, *args, **kwargs):
        """Return existing instance if it exists, otherwise create new instance."""
        registry = SingletonMeta._registries.get(cls)
        if registry is None:
            registry = SingletonMeta._create_registry(cls)
        return registry.get_instance(*args, **kwargs)

    def _create_registry(cls):
        with SingletonMeta._registries_lock:
            registry = SingletonMeta._registries.get(cls)
            if registry is None:
                construct = super().__call__

                def factory(*args, **kwargs):
                    return construct(*args, **kwargs)

                registry = DoubleCheckedRegistry(factory, name=cls.__qualname__)
                SingletonMeta._registries[cls] = registry
            return registry
