"""Decorator turning a factory function into a singleton accessor."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from singleton_registry.registry.factory import create_registry

T = TypeVar("T")


def lazy_singleton(
    func: Optional[Callable[..., T]] = None,
    *,
    strategy: Optional[str] = None,
    conflict_policy: Optional[str] = None,
):
    """
    Wrap *func* so every call returns the one instance it produced.

    Example
    -------
    >>> @lazy_singleton
    ... def connection_pool():
    ...     return object()
    >>> connection_pool() is connection_pool()
    True

    The backing registry is available as ``accessor.registry``.
    """

    def decorate(factory: Callable[..., T]) -> Callable[..., T]:
        registry = create_registry(
            factory,
            strategy=strategy,
            conflict_policy=conflict_policy,
            name=getattr(factory, "__qualname__", None),
        )

        @wraps(factory)
        def accessor(*args: Any, **kwargs: Any) -> T:
            return registry.get_instance(*args, **kwargs)

        accessor.registry = registry
        return accessor

    if func is None:
        return decorate
    return decorate(func)
