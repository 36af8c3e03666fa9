"""
Fully synchronized accessor: every call takes the registry lock.

Correct, but serialises readers even after the instance exists. Useful as a
baseline against :class:`DoubleCheckedRegistry`.
"""

from __future__ import annotations

from typing import Any, TypeVar

from singleton_registry.registry.base import SingletonRegistry
from singleton_registry.registry.factory import register_strategy

T = TypeVar("T")


@register_strategy("synchronized")
class SynchronizedRegistry(SingletonRegistry[T]):

    def get_instance(self, *args: Any, **kwargs: Any) -> T:
        self._guard_reentry()
        seen_failures = self._failures
        with self._lock:
            return self._construct_locked(args, kwargs, seen_failures)
