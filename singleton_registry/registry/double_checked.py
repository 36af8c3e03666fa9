"""
Double-checked acquisition, the default strategy.

The slot is read without the lock first; the lock is taken only while the
slot is empty, and the slot is read again under it before the factory runs.
Once the instance is published every call returns through the lock-free path.
"""

from __future__ import annotations

from typing import Any, TypeVar

from singleton_registry.registry.base import _EMPTY, SingletonRegistry
from singleton_registry.registry.factory import register_strategy

T = TypeVar("T")


@register_strategy("double_checked")
class DoubleCheckedRegistry(SingletonRegistry[T]):

    def get_instance(self, *args: Any, **kwargs: Any) -> T:
        instance = self._instance
        if instance is not _EMPTY:
            self._check_conflict(args, kwargs)
            return instance

        self._guard_reentry()
        seen_failures = self._failures
        with self._lock:
            return self._construct_locked(args, kwargs, seen_failures)
