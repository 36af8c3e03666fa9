"""
Eager construction: the instance is built when the registry is created.

``get_instance`` never locks. A failing factory makes the registry
constructor itself raise :class:`ConstructionError`, so no empty eager
registry is ever handed out.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from singleton_registry.registry.base import _EMPTY, SingletonRegistry
from singleton_registry.registry.factory import register_strategy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@register_strategy("eager")
class EagerRegistry(SingletonRegistry[T]):

    def __init__(
        self,
        factory: Callable[..., T],
        *,
        name: Optional[str] = None,
        conflict_policy: Optional[str] = None,
        args: tuple = (),
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(factory, name=name, conflict_policy=conflict_policy)
        self._initial_params = (tuple(args), dict(kwargs or {}))
        self._construct(*self._initial_params)

    @classmethod
    def from_options(
        cls,
        factory: Optional[Callable[..., T]] = None,
        *,
        target: Optional[str] = None,
        name: Optional[str] = None,
        conflict_policy: Optional[str] = None,
        args: tuple = (),
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> "EagerRegistry[T]":
        if factory is None or target is not None:
            return super().from_options(factory, target=target, name=name, conflict_policy=conflict_policy)
        return cls(factory, name=name, conflict_policy=conflict_policy, args=args, kwargs=kwargs)

    def get_instance(self, *args: Any, **kwargs: Any) -> T:
        instance = self._instance
        if instance is _EMPTY:
            # Only after a failed reset; rebuild with the original parameters.
            self._guard_reentry()
            seen_failures = self._failures
            with self._lock:
                instance = self._construct_locked(*self._initial_params, seen_failures)
        self._check_conflict(args, kwargs)
        return instance

    def _reset(self) -> None:
        with self._lock:
            self._clear_slot()
            self._construct(*self._initial_params)
        logger.debug("Singleton %s reset and rebuilt", self._name)
