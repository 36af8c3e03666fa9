"""
singleton_registry.registry.base
================================

Shared machinery for every registry strategy.

A registry owns a single slot that is either empty or holds the one instance
produced by its factory. Strategies differ only in *when* and *under which
synchronisation* the factory runs; the slot bookkeeping, failure handling,
re-entrancy detection and construction-parameter conflicts live here.

The slot is published with a single reference assignment after the factory
has returned, so a reader that sees a populated slot always sees a fully
built instance.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from singleton_registry.config.defaults import CONFLICT_POLICIES
from singleton_registry.utils.exceptions import (
    ConfigurationConflictError,
    ConfigurationError,
    ConstructionError,
    ReentrantConstructionError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Marks an empty slot; ``None`` is a legitimate payload.
_EMPTY: Any = object()

Params = Tuple[tuple, Dict[str, Any]]


class SingletonRegistry(ABC, Generic[T]):
    """
    Owns the one shared instance produced by *factory*.

    Subclasses implement :meth:`get_instance`; they must publish the instance
    only through :meth:`_construct` so the bookkeeping below stays consistent.
    """

    #: name under which the strategy is registered
    strategy: str = ""

    def __init__(
        self,
        factory: Callable[..., T],
        *,
        name: Optional[str] = None,
        conflict_policy: Optional[str] = None,
    ) -> None:
        if not callable(factory):
            raise TypeError(f"factory must be callable, got {factory!r}")
        self._factory = factory
        self._name = name or getattr(factory, "__qualname__", repr(factory))
        self._conflict_policy = _resolve_policy(conflict_policy)
        self._lock = threading.Lock()
        self._instance: Any = _EMPTY
        self._params: Optional[Params] = None
        self._owner: Optional[int] = None
        self._failures = 0
        self._last_error: Optional[BaseException] = None

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    @abstractmethod
    def get_instance(self, *args: Any, **kwargs: Any) -> T:
        """Return the shared instance, constructing it on first demand."""

    @property
    def name(self) -> str:
        return self._name

    @property
    def conflict_policy(self) -> str:
        return self._conflict_policy

    @property
    def is_populated(self) -> bool:
        """True once the instance has been published. Never blocks."""
        return self._instance is not _EMPTY

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
    ) -> "SingletonRegistry[T]":
        """Build a registry from the generic options accepted by ``create_registry``."""
        if factory is None:
            raise ConfigurationError(f"The {cls.strategy!r} strategy needs a factory callable")
        if target is not None:
            raise ConfigurationError(f"The {cls.strategy!r} strategy does not take an import target")
        if args or kwargs:
            raise ConfigurationError(
                f"The {cls.strategy!r} strategy takes construction parameters "
                "on the first get_instance() call"
            )
        return cls(factory, name=name, conflict_policy=conflict_policy)

    def __repr__(self) -> str:
        state = "populated" if self.is_populated else "empty"
        return f"<{type(self).__name__} {self._name!r} {state}>"

    # ------------------------------------------------------------------ #
    # Helpers for strategies                                             #
    # ------------------------------------------------------------------ #
    def _guard_reentry(self) -> None:
        # Only the constructing thread can ever read its own ident here.
        if self._owner == threading.get_ident():
            raise ReentrantConstructionError(
                f"Factory of {self._name!r} called get_instance() on its own registry"
            )

    def _construct_locked(self, args: tuple, kwargs: Dict[str, Any], seen_failures: int) -> T:
        """
        Slow path, caller holds ``self._lock``.

        *seen_failures* is the failure count read before the lock was
        requested. If an attempt failed while this caller was queued, the
        caller receives that failure instead of starting a new attempt.
        """
        instance = self._instance
        if instance is not _EMPTY:
            self._check_conflict(args, kwargs)
            return instance
        if self._failures != seen_failures:
            raise ConstructionError(
                f"Construction of {self._name!r} failed in another thread: {self._last_error}",
                self._name,
            ) from self._last_error
        return self._construct(args, kwargs)

    def _construct(self, args: tuple, kwargs: Dict[str, Any]) -> T:
        self._owner = threading.get_ident()
        logger.debug("Constructing singleton %s (%s)", self._name, self.strategy)
        try:
            instance = self._factory(*args, **kwargs)
        except ReentrantConstructionError as exc:
            self._record_failure(exc)
            raise
        except Exception as exc:
            self._record_failure(exc)
            raise ConstructionError(f"Construction of {self._name!r} failed: {exc}", self._name) from exc
        except BaseException as exc:
            self._record_failure(exc)
            raise
        finally:
            self._owner = None
        self._params = (args, kwargs)
        self._instance = instance
        logger.debug("Singleton %s constructed", self._name)
        return instance

    def _record_failure(self, exc: BaseException) -> None:
        self._failures += 1
        self._last_error = exc
        logger.debug("Construction of singleton %s failed: %s", self._name, exc)

    def _check_conflict(self, args: tuple, kwargs: Dict[str, Any]) -> None:
        if not args and not kwargs:
            return
        recorded = self._params
        if recorded is None or (args, kwargs) == recorded:
            return
        if self._conflict_policy == "error":
            raise ConfigurationConflictError(
                f"{self._name!r} was constructed with {_describe(recorded)}, "
                f"got {_describe((args, kwargs))}",
                recorded=recorded,
                requested=(args, kwargs),
            )
        if self._conflict_policy == "warn":
            logger.warning(
                "Ignoring construction parameters %s for %s; instance was built with %s",
                _describe((args, kwargs)), self._name, _describe(recorded),
            )

    def _reset(self) -> None:
        """Empty the slot. Only reachable through ``singleton_registry.testing``."""
        with self._lock:
            self._clear_slot()
        logger.debug("Singleton %s reset", self._name)

    def _clear_slot(self) -> None:
        # caller holds self._lock
        self._instance = _EMPTY
        self._params = None
        self._failures = 0
        self._last_error = None


def _resolve_policy(policy: Optional[str]) -> str:
    if policy is None:
        from singleton_registry.config.settings import settings
        return settings.conflict_policy
    policy = policy.lower()
    if policy not in CONFLICT_POLICIES:
        raise ConfigurationError(f"conflict_policy must be one of {CONFLICT_POLICIES}, got {policy!r}")
    return policy


def _describe(params: Params) -> str:
    args, kwargs = params
    parts = [repr(a) for a in args] + [f"{k}={v!r}" for k, v in kwargs.items()]
    return "(" + ", ".join(parts) + ")"
