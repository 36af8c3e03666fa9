"""
On-demand initialisation delegated to the import system.

The instance is a module-level attribute of a *holder module* that is not
imported until the first ``get_instance`` call. The import machinery runs a
module body at most once per successful import, serialising concurrent
importers on a per-module lock, and it removes a module whose body raised
from ``sys.modules`` so the next import runs it again.

Once imported, ``importlib.import_module`` returns straight from
``sys.modules`` without taking any lock.

Known difference from the lock-based strategies: a thread that was waiting
on the import lock while another thread's import failed retries the import
itself instead of receiving the other thread's failure.
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import Any, Callable, Dict, Optional

from singleton_registry.registry.base import SingletonRegistry
from singleton_registry.registry.factory import register_strategy
from singleton_registry.utils.exceptions import (
    ConfigurationError,
    ConstructionError,
    ReentrantConstructionError,
)

logger = logging.getLogger(__name__)


@register_strategy("import_holder")
class ImportHolderRegistry(SingletonRegistry[Any]):
    """
    Registry whose payload is ``getattr(import_module(module), attribute)``.

    Args:
        target: ``"package.module:attribute"``.
    """

    def __init__(
        self,
        target: str,
        *,
        name: Optional[str] = None,
        conflict_policy: Optional[str] = None,
    ) -> None:
        module_name, attribute = _parse_target(target)
        super().__init__(self._load, name=name or target, conflict_policy=conflict_policy)
        self._module_name = module_name
        self._attribute = attribute

    @classmethod
    def from_options(
        cls,
        factory: Optional[Callable[..., Any]] = None,
        *,
        target: Optional[str] = None,
        name: Optional[str] = None,
        conflict_policy: Optional[str] = None,
        args: tuple = (),
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> "ImportHolderRegistry":
        if factory is not None:
            raise ConfigurationError("The 'import_holder' strategy takes a target, not a factory")
        if target is None:
            raise ConfigurationError("The 'import_holder' strategy needs target='package.module:attribute'")
        if args or kwargs:
            raise ConfigurationError("The 'import_holder' strategy takes no construction parameters")
        return cls(target, name=name, conflict_policy=conflict_policy)

    @property
    def is_populated(self) -> bool:
        module = sys.modules.get(self._module_name)
        return module is not None and not _initializing(module) and hasattr(module, self._attribute)

    def get_instance(self, *args: Any, **kwargs: Any) -> Any:
        if args or kwargs:
            raise TypeError(f"{self._name!r} is built by its holder module and takes no parameters")
        return self._load()

    def _load(self) -> Any:
        try:
            module = importlib.import_module(self._module_name)
        except ModuleNotFoundError as exc:
            if exc.name == self._module_name:
                raise ConfigurationError(f"Holder module {self._module_name!r} not found") from exc
            raise ConstructionError(f"Construction of {self._name!r} failed: {exc}", self._name) from exc
        except ReentrantConstructionError:
            raise
        except Exception as exc:
            logger.debug("Holder module %s failed to import: %s", self._module_name, exc)
            raise ConstructionError(f"Construction of {self._name!r} failed: {exc}", self._name) from exc

        # Only the importing thread can get a module back mid-initialisation.
        if _initializing(module):
            raise ReentrantConstructionError(
                f"Holder module {self._module_name!r} called get_instance() while being imported"
            )
        try:
            return getattr(module, self._attribute)
        except AttributeError:
            raise ConfigurationError(
                f"Holder module {self._module_name!r} has no attribute {self._attribute!r}"
            ) from None

    def _reset(self) -> None:
        with self._lock:
            sys.modules.pop(self._module_name, None)
            parent, _, child = self._module_name.rpartition(".")
            if parent and parent in sys.modules:
                sys.modules[parent].__dict__.pop(child, None)
        logger.debug("Singleton %s reset", self._name)


def _parse_target(target: str) -> tuple:
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute.isidentifier():
        raise ConfigurationError(f"Import target must look like 'package.module:attribute', got {target!r}")
    return module_name, attribute


def _initializing(module: Any) -> bool:
    return bool(getattr(getattr(module, "__spec__", None), "_initializing", False))
