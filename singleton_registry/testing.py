"""
Test-only helpers.

Nothing here is part of the production accessor contract: production code
never empties a populated registry. Tests use these helpers to start from a
fresh slot instead of sharing process-wide state between test cases.
"""

from __future__ import annotations

import logging

from singleton_registry.registry.base import SingletonRegistry
from singleton_registry.registry.factory import live_registries
from singleton_registry.utils.singleton_meta import SingletonMeta

logger = logging.getLogger(__name__)


def reset_registry(registry: SingletonRegistry) -> None:
    """Empty *registry* so the next ``get_instance`` constructs again.

    Eager registries construct again immediately; import-holder registries
    drop their holder module from ``sys.modules``.
    """
    registry._reset()


def reset_singleton_class(cls: type) -> None:
    """Forget the instance of a class built with ``SingletonMeta``."""
    if not isinstance(cls, SingletonMeta):
        raise TypeError(f"{cls.__name__} does not use SingletonMeta")
    registry = SingletonMeta._registries.get(cls)
    if registry is not None:
        registry._reset()


def reset_all() -> int:
    """Reset every live registry built by ``create_registry`` or ``lazy_singleton``.

    Returns the number of registries reset.
    """
    registries = live_registries()
    for registry in registries:
        registry._reset()
    logger.debug("Reset %d registries", len(registries))
    return len(registries)
