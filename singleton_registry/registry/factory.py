"""
singleton_registry.registry.factory
===================================

Strategy table and registry factory.

* Register:   ``@register_strategy("double_checked")``
* Discover:   ``cls = get_strategy("double_checked")``
* Enumerate:  ``available_strategies()  ->  ("double_checked", "eager", ...)``
* Build:      ``registry = create_registry(make_client)``
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable, Dict, Optional, Tuple

from singleton_registry.utils.exceptions import UnknownStrategyError

logger = logging.getLogger(__name__)

# {name: registry class}
_STRATEGIES: Dict[str, type] = {}

# Registries built here, so tests can reset them all at once
_LIVE: "weakref.WeakSet[Any]" = weakref.WeakSet()


# --------------------------------------------------------------------------- #
# Strategy table                                                              #
# --------------------------------------------------------------------------- #
def register_strategy(name: str):
    """
    Class decorator recording a registry implementation under *name*.

    Example
    -------
    ```python
    @register_strategy("eager")
    class EagerRegistry(SingletonRegistry):
        ...
    ```
    """

    def decorator(cls: type) -> type:
        cls.strategy = name
        _STRATEGIES[name] = cls
        logger.debug("Registered strategy %s -> %s", name, cls.__name__)
        return cls

    return decorator


def get_strategy(name: str) -> type:
    """Return the registry class registered as *name*."""
    try:
        return _STRATEGIES[name.lower()]
    except KeyError:
        raise UnknownStrategyError(
            f"No strategy named {name!r}. Available: {available_strategies()}"
        ) from None


def available_strategies() -> Tuple[str, ...]:
    """Return the sorted, frozen list of registered strategy names."""
    return tuple(sorted(_STRATEGIES))


# --------------------------------------------------------------------------- #
# Factory                                                                     #
# --------------------------------------------------------------------------- #
def create_registry(
    factory: Optional[Callable[..., Any]] = None,
    *,
    strategy: Optional[str] = None,
    conflict_policy: Optional[str] = None,
    name: Optional[str] = None,
    target: Optional[str] = None,
    args: tuple = (),
    kwargs: Optional[Dict[str, Any]] = None,
    config=None,
):
    """
    Build a registry using *strategy* (default: ``settings.strategy``).

    Args:
        factory: Callable producing the payload. Not used by ``import_holder``.
        strategy: Registered strategy name.
        conflict_policy: ``ignore``, ``warn`` or ``error``
            (default: ``settings.conflict_policy``).
        name: Label used in log and error messages.
        target: ``"package.module:attribute"`` for the ``import_holder`` strategy.
        args, kwargs: Construction parameters for the ``eager`` strategy.
        config: ``AppConfig`` to read defaults from instead of the global settings.

    Returns:
        A new, independent registry.
    """
    if config is None:
        from singleton_registry.config.settings import settings as config

    cls = get_strategy(strategy or config.strategy)
    registry = cls.from_options(
        factory,
        target=target,
        name=name,
        conflict_policy=conflict_policy or config.conflict_policy,
        args=args,
        kwargs=kwargs,
    )
    _LIVE.add(registry)
    logger.debug("Created %r", registry)
    return registry


def live_registries() -> Tuple[Any, ...]:
    """Registries created through :func:`create_registry` that are still referenced."""
    return tuple(_LIVE)
