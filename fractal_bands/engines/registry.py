"""Engine registry for discovering and instantiating engines.

Usage:
    @register_engine("my_engine")
    class MyEngine(BufferedEngine):
        ...

    engine = create_engine("my_engine", feed=series)
    engines = list_engines()
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Global registry: engine_name -> engine_class
_REGISTRY: dict[str, type] = {}


def register_engine(name: str):
    """Decorator to register an engine class under a given name.

    Raises:
        ValueError: If an engine with the same name is already registered.
    """

    def decorator(cls):
        if name in _REGISTRY:
            raise ValueError(
                f"Engine '{name}' is already registered by {_REGISTRY[name].__name__}"
            )
        _REGISTRY[name] = cls
        logger.debug("Registered engine: %s -> %s", name, cls.__name__)
        return cls

    return decorator


def get_engine_class(name: str) -> type:
    """Get the engine class by name (without instantiating).

    Raises:
        KeyError: If no engine is registered under the given name.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(f"Unknown engine '{name}'. Available: {available}")
    return cls


def create_engine(name: str, **kwargs: Any):
    """Create an engine instance by name.

    Args:
        name: Registered engine name.
        **kwargs: Arguments passed to the engine constructor.

    Raises:
        KeyError: If no engine is registered under the given name.
    """
    return get_engine_class(name)(**kwargs)


def list_engines() -> list[str]:
    """Return a sorted list of registered engine names."""
    return sorted(_REGISTRY.keys())
