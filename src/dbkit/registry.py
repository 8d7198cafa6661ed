"""
Layered type-handler registry.

The process-wide base registry is built once with the built-in handlers.
Each `Database` owns a local registry whose parent is the base registry, so
local registrations shadow global ones without affecting other facades:

    local = TypeRegistry(parent=base_registry())
    local.register(Money, MoneyHandler())
    local.resolve(Money)    # local handler
    local.resolve(int)      # falls back to the base registry
"""
import logging
import threading
from typing import Any

from dbkit.handlers import TypeHandler, builtin_handlers

logger = logging.getLogger(__name__)

__all__ = [
    'TypeRegistry',
    'base_registry',
    'register_global',
    'unregister_global',
]


class TypeRegistry:
    """Mapping of types to handlers with an optional parent fallback.
    """

    def __init__(self, parent: 'TypeRegistry | None' = None) -> None:
        self.parent = parent
        self._handlers: dict[type, TypeHandler] = {}
        self._lock = threading.RLock()

    def __contains__(self, python_type: type) -> bool:
        return python_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, python_type: type, handler: TypeHandler) -> TypeHandler | None:
        """Register a handler for a type, returning the one it replaces.
        """
        with self._lock:
            previous = self._handlers.get(python_type)
            self._handlers[python_type] = handler
        logger.debug(f'Registered {handler!r} for {python_type.__name__}')
        return previous

    def unregister(self, python_type: type) -> TypeHandler | None:
        """Remove the handler for a type from this registry only.
        """
        with self._lock:
            removed = self._handlers.pop(python_type, None)
        if removed is not None:
            logger.debug(f'Unregistered {removed!r} for {python_type.__name__}')
        return removed

    def get(self, python_type: type) -> TypeHandler | None:
        """Handler registered in this registry for exactly `python_type`."""
        return self._handlers.get(python_type)

    def _lookup(self, python_type: type) -> TypeHandler | None:
        registry: TypeRegistry | None = self
        while registry is not None:
            handler = registry.get(python_type)
            if handler is not None:
                return handler
            registry = registry.parent
        return None

    def resolve(self, python_type: Any) -> TypeHandler | None:
        """Find the handler for a type.

        Walks the type's MRO; for each class the local entries win over the
        parent chain, so a local handler for a base class still loses to a
        global handler registered for the exact type.
        """
        for cls in getattr(python_type, '__mro__', (python_type,)):
            handler = self._lookup(cls)
            if handler is not None:
                return handler
        return None


_base_registry: TypeRegistry | None = None
_base_registry_lock = threading.Lock()


def base_registry() -> TypeRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _base_registry
    if _base_registry is None:
        with _base_registry_lock:
            if _base_registry is None:
                registry = TypeRegistry()
                for handler in builtin_handlers():
                    registry.register(handler.python_type, handler)
                _base_registry = registry
    return _base_registry


def register_global(python_type: type, handler: TypeHandler) -> TypeHandler | None:
    return base_registry().register(python_type, handler)


def unregister_global(python_type: type) -> TypeHandler | None:
    return base_registry().unregister(python_type)
