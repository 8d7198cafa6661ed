"""
Dialect strategy factory for driver-specific behavior.
"""
from functools import lru_cache

from dbkit.dialect.base import _DIALECT_REGISTRY
from dbkit.dialect.base import DialectStrategy as DialectStrategy
from dbkit.dialect.base import register_dialect as register_dialect
from dbkit.dialect.postgres import PostgresDialect as PostgresDialect
from dbkit.dialect.sqlite import SQLiteDialect as SQLiteDialect
from dbkit.utils import get_dialect_name


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _DIALECT_REGISTRY:
        available = list(_DIALECT_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


@lru_cache(maxsize=8)
def _get_dialect(dialect: str) -> DialectStrategy:
    """Get cached strategy instance for a dialect."""
    _validate_dialect(dialect)
    return _DIALECT_REGISTRY[dialect]()


def get_dialect(dialect: str) -> DialectStrategy:
    """Get strategy instance for a dialect name.
    """
    return _get_dialect(dialect)


def get_dialect_class(dialect: str) -> type[DialectStrategy]:
    """Get the strategy class for a dialect without instantiating."""
    _validate_dialect(dialect)
    return _DIALECT_REGISTRY[dialect]


def get_db_dialect(cn) -> DialectStrategy:
    """Get dialect strategy for the connection."""
    return _get_dialect(get_dialect_name(cn))


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_DIALECT_REGISTRY.keys())


def is_supported_dialect(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return dialect in _DIALECT_REGISTRY
