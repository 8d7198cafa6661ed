"""Low-level connection utilities with no internal dependencies.

These utilities work with raw DBAPI connections and have no imports from
other dbkit modules, making them safe to import without circular
dependency concerns.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a database connection or engine.
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return str(obj.engine.dialect.name).lower()

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def close_quietly(resource: Any, what: str = 'resource') -> None:
    """Close a cursor or connection, logging instead of raising on failure.
    """
    try:
        resource.close()
    except Exception as e:
        logger.error(f'Error closing {what}: {e}', exc_info=e)
