"""
Transaction handling and auto-commit management for statement execution.
"""
import logging
import threading
from typing import Any

from dbkit.dialect import DialectStrategy, get_db_dialect
from dbkit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


_local = threading.local()


def _active_transactions() -> set[int]:
    if not hasattr(_local, 'active_transactions'):
        _local.active_transactions = set()
    return _local.active_transactions


class Transaction:
    """Context manager running statements inside an explicit transaction.

    Entering switches auto-commit off and remembers the previous mode. A clean
    exit commits, an exception rolls back; the previous auto-commit mode is
    restored either way. Nested transactions on the same connection within
    one thread raise ConfigurationError, so statements executed inside one
    must be created with ``transaction=False``.

    Examples
        with Transaction(cn):
            cursor.execute('delete from ...', args)
            update('update t set a = :a', transaction=False).param('a', 1).execute(cn)
    """

    def __init__(self, cn: Any, dialect: DialectStrategy | None = None) -> None:
        self.connection = cn
        self.dialect = dialect or get_db_dialect(cn)
        self._previous_mode: Any = None

    def __enter__(self) -> 'Transaction':
        active = _active_transactions()
        if id(self.connection) in active:
            raise ConfigurationError('Nested transactions are not supported')

        self._previous_mode = self.dialect.get_autocommit(self.connection)
        self.dialect.disable_autocommit(self.connection)
        active.add(id(self.connection))
        logger.debug(f'Started transaction for connection {id(self.connection)}')
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        try:
            if exc_type is not None:
                self._rollback()
            else:
                self.connection.commit()
                logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            _active_transactions().discard(id(self.connection))
            try:
                self.dialect.set_autocommit(self.connection, self._previous_mode)
            except Exception as e:
                logger.error(f'Could not restore auto-commit for connection {id(self.connection)}: {e}')

    def _rollback(self) -> None:
        """Roll back without masking the error that caused it."""
        try:
            self.connection.rollback()
            logger.warning('Rolling back the current transaction')
        except Exception as e:
            logger.error(f'Rollback failed for connection {id(self.connection)}: {e}')
