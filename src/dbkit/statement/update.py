"""Single data-changing statement (insert, update, delete, DDL)."""
import logging
from typing import Any

from dbkit.dialect import get_db_dialect
from dbkit.statement.base import Parameterized, dumpsql

logger = logging.getLogger(__name__)


class Update(Parameterized[Any, int]):
    """A parameterized update for exactly one statement.

    Returns the number of affected rows as reported by the driver.
    """

    @dumpsql
    def execute(self, cn: Any) -> int:
        dialect = get_db_dialect(cn)
        statement = self.build(cn, dialect)
        cursor = cn.cursor()
        try:
            with self.transaction_scope(cn, dialect):
                cursor.execute(statement.sql, statement.parameters())
                rowcount = cursor.rowcount
        finally:
            cursor.close()
        logger.debug(f'Update affected {rowcount} row(s)')
        return rowcount
