"""Single SELECT statement returning a lazily read result."""
import logging
from typing import Any

from dbkit.dialect import get_db_dialect
from dbkit.row import ResultCursor
from dbkit.statement.base import Parameterized, dumpsql
from dbkit.utils import close_quietly

logger = logging.getLogger(__name__)


class Query(Parameterized[Any, ResultCursor]):
    """A parameterized query for exactly one statement.

    The returned `ResultCursor` owns the DB-API cursor; close it (or use it
    as a context manager) once the rows have been read.
    """

    @dumpsql
    def execute(self, cn: Any) -> ResultCursor:
        dialect = get_db_dialect(cn)
        statement = self.build(cn, dialect)
        cursor = cn.cursor()
        try:
            with self.transaction_scope(cn, dialect):
                cursor.execute(statement.sql, statement.parameters())
        except Exception:
            close_quietly(cursor, 'cursor')
            raise
        return ResultCursor(cursor)
