"""
Multi-statement scripts with textual parameter substitution.

UNSAFE PATH: parameters are rendered into the SQL text as literals instead
of being bound to placeholders. Finite numbers go in verbatim, binary values
as dialect blob literals and everything else single quoted with embedded
quotes doubled; nothing more is done against SQL injection. Values without a
literal form (NaN, infinity) are rejected.
Use `Update` or `Batch` for untrusted values.
"""
import logging
from typing import Any

from dbkit.dialect import DialectStrategy, get_db_dialect
from dbkit.exceptions import StatementCountError
from dbkit.sql import substitute_literals
from dbkit.statement.base import BoundStatement, Parameterized, dumpsql

logger = logging.getLogger(__name__)


class Script(Parameterized[Any, None]):
    """One or more ``;`` separated statements executed as one batch.

    Every segment gets its parameters substituted textually, then the whole
    batch runs on one cursor, inside one transaction unless opted out.
    """

    def build(self, cn: Any, dialect: DialectStrategy | None = None) -> list[BoundStatement]:
        """Substitute parameters into every segment.

        Substituted SQL carries no placeholders; the dialect only decides how
        binary values are written.
        """
        statements = self.statements()
        if not statements:
            raise StatementCountError(0, 'at least 1')
        dialect = dialect or get_db_dialect(cn)
        return [BoundStatement(substitute_literals(stmt, self.parameters, dialect.blob_literal))
                for stmt in statements]

    @dumpsql
    def execute(self, cn: Any) -> None:
        dialect = get_db_dialect(cn)
        statements = [stmt.sql for stmt in self.build(cn, dialect)]
        cursor = cn.cursor()
        try:
            with self.transaction_scope(cn, dialect):
                dialect.execute_script(cursor, statements)
        finally:
            cursor.close()
