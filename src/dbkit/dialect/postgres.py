"""
PostgreSQL-specific dialect strategy for psycopg 3.

psycopg uses ``format`` placeholders (``%s``), so literal percent signs in
the SQL text are doubled when templates are compiled. Multi-statement
scripts without parameters are sent to the server in a single round trip.
"""
import logging
from collections.abc import Sequence
from typing import Any

import psycopg
from dbkit.dialect.base import DialectStrategy, register_dialect

logger = logging.getLogger(__name__)


@register_dialect('postgresql')
class PostgresDialect(DialectStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def get_placeholder_style(self) -> str:
        """Return PostgreSQL's placeholder marker.
        """
        return '%s'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'database']

    def blob_literal(self, data: bytes) -> str:
        """Hex-format bytea literal."""
        return f"'\\x{data.hex()}'::bytea"

    def get_autocommit(self, raw_conn: psycopg.Connection) -> bool:
        return raw_conn.autocommit

    def set_autocommit(self, raw_conn: psycopg.Connection, state: bool) -> None:
        raw_conn.autocommit = state

    def enable_autocommit(self, raw_conn: psycopg.Connection) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = True

    def disable_autocommit(self, raw_conn: psycopg.Connection) -> None:
        """Disable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = False

    def execute_script(self, cursor: Any, statements: Sequence[str]) -> None:
        """Send all statements in one execute call.

        psycopg accepts several statements in one query as long as no
        parameters are passed, which is always the case for scripts.
        """
        cursor.execute(';\n'.join(statements))
        logger.debug(f'Executed script of {len(statements)} statement(s) in one batch')
