"""
SQLite-specific dialect strategy.

sqlite3 uses ``qmark`` placeholders and controls transactions through the
connection's ``isolation_level``: ``None`` is auto-commit, any other value
makes the driver open a transaction implicitly before DML statements.
"""
import datetime
import decimal
import logging
import sqlite3
from typing import Any

from dbkit.dialect.base import DialectStrategy, register_dialect

logger = logging.getLogger(__name__)


def adapt_date(val: datetime.date) -> str:
    """Adapt date to ISO 8601 text."""
    return val.isoformat()


def adapt_datetime(val: datetime.datetime) -> str:
    """Adapt datetime to ISO 8601 text with a space separator."""
    return val.isoformat(' ')


def adapt_time(val: datetime.time) -> str:
    """Adapt time to ISO 8601 text."""
    return val.isoformat()


@register_dialect('sqlite')
class SQLiteDialect(DialectStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def get_placeholder_style(self) -> str:
        """Return SQLite's placeholder marker.
        """
        return '?'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def blob_literal(self, data: bytes) -> str:
        return f"X'{data.hex()}'"

    def get_autocommit(self, raw_conn: Any) -> str | None:
        return raw_conn.isolation_level

    def set_autocommit(self, raw_conn: Any, state: str | None) -> None:
        raw_conn.isolation_level = state

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = None

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = 'DEFERRED'

    def connect_args(self) -> dict[str, Any]:
        """Pooled connections move between threads.
        """
        return {'check_same_thread': False}

    def configure_connection(self, raw_conn: Any) -> None:
        """Register type adapters and switch the connection to auto-commit.
        """
        self.register_type_adapters()
        super().configure_connection(raw_conn)

    def register_type_adapters(self) -> None:
        """Register adapters for types sqlite3 cannot bind on its own.

        Date and time values are stored as ISO 8601 text, decimals as text so
        no precision is lost.
        """
        sqlite3.register_adapter(datetime.date, adapt_date)
        sqlite3.register_adapter(datetime.datetime, adapt_datetime)
        sqlite3.register_adapter(datetime.time, adapt_time)
        sqlite3.register_adapter(decimal.Decimal, str)
