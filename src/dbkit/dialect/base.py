"""
Base strategy interface for database dialects.

Defines the abstract base class that all dialect-specific strategy
implementations inherit from. Statements, transactions and the connection
factory talk to a DB-API connection only through this interface for anything
that differs between drivers: placeholder style, auto-commit control,
per-connection setup and multi-statement execution.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from dbkit.exceptions import ConfigurationError
from dbkit.sql import CompiledSql, compile_named

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_DIALECT_REGISTRY: dict[str, type['DialectStrategy']] = {}


def register_dialect(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_dialect('postgresql')
        class PostgresDialect(DialectStrategy):
            ...
    """
    def decorator(cls: type['DialectStrategy']) -> type['DialectStrategy']:
        _DIALECT_REGISTRY[dialect] = cls
        return cls
    return decorator


class DialectStrategy(ABC):
    """Base class for dialect-specific connection behavior.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier."""

    @abstractmethod
    def get_placeholder_style(self) -> str:
        """Return the positional placeholder marker of the driver."""

    @abstractmethod
    def get_autocommit(self, raw_conn: Any) -> Any:
        """Return the current auto-commit state in a form `set_autocommit` accepts.
        """

    @abstractmethod
    def set_autocommit(self, raw_conn: Any, state: Any) -> None:
        """Restore an auto-commit state returned by `get_autocommit`.
        """

    @abstractmethod
    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode."""

    @abstractmethod
    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode so statements run in an explicit transaction."""

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-zero values
        """

    @classmethod
    def validate_options(cls, options: Any) -> None:
        """Validate options for this dialect.

        Raises
            ConfigurationError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ConfigurationError(f'field {field} cannot be None or 0')

    def connect_args(self) -> dict[str, Any]:
        """Extra keyword arguments passed to the driver when connecting.
        """
        return {}

    @abstractmethod
    def blob_literal(self, data: bytes) -> str:
        """Render binary data as an SQL literal for script substitution."""

    def configure_connection(self, raw_conn: Any) -> None:
        """Apply dialect settings to a freshly opened connection.

        Connections handed out by the pool start in auto-commit mode; the
        statements switch it off for the duration of a transaction.
        """
        self.enable_autocommit(raw_conn)

    def compile(self, sql: str) -> CompiledSql:
        """Compile named-parameter SQL into this dialect's placeholder style.
        """
        return compile_named(sql, self.get_placeholder_style())

    def execute_script(self, cursor: Any, statements: Sequence[str]) -> None:
        """Run already-substituted statements in order on one cursor.
        """
        for statement in statements:
            cursor.execute(statement)
        logger.debug(f'Executed script of {len(statements)} statement(s)')
