"""
Database facade.

A `Database` ties a connection source (our own `ConnectionPool` or any
external provider) to a local type registry and runs statements on borrowed
connections:

    db = connect(drivername='sqlite', database='app.db')
    db.execute(db.update('insert into users (id, name) values (:id, :name)')
               .param('id', 1, 'name', 'alice'))
    users = db.select_records(db.query('select id, name from users'), User)
"""
import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import fields
from functools import partial
from typing import Any, Self, TypeVar

from dbkit.connection import ConnectionFactory, create_url_from_options
from dbkit.exceptions import ConfigurationError
from dbkit.handlers import TypeHandler
from dbkit.options import DatabaseOptions
from dbkit.pool import ConnectionPool
from dbkit.record import bind_record, map_row, map_rows, record_params
from dbkit.registry import TypeRegistry, base_registry, register_global
from dbkit.registry import unregister_global
from dbkit.row import ResultCursor, Row
from dbkit.sql import sanitize
from dbkit.statement import Batch, Parameterized, Query, Script, Update

from libb import load_options

logger = logging.getLogger(__name__)

__all__ = [
    'ConnectionProvider',
    'Database',
    'connect',
    'add_global_data_mapper',
    'remove_global_data_mapper',
]

T = TypeVar('T')


class ConnectionProvider:
    """Adapter for externally managed connections.

    Args:
        get_connection: Callable returning a usable connection
        release_connection: Callable taking the connection back; when omitted
            releasing is a no-op and the caller owns the connection lifetime
    """

    def __init__(self, get_connection: Callable[[], Any],
                 release_connection: Callable[[Any], None] | None = None) -> None:
        self.get_connection = get_connection
        self.release_connection = release_connection

    def acquire(self, timeout: float | None = None) -> Any:
        return self.get_connection()

    def release(self, cn: Any) -> None:
        if self.release_connection is not None:
            self.release_connection(cn)


class Database:
    """Statements, connections and record mapping behind one object.

    Args:
        source: A `ConnectionPool` or a `ConnectionProvider`
        options: Facade options; only the pool wait timeout, the default
            statement transaction mode and the data loader are used here
    """

    def __init__(self, source: ConnectionPool | ConnectionProvider,
                 options: DatabaseOptions | None = None) -> None:
        self.source = source
        self.options = options
        self.registry = TypeRegistry(parent=base_registry())

    def __repr__(self) -> str:
        return f'Database({self.source!r})'

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def pool(self) -> ConnectionPool | None:
        return self.source if isinstance(self.source, ConnectionPool) else None

    @property
    def transaction(self) -> bool:
        return self.options.transaction if self.options else True

    # Connections

    def get_connection(self) -> Any:
        """Borrow a connection; hand it back with `release_connection`."""
        timeout = self.options.pool_wait_timeout if self.options else None
        return self.source.acquire(timeout)

    def release_connection(self, cn: Any) -> None:
        self.source.release(cn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a connection for the duration of a with block."""
        cn = self.get_connection()
        try:
            yield cn
        finally:
            self.release_connection(cn)

    def resize_pool(self, size: int) -> None:
        if self.pool is None:
            raise ConfigurationError('Only pooled databases can be resized')
        self.pool.resize(size)

    def disconnect(self) -> None:
        """Close every idle pooled connection."""
        if self.pool is not None:
            self.pool.disconnect_all()

    def close(self) -> None:
        self.disconnect()
        logger.debug(f'Closed {self!r}')

    # Statements

    def query(self, sql: str, transaction: bool | None = None) -> Query:
        return Query(sql, self.transaction if transaction is None else transaction)

    def update(self, sql: str, transaction: bool | None = None) -> Update:
        return Update(sql, self.transaction if transaction is None else transaction)

    def script(self, sql: str, transaction: bool | None = None) -> Script:
        return Script(sql, self.transaction if transaction is None else transaction)

    def batch(self, sql: str, items: Iterable[T], transaction: bool | None = None) -> Batch:
        return Batch(sql, items, self.transaction if transaction is None else transaction)

    def execute(self, statement: Parameterized) -> Any:
        """Run a statement on a borrowed connection.

        The connection is released when the statement finishes, or for a
        query when the returned `ResultCursor` is closed.
        """
        cn = self.get_connection()
        try:
            result = statement.execute(cn)
        except Exception:
            self.release_connection(cn)
            raise
        if isinstance(result, ResultCursor):
            result.add_close_callback(partial(self.release_connection, cn))
        else:
            self.release_connection(cn)
        return result

    # Type handlers and records

    def add_data_mapper(self, python_type: type, handler: TypeHandler) -> TypeHandler | None:
        """Register a handler for this database only, shadowing global ones."""
        return self.registry.register(python_type, handler)

    def remove_data_mapper(self, python_type: type) -> TypeHandler | None:
        return self.registry.unregister(python_type)

    def record_adapter(self, record_type: type[T], row: Row) -> T:
        """Map a row to a record by column name."""
        return map_row(row, record_type, self.registry)

    def record_index_adapter(self, record_type: type[T], row: Row, offset: int = 0) -> T:
        """Map a row to a record by column position, starting after `offset` columns."""
        return map_row(row, record_type, self.registry, use_index=True, offset=offset)

    def map_records(self, cursor: Iterable[Row], record_type: type[T],
                    use_index: bool = False, offset: int = 0) -> Iterator[T]:
        return map_rows(cursor, record_type, self.registry, use_index, offset)

    def record_to_database(self, record: Any, statement: Any, offset: int = 0) -> None:
        """Bind record fields into positional slots of a bound statement."""
        bind_record(record, statement, self.registry, offset)

    def record_params(self, record: Any) -> dict[str, Any]:
        """Record fields as named parameter values."""
        return record_params(record, self.registry)

    # Selects

    def select_records(self, query: Query, record_type: type[T],
                       use_index: bool = False, offset: int = 0) -> list[T]:
        """Run a query and map every row to a record."""
        with self.execute(query) as cursor:
            return list(self.map_records(cursor, record_type, use_index, offset))

    def select_scalar(self, query: Query) -> Any:
        """Return the first column of the first row, or None for no rows."""
        with self.execute(query) as cursor:
            row = cursor.fetchone()
            return None if row is None else row.get(1)

    def select(self, query: Query, **kwargs: Any) -> Any:
        """Run a query and hand the rows to the configured data loader.
        """
        with self.execute(query) as cursor:
            data = [row.to_dict() for row in cursor]
            columns = cursor.columns
        data_loader = self.options.data_loader if self.options else None
        if data_loader is None:
            return data
        return data_loader(data, columns, **kwargs)

    @staticmethod
    def sanitize(text: str) -> str:
        return sanitize(text)


def add_global_data_mapper(python_type: type, handler: TypeHandler) -> TypeHandler | None:
    """Register a handler for every database in the process."""
    return register_global(python_type, handler)


def remove_global_data_mapper(python_type: type) -> TypeHandler | None:
    return unregister_global(python_type)


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> Database:
    """Open a pooled database.

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Database backed by a ConnectionPool of `options.pool_size` connections
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    factory = ConnectionFactory(partial(create_url_from_options, options))
    pool = ConnectionPool(factory, options.pool_size)
    logger.debug(f'Connected to {options.drivername} database {options.database}')
    return Database(pool, options)
