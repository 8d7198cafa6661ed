"""
Raw DB-API connection creation through SQLAlchemy dialects.

SQLAlchemy is only used to turn a URL into a driver module plus connect
arguments; the connections it opens are plain DB-API connections (sqlite3,
psycopg) owned by our own pool. Engines are kept in a registry keyed by URL
and disposed at interpreter exit.
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from dbkit.dialect import get_dialect
from dbkit.exceptions import ConfigurationError, ConnectionFailure

__all__ = [
    'ConnectionFactory',
    'create_url_from_options',
    'get_engine',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

# Thread-safe engine registry
_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options, url_creator=sa.URL.create) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.

    Args:
        options: DatabaseOptions object with connection parameters
        url_creator: Function used to create URL objects (default: sqlalchemy.URL.create)
    """
    if options.drivername == 'sqlite':
        return url_creator(
            drivername='sqlite',
            database=options.database
        )

    if options.drivername == 'postgresql':
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname

        return url_creator(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    raise ConfigurationError(f'Unsupported database type: {options.drivername}')


def get_engine(url: sa.URL, engine_factory=sa.create_engine) -> Engine:
    """Get or create the engine for a URL.

    The engine never pools; it only supplies the dialect and driver module.
    """
    key = url.render_as_string(hide_password=False)
    with _engine_registry_lock:
        if key in _engine_registry:
            return _engine_registry[key]
        engine = engine_factory(url, poolclass=NullPool)
        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {url.drivername}')
        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry."""
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionFactory:
    """Callable opening a new, configured DB-API connection per call.

    Args:
        url_builder: Callable returning a SQLAlchemy URL or URL string; it is
            called for every connection so credentials may rotate

    Examples
        factory = ConnectionFactory(lambda: 'sqlite:///app.db')
        cn = factory()
    """

    def __init__(self, url_builder: Callable[[], sa.URL | str]) -> None:
        self.url_builder = url_builder

    def __call__(self) -> Any:
        return self.connect()

    def connect(self) -> Any:
        """Open a raw connection and apply the dialect's settings.

        The connection starts in auto-commit mode.

        Raises
            ConnectionFailure: the driver could not be loaded or refused the connection
        """
        url = sa.make_url(self.url_builder())
        try:
            engine = get_engine(url)
            dialect = get_dialect(engine.dialect.name)
            cargs, cparams = engine.dialect.create_connect_args(engine.url)
            cparams = {**dialect.connect_args(), **cparams}
            raw_conn = engine.dialect.connect(*cargs, **cparams)
        except Exception as e:
            logger.error(f'Could not connect to {url.render_as_string()}: {e}')
            raise ConnectionFailure(f'Could not connect to {url.drivername} database: {e}') from e

        dialect.configure_connection(raw_conn)
        logger.debug(f'Opened {dialect.dialect_name} connection {id(raw_conn)}')
        return raw_conn
