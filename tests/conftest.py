import pathlib
import site
from unittest.mock import MagicMock

import pytest
from dbkit.record import clear_descriptor_cache

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(str(HERE))


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear record descriptor caches before and after each test."""
    clear_descriptor_cache()
    yield
    clear_descriptor_cache()


def _create_simple_mock_connection(connection_type='postgresql'):
    """
    Create a simple mock database connection with the specified connection type.

    Dialect detection looks at the module of the connection class, so the
    mock only needs to live in the right module.
    """
    class MockConn:
        def __init__(self):
            pass

    conn = MockConn()

    if connection_type == 'postgresql':
        conn.__class__.__module__ = 'psycopg'
    elif connection_type == 'sqlite':
        conn.__class__.__module__ = 'sqlite3'
    else:
        conn.__class__.__module__ = 'unknown_db'
    conn.__class__.__qualname__ = 'Connection'
    conn.__class__.__name__ = 'Connection'

    return conn


@pytest.fixture
def create_simple_mock_connection():
    """
    Fixture that provides a factory function to create simple mock connections.

    Example usage:
        def test_connection_detection(create_simple_mock_connection):
            pg_conn = create_simple_mock_connection('postgresql')
    """
    def factory(connection_type='postgresql'):
        return _create_simple_mock_connection(connection_type)

    return factory


def _create_mock_dbapi_connection(dialect='sqlite', rowcount=1):
    """MagicMock DB-API connection whose cursor records every call."""
    cn = MagicMock()
    cn.dialect = dialect
    cn.isolation_level = None
    cn.autocommit = True
    cursor = MagicMock()
    cursor.rowcount = rowcount
    cursor.description = [('id',), ('name',)]
    cn.cursor.return_value = cursor
    return cn


@pytest.fixture
def mock_connection():
    """Factory for mock DB-API connections of a given dialect."""
    def factory(dialect='sqlite', rowcount=1):
        return _create_mock_dbapi_connection(dialect, rowcount)

    return factory


@pytest.fixture
def mock_factory():
    """Connection factory returning a fresh MagicMock per call."""
    return MagicMock(side_effect=lambda: MagicMock())
