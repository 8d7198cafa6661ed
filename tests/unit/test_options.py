import pandas as pd
import pytest
from dbkit.connection import create_url_from_options
from dbkit.options import DatabaseOptions, iterdict_data_loader
from dbkit.options import pandas_numpy_data_loader


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30
    )

    assert options.drivername == 'postgresql'
    assert options.appname is not None
    assert options.data_loader == iterdict_data_loader
    assert options.pool_size == 3
    assert options.pool_wait_timeout is None
    assert options.transaction is True


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        DatabaseOptions(drivername='invalid', database='testdb')

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='postgresql', hostname='testhost')

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='sqlite', database='test.db', pool_size=0)


def test_sqlite_options():
    """Test SQLite options validation"""
    options = DatabaseOptions(drivername='sqlite', database='test.db')
    assert options.drivername == 'sqlite'
    assert options.database == 'test.db'

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='sqlite')


def test_sqlite_url():
    options = DatabaseOptions(drivername='sqlite', database='test.db')
    url = create_url_from_options(options)
    assert url.drivername == 'sqlite'
    assert url.database == 'test.db'


def test_postgres_url():
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30,
        appname='tests'
    )
    url = create_url_from_options(options)
    assert url.drivername == 'postgresql+psycopg'
    assert url.host == 'testhost'
    assert url.port == 1234
    assert url.query == {'connect_timeout': '30', 'application_name': 'tests'}


def test_iterdict_data_loader():
    assert iterdict_data_loader([], ['a']) == []
    assert iterdict_data_loader(({'a': 1},), ['a']) == [{'a': 1}]


def test_pandas_numpy_data_loader():
    df = pandas_numpy_data_loader([{'a': 1, 'b': 'x'}, {'a': 2, 'b': 'y'}], ['a', 'b'])
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ['a', 'b']
    assert df['a'].tolist() == [1, 2]


def test_pandas_numpy_data_loader_empty_keeps_columns():
    df = pandas_numpy_data_loader([], ['a', 'b'])
    assert df.empty
    assert list(df.columns) == ['a', 'b']
