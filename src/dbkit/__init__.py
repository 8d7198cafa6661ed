"""
Named-parameter SQL statements, record mapping and connection pooling for
PostgreSQL and SQLite.

Statements can be run directly on a DB-API connection:
- query(sql).param('id', 1).execute(cn)

or through a pooled `Database`:
- db = connect({'drivername': 'sqlite', 'database': 'app.db'})
- db.select_records(db.query(sql), User)
"""
__version__ = '0.1.0'

from dbkit.connection import ConnectionFactory, create_url_from_options
from dbkit.database import ConnectionProvider, Database
from dbkit.database import add_global_data_mapper, connect
from dbkit.database import remove_global_data_mapper
from dbkit.exceptions import ConfigurationError, ConnectionFailure
from dbkit.exceptions import DatabaseError, MissingParameterError
from dbkit.exceptions import PoolTimeoutError, StatementCountError
from dbkit.exceptions import TypeConversionError, TypeMappingError
from dbkit.handlers import TypeHandler, create_simple_handler
from dbkit.options import DatabaseOptions, iterdict_data_loader
from dbkit.options import pandas_numpy_data_loader
from dbkit.pool import ConnectionPool
from dbkit.record import RecordDescriptor, describe
from dbkit.registry import TypeRegistry, base_registry
from dbkit.row import ResultCursor, Row
from dbkit.sql import sanitize
from dbkit.statement import Batch, Query, Script, Update, batch, query
from dbkit.statement import script, update
from dbkit.transaction import Transaction as transaction
from dbkit.values import Char

__all__ = [
    'Batch',
    'Char',
    'ConfigurationError',
    'ConnectionFactory',
    'ConnectionFailure',
    'ConnectionPool',
    'ConnectionProvider',
    'Database',
    'DatabaseError',
    'DatabaseOptions',
    'MissingParameterError',
    'PoolTimeoutError',
    'Query',
    'RecordDescriptor',
    'ResultCursor',
    'Row',
    'Script',
    'StatementCountError',
    'TypeConversionError',
    'TypeHandler',
    'TypeMappingError',
    'TypeRegistry',
    'Update',
    'add_global_data_mapper',
    'base_registry',
    'batch',
    'connect',
    'create_simple_handler',
    'create_url_from_options',
    'describe',
    'iterdict_data_loader',
    'pandas_numpy_data_loader',
    'query',
    'remove_global_data_mapper',
    'sanitize',
    'script',
    'transaction',
    'update',
]
