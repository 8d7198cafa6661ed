"""
Base class for named-parameter statements.

A statement wraps one SQL template and its parameter bindings. Building a
statement for a connection compiles the template into the connection's
placeholder style; executing it runs the statement on that connection,
inside an explicit transaction unless the statement opted out.
"""
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from contextlib import AbstractContextManager, nullcontext
from functools import wraps
from typing import Any, Generic, Self, TypeVar

from dbkit.dialect import DialectStrategy, get_db_dialect
from dbkit.exceptions import ConfigurationError, StatementCountError
from dbkit.sql import bind_values, split_statements
from dbkit.transaction import Transaction

logger = logging.getLogger(__name__)

U = TypeVar('U')
R = TypeVar('R')


def dumpsql(func):
    """Decorator for logging statement execution and timing."""
    @wraps(func)
    def wrapper(self, cn: Any, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'{type(self).__name__} SQL:\n{self.sql}\nparams: {list(self.parameters)}')
        try:
            return func(self, cn, *args, **kwargs)
        except Exception:
            logger.error(f'Error with {type(self).__name__}:\nSQL:\n{self.sql}')
            raise
        finally:
            logger.debug(f'{type(self).__name__} time: {time.time() - start:.4f}s')
    return wrapper


class BoundStatement:
    """Positional SQL with its parameter slots.

    Slots are addressed 1-based, the way type handlers and the record
    marshaler number them; `set` grows the slot list as needed.
    """

    def __init__(self, sql: str, names: tuple[str, ...] = (),
                 args: tuple | list = ()) -> None:
        self.sql = sql
        self.names = names
        self.args = list(args)

    def __repr__(self) -> str:
        return f'BoundStatement(sql={self.sql!r}, args={self.args!r})'

    def set(self, index: int, value: Any) -> None:
        """Write a value into parameter slot `index` (1-based).
        """
        if index < 1:
            raise IndexError(f'Parameter index must be >= 1, got {index}')
        if index > len(self.args):
            self.args.extend([None] * (index - len(self.args)))
        self.args[index - 1] = value

    def parameters(self) -> tuple:
        return tuple(self.args)


class Parameterized(ABC, Generic[U, R]):
    """Named-parameter SQL template plus bindings.

    Parameters are written as ``:name`` in the SQL. Bind values with `param`
    or `params`; both return the statement so calls can be chained:

        update('update t set name = :name where id = :id').param('name', 'x', 'id', 1)
    """

    def __init__(self, sql: str, transaction: bool = True) -> None:
        self._sql = sql
        self._transaction = transaction
        self.parameters: dict[str, U] = {}

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._sql!r})'

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def transaction(self) -> bool:
        return self._transaction

    def param(self, name: str, value: U, *more: Any) -> Self:
        """Bind one or more parameters given as name, value pairs.

            stmt.param('a', 1)
            stmt.param('a', 1, 'b', 2, 'c', 3)
        """
        if len(more) % 2:
            raise ConfigurationError('param() takes name, value pairs')
        self.parameters[name] = value
        for i in range(0, len(more), 2):
            self.parameters[more[i]] = more[i + 1]
        return self

    def params(self, values: Mapping[str, U] | None = None, **kw: U) -> Self:
        """Bind every entry of a mapping and/or the keyword arguments.
        """
        if values:
            self.parameters.update(values)
        self.parameters.update(kw)
        return self

    def statements(self) -> list[str]:
        """Return the ``;`` separated statement segments of the template.
        """
        return split_statements(self._sql)

    def single_statement(self) -> str:
        """Return the only statement of the template.

        Raises StatementCountError when the template holds zero or several
        statements, so nothing is ever silently skipped.
        """
        statements = self.statements()
        if len(statements) != 1:
            raise StatementCountError(len(statements))
        return statements[0]

    def build(self, cn: Any, dialect: DialectStrategy | None = None) -> BoundStatement:
        """Compile the template for a connection and bind parameter values.
        """
        dialect = dialect or get_db_dialect(cn)
        compiled = dialect.compile(self.single_statement())
        values = bind_values(compiled.names, self.parameters)
        return BoundStatement(compiled.sql, compiled.names, values)

    def transaction_scope(self, cn: Any, dialect: DialectStrategy) -> AbstractContextManager:
        """Return the transaction to execute in, or a no-op context when opted out.
        """
        if self._transaction:
            return Transaction(cn, dialect)
        return nullcontext()

    @abstractmethod
    def execute(self, cn: Any) -> R:
        """Run the statement on a DB-API connection."""
