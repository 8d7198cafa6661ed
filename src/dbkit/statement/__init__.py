"""
Statement builders for named-parameter SQL.

    query(sql)         - one SELECT, returns a ResultCursor
    update(sql)        - one data-changing statement, returns the row count
    script(sql)        - several statements, parameters substituted as text
    batch(sql, items)  - one statement run for every item
"""
from collections.abc import Iterable
from typing import TypeVar

from dbkit.statement.base import BoundStatement as BoundStatement
from dbkit.statement.base import Parameterized as Parameterized
from dbkit.statement.batch import Batch as Batch
from dbkit.statement.query import Query as Query
from dbkit.statement.script import Script as Script
from dbkit.statement.update import Update as Update

T = TypeVar('T')


def query(sql: str, transaction: bool = True) -> Query:
    return Query(sql, transaction)


def update(sql: str, transaction: bool = True) -> Update:
    return Update(sql, transaction)


def script(sql: str, transaction: bool = True) -> Script:
    return Script(sql, transaction)


def batch(sql: str, items: Iterable[T], transaction: bool = True) -> Batch:
    return Batch(sql, items, transaction)
