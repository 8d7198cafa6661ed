"""Single statement executed once per item of a collection."""
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from dbkit.dialect import DialectStrategy, get_db_dialect
from dbkit.exceptions import ConfigurationError, MissingParameterError
from dbkit.statement.base import BoundStatement, Parameterized, dumpsql

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Batch(Parameterized[Callable[[T], Any], None]):
    """A parameterized statement run for every item of a collection.

    Each parameter is bound to an extractor, a callable applied to the item
    to produce the value for that parameter:

        batch('insert into users (name, age) values (:name, :age)', users)
            .param('name', lambda u: u.name, 'age', lambda u: u.age)

    All rows are collected first and sent in one ``executemany``. An empty
    collection is a no-op.
    """

    def __init__(self, sql: str, items: Iterable[T], transaction: bool = True) -> None:
        super().__init__(sql, transaction)
        self.items = list(items)

    def build(self, cn: Any, dialect: DialectStrategy | None = None) -> BoundStatement:
        """Compile the template; values are bound per item at execution.
        """
        dialect = dialect or get_db_dialect(cn)
        compiled = dialect.compile(self.single_statement())
        return BoundStatement(compiled.sql, compiled.names)

    def extract_rows(self, names: tuple[str, ...]) -> list[tuple]:
        """Apply the extractors to every item, in placeholder order.

        Raises MissingParameterError before any value is extracted when a
        parameter has no extractor.
        """
        extractors = []
        for name in names:
            if name not in self.parameters:
                raise MissingParameterError(name)
            extractor = self.parameters[name]
            if not callable(extractor):
                raise ConfigurationError(f'Extractor for parameter {name} is not callable')
            extractors.append(extractor)
        return [tuple(extractor(item) for extractor in extractors) for item in self.items]

    @dumpsql
    def execute(self, cn: Any) -> None:
        if not self.items:
            logger.debug('Skipping batch with no items')
            return

        dialect = get_db_dialect(cn)
        statement = self.build(cn, dialect)
        rows = self.extract_rows(statement.names)
        cursor = cn.cursor()
        try:
            with self.transaction_scope(cn, dialect):
                cursor.executemany(statement.sql, rows)
        finally:
            cursor.close()
        logger.debug(f'Batch executed for {len(rows)} item(s)')
