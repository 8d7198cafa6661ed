"""
Row access and result cursors.

A `Row` addresses its values either by 1-based column index or by column
name, which is what type handlers read from. A `ResultCursor` wraps the DB-API
cursor a query ran on, yields `Row` objects lazily and closes the cursor (and
anything bundled with it, such as the pooled connection) when it is closed.
"""
import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Self

from libb import attrdict

logger = logging.getLogger(__name__)


class Row:
    """One result row with index and column-name access."""

    __slots__ = ('values', 'columns', '_positions', '_folded')

    def __init__(self, values: Sequence[Any], columns: Sequence[str]) -> None:
        self.values = tuple(values)
        self.columns = tuple(columns)
        self._positions: dict[str, int] | None = None
        self._folded: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f'Row({self.to_dict()!r})'

    def __getitem__(self, ref: int | str) -> Any:
        return self.get(ref)

    def get(self, ref: int | str) -> Any:
        """Return a value by 1-based column index or by column name.

        Column names match exactly first, then case-insensitively.

        Raises
            IndexError: index outside ``1..len(row)``
            KeyError: no column with that name
        """
        if isinstance(ref, int) and not isinstance(ref, bool):
            if not 1 <= ref <= len(self.values):
                raise IndexError(f'Column index {ref} out of range 1..{len(self.values)}')
            return self.values[ref - 1]
        return self.values[self._position(ref)]

    def _position(self, name: str) -> int:
        if self._positions is None:
            folded: dict[str, int] = {}
            for i, col in enumerate(self.columns):
                folded.setdefault(col.lower(), i)
            self._folded = folded
            self._positions = {col: i for i, col in reversed(list(enumerate(self.columns)))}
        if name in self._positions:
            return self._positions[name]
        try:
            return self._folded[name.lower()]
        except KeyError:
            raise KeyError(f'No column named {name!r}') from None

    def to_dict(self) -> dict[str, Any]:
        """Convert row to dictionary."""
        return dict(zip(self.columns, self.values))

    def to_attrdict(self) -> attrdict:
        return attrdict(self.to_dict())


def column_names(cursor: Any) -> list[str]:
    """Column names from a DB-API cursor description."""
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


class ResultCursor:
    """Lazily iterable query result bundled with its statement.

    Closing the result closes the underlying cursor, then runs any close
    callbacks (the facade uses one to hand the connection back to the pool).
    Supports the context manager protocol.
    """

    def __init__(self, cursor: Any, on_close: Callable[[], None] | None = None,
                 arraysize: int = 100) -> None:
        self.dbapi_cursor = cursor
        self.columns = column_names(cursor)
        self.arraysize = arraysize
        self._callbacks: list[Callable[[], None]] = []
        if on_close is not None:
            self._callbacks.append(on_close)
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __iter__(self) -> Iterator[Row]:
        while True:
            rows = self.dbapi_cursor.fetchmany(self.arraysize)
            if not rows:
                return
            for values in rows:
                yield Row(values, self.columns)

    def add_close_callback(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def fetchone(self) -> Row | None:
        """Fetch next row."""
        values = self.dbapi_cursor.fetchone()
        if values is None:
            return None
        return Row(values, self.columns)

    def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        return [Row(values, self.columns) for values in self.dbapi_cursor.fetchall()]

    def close(self) -> None:
        """Close the cursor and run close callbacks once.
        """
        if self.closed:
            return
        self.closed = True
        try:
            self.dbapi_cursor.close()
        finally:
            for callback in self._callbacks:
                callback()
            logger.debug('Result cursor closed')
