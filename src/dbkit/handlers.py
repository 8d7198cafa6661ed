"""
Type handlers converting between Python values and driver values.

A handler writes a Python value into a parameter slot of a bound statement
and reads a column of a result row back into a Python value. `None` is NULL
in both directions and never reaches the conversion functions.

Handlers are looked up by type in a `TypeRegistry`; `builtin_handlers()`
returns the set every process-wide registry starts with.
"""
import datetime
import decimal
import io
import ipaddress
import logging
from collections.abc import Callable
from typing import Any

import numpy as np
from dateutil.parser import isoparse, isoparser
from dbkit.values import Char

logger = logging.getLogger(__name__)

__all__ = [
    'TypeHandler',
    'create_simple_handler',
    'builtin_handlers',
]


def _identity(value: Any) -> Any:
    return value


class TypeHandler:
    """Base class for type handlers.

    Subclasses override `to_database` and `from_database`; `write` and `read`
    take care of NULL and of addressing the statement slot or row column.
    """

    def __init__(self, python_type: type) -> None:
        self.python_type = python_type

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.python_type.__name__})'

    def to_database(self, value: Any) -> Any:
        """Convert a non-null Python value into something the driver binds."""
        return value

    def from_database(self, value: Any) -> Any:
        """Convert a non-null driver value into the handled Python type."""
        return value

    def write(self, statement: Any, index: int, value: Any) -> None:
        """Write `value` into 1-based parameter slot `index` of a bound statement.
        """
        statement.set(index, None if value is None else self.to_database(value))

    def read(self, row: Any, ref: int | str) -> Any:
        """Read a column by 1-based index or name and convert it.
        """
        value = row.get(ref)
        if value is None:
            return None
        return self.from_database(value)


def create_simple_handler(name: str, python_type: type,
                          from_database: Callable[[Any], Any] = _identity,
                          to_database: Callable[[Any], Any] = _identity) -> TypeHandler:
    """Factory function for creating simple type handlers.

    Args:
        name: Handler name (used for the class name)
        python_type: Python type this handler reads and writes
        from_database: Conversion applied to non-null column values
        to_database: Conversion applied to non-null parameter values

    Returns
        A TypeHandler instance
    """
    class SimpleHandler(TypeHandler):
        def __init__(self):
            super().__init__(python_type=python_type)

        def to_database(self, value: Any) -> Any:
            return to_database(value)

        def from_database(self, value: Any) -> Any:
            return from_database(value)

    SimpleHandler.__name__ = f'{name}Handler'
    return SimpleHandler()


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {'1', 't', 'true', 'y', 'yes'}
    return bool(value)


def _to_decimal(value: Any) -> decimal.Decimal:
    if isinstance(value, float):
        return decimal.Decimal(repr(value))
    return decimal.Decimal(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


class StreamHandler(TypeHandler):
    """Binary streams stored as blobs.

    Writing reads the whole stream from its current position; reading wraps
    the blob in a fresh `io.BytesIO`.
    """

    def __init__(self) -> None:
        super().__init__(io.BytesIO)

    def to_database(self, value: io.BytesIO) -> bytes:
        return value.read()

    def from_database(self, value: Any) -> io.BytesIO:
        return io.BytesIO(_to_bytes(value))


class DateHandler(TypeHandler):
    """Dates, parsed from ISO 8601 text when the driver returns strings."""

    def __init__(self) -> None:
        super().__init__(datetime.date)

    def from_database(self, value: Any) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        return isoparse(str(value)).date()


class DateTimeHandler(TypeHandler):
    """Timestamps, parsed from ISO 8601 text when the driver returns strings."""

    def __init__(self) -> None:
        super().__init__(datetime.datetime)

    def from_database(self, value: Any) -> datetime.datetime:
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time())
        return isoparse(str(value))


class TimeHandler(TypeHandler):
    def __init__(self) -> None:
        super().__init__(datetime.time)

    def from_database(self, value: Any) -> datetime.time:
        if isinstance(value, datetime.time):
            return value
        if isinstance(value, datetime.timedelta):
            return (datetime.datetime.min + value).time()
        return isoparser().parse_isotime(str(value))


class NumpyScalarHandler(TypeHandler):
    """NumPy scalars, bound as the equivalent Python scalar.

    Reading produces `scalar_type`, the concrete type used for the abstract
    numpy hierarchy (``np.integer`` reads as ``np.int64``).
    """

    def __init__(self, python_type: type, scalar_type: type) -> None:
        super().__init__(python_type)
        self.scalar_type = scalar_type

    def to_database(self, value: np.generic) -> Any:
        return value.item()

    def from_database(self, value: Any) -> np.generic:
        return self.scalar_type(value)


def builtin_handlers() -> list[TypeHandler]:
    """Return fresh instances of the handlers every base registry holds.
    """
    return [
        create_simple_handler('Int', int, int),
        create_simple_handler('Float', float, float),
        create_simple_handler('Decimal', decimal.Decimal, _to_decimal),
        create_simple_handler('Bool', bool, _to_bool),
        create_simple_handler('Str', str, str),
        create_simple_handler('Char', Char, lambda v: Char(str(v)), str),
        create_simple_handler('Bytes', bytes, _to_bytes, bytes),
        create_simple_handler('ByteArray', bytearray, lambda v: bytearray(_to_bytes(v)), bytes),
        create_simple_handler('MemoryView', memoryview, lambda v: memoryview(_to_bytes(v)), bytes),
        StreamHandler(),
        DateHandler(),
        DateTimeHandler(),
        TimeHandler(),
        create_simple_handler('IPv4', ipaddress.IPv4Address, lambda v: ipaddress.IPv4Address(str(v)), str),
        create_simple_handler('IPv6', ipaddress.IPv6Address, lambda v: ipaddress.IPv6Address(str(v)), str),
        NumpyScalarHandler(np.integer, np.int64),
        NumpyScalarHandler(np.floating, np.float64),
        NumpyScalarHandler(np.bool_, np.bool_),
    ]
