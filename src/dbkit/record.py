"""
Record marshaling between result rows and bound statements.

A record type is described by a `RecordDescriptor`: its fields in declaration
order, a factory building an instance from positional values and an accessor
reading a field back. Dataclasses and NamedTuples are described automatically
(once per type); any other class may provide a ``__descriptor__`` attribute.

    @dataclass
    class User:
        id: int
        name: str
        email: str | None

    user = map_row(row, User, registry)
    bind_record(user, statement, registry)
"""
import dataclasses
import logging
import threading
import types
import typing
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, NamedTuple, TypeVar

import cachetools
from dbkit.exceptions import ConfigurationError, TypeConversionError
from dbkit.exceptions import TypeMappingError
from dbkit.registry import TypeRegistry
from dbkit.row import Row
from dbkit.statement.base import BoundStatement

logger = logging.getLogger(__name__)

__all__ = [
    'FieldSpec',
    'RecordDescriptor',
    'describe',
    'map_row',
    'map_rows',
    'bind_record',
    'record_params',
    'clear_descriptor_cache',
]

T = TypeVar('T')

_NONE_TYPE = type(None)


class FieldSpec(NamedTuple):
    name: str
    python_type: Any


class RecordDescriptor:
    """Ordered field list plus construction and access functions.
    """

    def __init__(self, fields: Sequence[FieldSpec | tuple[str, Any]],
                 factory: Callable[..., Any],
                 accessor: Callable[[Any, str], Any] = getattr) -> None:
        self.fields = tuple(FieldSpec(*f) for f in fields)
        self.factory = factory
        self.accessor = accessor

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        names = ', '.join(f.name for f in self.fields)
        return f'RecordDescriptor({names})'

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def build(self, values: Sequence[Any]) -> Any:
        """Create a record from values given in field order."""
        return self.factory(*values)

    def values(self, record: Any) -> list[Any]:
        """Read every field of a record, in field order."""
        return [self.accessor(record, f.name) for f in self.fields]


def unwrap_optional(python_type: Any) -> Any:
    """Return ``X`` for ``X | None`` / ``Optional[X]``; any other type unchanged.
    """
    if typing.get_origin(python_type) in {typing.Union, types.UnionType}:
        args = [arg for arg in typing.get_args(python_type) if arg is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return python_type


def _describe_dataclass(cls: type) -> RecordDescriptor:
    hints = typing.get_type_hints(cls)
    fields = [FieldSpec(f.name, unwrap_optional(hints.get(f.name, f.type)))
              for f in dataclasses.fields(cls) if f.init]
    names = [f.name for f in fields]

    def factory(*values):
        return cls(**dict(zip(names, values)))

    return RecordDescriptor(fields, factory)


def _describe_namedtuple(cls: type) -> RecordDescriptor:
    hints = typing.get_type_hints(cls)
    fields = [FieldSpec(name, unwrap_optional(hints.get(name, Any))) for name in cls._fields]
    return RecordDescriptor(fields, cls)


_descriptor_cache: cachetools.LRUCache = cachetools.LRUCache(maxsize=256)
_descriptor_lock = threading.RLock()


@cachetools.cached(_descriptor_cache, lock=_descriptor_lock)
def describe(cls: type) -> RecordDescriptor:
    """Return the descriptor of a record type.

    Derived once per type and cached.

    Raises
        ConfigurationError: the type is neither a dataclass nor a NamedTuple
            and has no ``__descriptor__``
    """
    descriptor = getattr(cls, '__descriptor__', None)
    if descriptor is not None:
        return descriptor() if callable(descriptor) else descriptor
    if dataclasses.is_dataclass(cls):
        return _describe_dataclass(cls)
    if isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, '_fields'):
        return _describe_namedtuple(cls)
    raise ConfigurationError(f'{getattr(cls, "__name__", cls)!r} is not a record type')


def map_row(row: Row, record_type: type[T], registry: TypeRegistry,
            use_index: bool = False, offset: int = 0) -> T:
    """Build a record from a result row.

    Name mode reads each field from the column with the field's name. Index
    mode reads field ``i`` from column ``i + 1 + offset``.

    Raises
        TypeMappingError: no handler for a field's declared type
        TypeConversionError: reading or converting a column failed
    """
    descriptor = describe(record_type)
    fields = descriptor.fields

    if use_index and len(row) < len(fields) + offset:
        missing = fields[max(len(row) - offset, 0)]
        raise TypeConversionError(
            missing.name, missing.python_type,
            f'row has {len(row)} columns, {len(fields) + offset} needed')

    values = []
    for i, field in enumerate(fields):
        handler = registry.resolve(field.python_type)
        if handler is None:
            raise TypeMappingError(field.python_type, field.name)
        ref = i + 1 + offset if use_index else field.name
        try:
            values.append(handler.read(row, ref))
        except Exception as e:
            raise TypeConversionError(field.name, field.python_type, str(e)) from e
    return descriptor.build(values)


def map_rows(rows: Iterable[Row], record_type: type[T], registry: TypeRegistry,
             use_index: bool = False, offset: int = 0) -> Iterator[T]:
    """Lazily map every row of a cursor (or any iterable of rows)."""
    for row in rows:
        yield map_row(row, record_type, registry, use_index, offset)


def bind_record(record: Any, statement: Any, registry: TypeRegistry,
                offset: int = 0) -> None:
    """Write the fields of a record into parameter slots ``i + 1 + offset``.

    Handlers are chosen by the runtime type of each value; ``None`` is bound
    as NULL without a handler.
    """
    descriptor = describe(type(record))
    for i, (field, value) in enumerate(zip(descriptor.fields, descriptor.values(record))):
        index = i + 1 + offset
        if value is None:
            statement.set(index, None)
            continue
        handler = registry.resolve(type(value))
        if handler is None:
            raise TypeMappingError(type(value), field.name)
        handler.write(statement, index, value)


def record_params(record: Any, registry: TypeRegistry) -> dict[str, Any]:
    """Convert a record into a name -> driver value mapping.

    Suitable for `Parameterized.params` when the SQL names its parameters
    after the record fields.
    """
    descriptor = describe(type(record))
    statement = BoundStatement('', descriptor.names)
    bind_record(record, statement, registry)
    return dict(zip(descriptor.names, statement.parameters()))


def clear_descriptor_cache() -> None:
    """Forget every derived descriptor."""
    with _descriptor_lock:
        _descriptor_cache.clear()
