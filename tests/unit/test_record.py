import datetime
import decimal
from dataclasses import dataclass
from typing import NamedTuple, Optional

import pytest
from dbkit.exceptions import ConfigurationError, TypeConversionError
from dbkit.exceptions import TypeMappingError
from dbkit.record import FieldSpec, RecordDescriptor, bind_record, describe
from dbkit.record import map_row, map_rows, record_params
from dbkit.registry import TypeRegistry, base_registry
from dbkit.row import Row
from dbkit.statement.base import BoundStatement


@dataclass
class User:
    id: int
    name: str
    balance: decimal.Decimal | None = None


class Point(NamedTuple):
    x: float
    y: Optional[float]


class Unmapped:
    pass


@dataclass
class Holder:
    value: Unmapped


class Custom:
    __descriptor__ = RecordDescriptor(
        [('code', str)], lambda code: Custom(code), lambda rec, name: rec.code.upper())

    def __init__(self, code):
        self.code = code


@pytest.fixture
def registry():
    return TypeRegistry(parent=base_registry())


class TestDescribe:

    def test_dataclass(self):
        descriptor = describe(User)
        assert descriptor.fields == (
            FieldSpec('id', int), FieldSpec('name', str), FieldSpec('balance', decimal.Decimal))
        assert descriptor.build([1, 'a', None]) == User(1, 'a', None)

    def test_namedtuple_unwraps_optional(self):
        descriptor = describe(Point)
        assert descriptor.names == ('x', 'y')
        assert descriptor.fields[1].python_type is float

    def test_explicit_descriptor(self):
        assert describe(Custom).values(Custom('ab')) == ['AB']

    def test_cached(self):
        assert describe(User) is describe(User)

    def test_not_a_record(self):
        with pytest.raises(ConfigurationError):
            describe(Unmapped)


class TestMapRow:

    def test_by_name(self, registry):
        row = Row([decimal.Decimal('5.00'), 'alice', 1], ['BALANCE', 'name', 'id'])
        assert map_row(row, User, registry) == User(1, 'alice', decimal.Decimal('5.00'))

    def test_by_index_with_offset(self, registry):
        row = Row(['skip', 3, 'bob', '1.25'], ['x', 'a', 'b', 'c'])
        user = map_row(row, User, registry, use_index=True, offset=1)
        assert user == User(3, 'bob', decimal.Decimal('1.25'))

    def test_null_component(self, registry):
        row = Row([1.5, None], ['x', 'y'])
        assert map_row(row, Point, registry) == Point(1.5, None)

    def test_short_row_fails_before_reading(self, registry):
        row = Row([1, 'a'], ['id', 'name'])
        with pytest.raises(TypeConversionError) as exc_info:
            map_row(row, User, registry, use_index=True)
        assert exc_info.value.field == 'balance'

    def test_short_row_with_offset(self, registry):
        row = Row([0, 1, 'a'], ['x', 'id', 'name'])
        with pytest.raises(TypeConversionError):
            map_row(row, User, registry, use_index=True, offset=1)

    def test_missing_column_is_conversion_error(self, registry):
        row = Row([1, 'a'], ['id', 'name'])
        with pytest.raises(TypeConversionError) as exc_info:
            map_row(row, User, registry)
        assert exc_info.value.field == 'balance'
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert 'referenceName(balance)' in str(exc_info.value)

    def test_bad_value_is_conversion_error(self, registry):
        row = Row(['not a number', 'a', None], ['id', 'name', 'balance'])
        with pytest.raises(TypeConversionError) as exc_info:
            map_row(row, User, registry)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_unmapped_type(self, registry):
        with pytest.raises(TypeMappingError) as exc_info:
            map_row(Row([1], ['value']), Holder, registry)
        assert exc_info.value.field == 'value'
        assert exc_info.value.python_type is Unmapped

    def test_map_rows_is_lazy(self, registry):
        rows = iter([Row([1.0, 2.0], ['x', 'y']), Row(['bad', 2.0], ['x', 'y'])])
        points = map_rows(rows, Point, registry)
        assert next(points) == Point(1.0, 2.0)
        with pytest.raises(TypeConversionError):
            next(points)


class TestBindRecord:

    def test_bind_with_offset(self, registry):
        statement = BoundStatement('update users set ...', ('skip', 'id', 'name', 'balance'))
        statement.set(1, 'first')
        bind_record(User(7, 'carol', decimal.Decimal('2.5')), statement, registry, offset=1)
        assert statement.parameters() == ('first', 7, 'carol', decimal.Decimal('2.5'))

    def test_none_written_as_null(self, registry):
        statement = BoundStatement('')
        bind_record(User(1, 'a', None), statement, registry)
        assert statement.parameters() == (1, 'a', None)

    def test_unmapped_value_type(self, registry):
        with pytest.raises(TypeMappingError):
            bind_record(Holder(Unmapped()), BoundStatement(''), registry)

    def test_handler_chosen_by_runtime_type(self, registry):
        @dataclass
        class Event:
            when: datetime.date

        statement = BoundStatement('')
        bind_record(Event(datetime.datetime(2024, 1, 1, 12)), statement, registry)
        assert statement.parameters() == (datetime.datetime(2024, 1, 1, 12),)

    def test_record_params(self, registry):
        assert record_params(User(1, 'a'), registry) == {'id': 1, 'name': 'a', 'balance': None}

    def test_round_trip(self, registry):
        user = User(4, 'dave', decimal.Decimal('9.99'))
        params = record_params(user, registry)
        row = Row(list(params.values()), list(params))
        assert map_row(row, User, registry) == user
