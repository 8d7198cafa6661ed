from unittest.mock import MagicMock

import pytest
from dbkit.row import ResultCursor, Row


def test_row_index_is_one_based():
    row = Row([10, 'x'], ['id', 'name'])
    assert row.get(1) == 10
    assert row[2] == 'x'
    with pytest.raises(IndexError):
        row.get(0)
    with pytest.raises(IndexError):
        row.get(3)


def test_row_name_lookup():
    row = Row([1, 2], ['Value', 'value'])
    assert row.get('value') == 2
    assert row.get('Value') == 1
    assert row.get('VALUE') == 1
    with pytest.raises(KeyError):
        row.get('missing')


def test_row_conversions():
    row = Row([1, 'a'], ['id', 'name'])
    assert row.to_dict() == {'id': 1, 'name': 'a'}
    assert row.to_attrdict().name == 'a'
    assert len(row) == 2


def _cursor(batches):
    cursor = MagicMock()
    cursor.description = [('id',), ('name',)]
    cursor.fetchmany.side_effect = batches
    return cursor


def test_result_cursor_iterates_lazily():
    cursor = _cursor([[(1, 'a'), (2, 'b')], [(3, 'c')], []])
    result = ResultCursor(cursor, arraysize=2)
    rows = iter(result)
    assert next(rows).get('name') == 'a'
    assert cursor.fetchmany.call_count == 1
    assert [r.get(1) for r in rows] == [2, 3]
    cursor.fetchmany.assert_called_with(2)


def test_result_cursor_fetch():
    cursor = _cursor([])
    cursor.fetchone.side_effect = [(1, 'a'), None]
    cursor.fetchall.return_value = [(2, 'b')]
    result = ResultCursor(cursor)
    assert result.fetchone().to_dict() == {'id': 1, 'name': 'a'}
    assert result.fetchone() is None
    assert [r.to_dict() for r in result.fetchall()] == [{'id': 2, 'name': 'b'}]


def test_result_cursor_closes_once_with_callbacks():
    cursor = _cursor([])
    on_close = MagicMock()
    extra = MagicMock()
    with ResultCursor(cursor, on_close=on_close) as result:
        result.add_close_callback(extra)
    result.close()
    cursor.close.assert_called_once()
    on_close.assert_called_once()
    extra.assert_called_once()
    assert result.closed


def test_callbacks_run_when_cursor_close_fails():
    cursor = _cursor([])
    cursor.close.side_effect = RuntimeError('closed twice')
    on_close = MagicMock()
    with pytest.raises(RuntimeError):
        ResultCursor(cursor, on_close=on_close).close()
    on_close.assert_called_once()


def test_no_description():
    cursor = MagicMock()
    cursor.description = None
    assert ResultCursor(cursor).columns == []


def test_row_case_folded_lookup_uses_first_match():
    """Columns differing only in case: exact names win, folded names pick the first column"""
    row = Row([1, 2, 3], ['Value', 'value', 'VALUE'])
    assert row.get('Value') == 1
    assert row.get('value') == 2
    assert row.get('VALUE') == 3
    assert row.get('vALUE') == 1


def test_row_duplicate_exact_names_use_first():
    row = Row([1, 2], ['id', 'id'])
    assert row.get('id') == 1
