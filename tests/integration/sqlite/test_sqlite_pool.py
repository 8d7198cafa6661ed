import threading

import dbkit
import pytest
from dbkit.exceptions import PoolTimeoutError


def test_pool_size_from_options(sqlite_db):
    assert sqlite_db.pool.capacity == 3
    assert sqlite_db.pool.size() == 3


def test_resize_keeps_invariant(sqlite_db):
    pool = sqlite_db.pool
    held = [sqlite_db.get_connection(), sqlite_db.get_connection()]
    sqlite_db.resize_pool(6)
    for cn in held:
        sqlite_db.release_connection(cn)
    assert pool.size() == pool.capacity == 6

    sqlite_db.resize_pool(2)
    assert pool.size() == pool.capacity == 2
    assert sqlite_db.select_scalar(sqlite_db.query('select count(*) from users')) == 0


def test_open_query_holds_connection(sqlite_db):
    cursor = sqlite_db.execute(sqlite_db.query('select * from users'))
    assert sqlite_db.pool.size() == 2
    cursor.close()
    assert sqlite_db.pool.size() == 3


def test_wait_timeout(tmp_path):
    db = dbkit.connect({
        'drivername': 'sqlite',
        'database': str(tmp_path / 'timeout.db'),
        'pool_size': 1,
        'pool_wait_timeout': 0.05,
    })
    try:
        cn = db.get_connection()
        with pytest.raises(PoolTimeoutError):
            db.get_connection()
        db.release_connection(cn)
    finally:
        db.close()


def test_concurrent_writers(sqlite_db):
    errors = []

    def insert(start):
        try:
            for i in range(start, start + 10):
                sqlite_db.execute(sqlite_db.update('insert into users (id, name) values (:id, :name)')
                                  .param('id', i, 'name', f'user{i}'))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=insert, args=(n * 100,)) for n in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sqlite_db.select_scalar(sqlite_db.query('select count(*) from users')) == 30
    assert sqlite_db.pool.size() == sqlite_db.pool.capacity
