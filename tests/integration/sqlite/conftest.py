import config
import dbkit
import pytest

from libb import Setting

SCHEMA = """
create table users (
    id integer primary key,
    name text not null unique,
    email text,
    balance text
);
create table events (
    id integer primary key,
    happened_on text,
    happened_at text,
    start_time text,
    grade text,
    address text,
    payload blob
);
create table notes (
    name text,
    payload blob
)
"""


@pytest.fixture
def sqlite_db(tmp_path):
    """Pooled database on a temporary file with the test schema"""
    Setting.unlock()
    config.sqlite.database = str(tmp_path / 'test.db')
    Setting.lock()

    db = dbkit.connect('sqlite', config=config)
    db.execute(db.script(SCHEMA))
    yield db
    db.close()
