import pytest
import typedlite as db
from typedlite import codes
from typedlite.connection import Connection
from typedlite.engine import get_available_engines, get_engine_class
from typedlite.engine import is_supported_engine
from typedlite.engine.sqlite import SQLiteConnection
from typedlite.exceptions import EngineError

from tests.fixtures.mocks import FakeConnection, FakeCursor


def test_engine_registry():
    assert is_supported_engine('sqlite')
    assert 'sqlite' in get_available_engines()
    assert get_engine_class('sqlite') is SQLiteConnection
    assert get_engine_class('fake') is FakeConnection
    with pytest.raises(ValueError):
        get_engine_class('oracle')


def test_open_failure(fake_options, monkeypatch):
    monkeypatch.setattr(FakeConnection, 'open', lambda self: codes.CANTOPEN)
    monkeypatch.setattr(FakeConnection, 'errmsg', lambda self: 'unable to open database file')
    with pytest.raises(EngineError) as exc_info:
        Connection(fake_options)
    assert exc_info.value.code == codes.CANTOPEN
    assert exc_info.value.context == 'unable to open database file'


def test_close_finalizes_statements(fake_conn):
    """Closing the connection releases every statement still open"""
    first = fake_conn.query('select 1')
    second = fake_conn.query('select 2')
    cursors = list(fake_conn.native.prepared)
    fake_conn.close()
    assert fake_conn.closed
    assert first.finalized and second.finalized
    assert [cursor.finalizes for cursor in cursors] == [1, 1]


def test_close_twice(fake_conn):
    fake_conn.close()
    fake_conn.close()
    assert fake_conn.closed


def test_close_failure(fake_conn):
    fake_conn.native.close_code = codes.BUSY
    with pytest.raises(EngineError) as exc_info:
        fake_conn.close()
    assert exc_info.value.code == codes.BUSY


def test_query_on_closed_connection(fake_conn):
    fake_conn.close()
    with pytest.raises(EngineError) as exc_info:
        fake_conn.query('select 1')
    assert exc_info.value.code == codes.MISUSE


def test_execute_finalizes_statement(fake_conn):
    fake_conn.native.changed = 2
    assert fake_conn.execute('delete from t where a = ?', 1) == 2
    cursor = fake_conn.native.prepared[0]
    assert cursor.finalizes == 1
    assert cursor.binds == [('int', 1, 1)]
    assert fake_conn.calls == 1


def test_select_uses_data_loader(fake_conn, fake_cursor):
    fake_conn.native.cursors.append(fake_cursor)
    result = db.select(fake_conn, 'select name, value, score from test_table')
    assert result == [
        {'name': 'Alice', 'value': 10, 'score': 1.5},
        {'name': 'Bob', 'value': 20, 'score': 2.5},
    ]


def test_select_row_requires_one_row(fake_conn, fake_cursor):
    fake_conn.native.cursors.append(fake_cursor)
    with pytest.raises(AssertionError):
        fake_conn.select_row('select name, value, score from test_table')


def test_select_scalar(fake_conn):
    fake_conn.native.cursors.append(FakeCursor(columns=[('count', None)], rows=[(2,)]))
    value = db.select_scalar(fake_conn, 'select count(*) from test_table')
    assert value == 2
    assert isinstance(value, db.Int64)


def test_context_manager(fake_options):
    with Connection(fake_options) as conn:
        stmt = conn.query('select 1')
    assert conn.closed
    assert stmt.finalized


def test_repr(fake_conn):
    assert repr(fake_conn) == '<Connection fake:fake.db open>'
    assert fake_conn.dialect == 'fake'
