import pandas as pd
import pytest
import typedlite as db
from typedlite import codes
from typedlite.exceptions import EngineError, is_retryable_error
from typedlite.types import Int32, Int64


def test_select(sqlite_conn):
    """Test select through the default data loader"""
    result = db.select(sqlite_conn, 'SELECT name, value FROM test_table WHERE value > ? ORDER BY value', 15)
    assert result == [{'name': 'Bob', 'value': 20}, {'name': 'Charlie', 'value': 30}]


def test_select_pandas_loader():
    """Test select returning a DataFrame"""
    with db.connect({'database': ':memory:', 'data_loader': db.pandas_data_loader}) as conn:
        conn.execute('CREATE TABLE t (a INTEGER, b TEXT)')
        conn.execute("INSERT INTO t VALUES (1, 'x'), (2, 'y')")
        df = conn.select('SELECT a, b FROM t ORDER BY a')
        assert isinstance(df, pd.DataFrame)
        assert df['b'].tolist() == ['x', 'y']
        assert df.attrs['column_types'] == {'a': Int32, 'b': str}

        empty = conn.select('SELECT a, b FROM t WHERE a > ?', 5)
        assert empty.empty
        assert list(empty.columns) == ['a', 'b']


def test_select_row(sqlite_conn):
    row = db.select_row(sqlite_conn, 'SELECT name, value FROM test_table WHERE name = ?', 'Alice')
    assert row.name == 'Alice'
    assert row.value == 10


def test_select_row_no_match(sqlite_conn):
    with pytest.raises(AssertionError):
        db.select_row(sqlite_conn, 'SELECT name FROM test_table WHERE name = ?', 'Nobody')


def test_select_scalar(sqlite_conn):
    count = db.select_scalar(sqlite_conn, 'SELECT count(*) FROM test_table')
    assert count == 3
    assert isinstance(count, Int64)
    assert db.select_scalar(sqlite_conn, 'SELECT name FROM test_table WHERE value = ?', 20, kind=str) == 'Bob'


def test_insert_update_delete(sqlite_conn):
    assert db.insert(sqlite_conn, 'INSERT INTO test_table (name, value) VALUES (?, ?)', 'Dana', 40) == 1
    assert db.update(sqlite_conn, 'UPDATE test_table SET value = value + ? WHERE value >= ?', 1, 20) == 3
    assert db.delete(sqlite_conn, 'DELETE FROM test_table WHERE value > ?', 30) == 2
    assert sqlite_conn.calls >= 3


def test_close_finalizes_open_statements():
    conn = db.connect({'database': ':memory:'})
    stmt = conn.query('SELECT 1')
    conn.close()
    assert stmt.finalized
    assert conn.closed


def test_open_failure(tmp_path):
    with pytest.raises(EngineError) as exc_info:
        db.connect({'database': str(tmp_path / 'missing' / 'test.db')})
    assert exc_info.value.code == codes.CANTOPEN


def test_file_database_persists(sqlite_file):
    with db.connect({'database': sqlite_file}) as conn:
        conn.execute('INSERT INTO t VALUES (?, ?)', 1, 'one')
    with db.connect({'database': sqlite_file}) as conn:
        assert conn.select('SELECT a, b FROM t') == [{'a': 1, 'b': 'one'}]


def test_readonly(sqlite_file):
    with db.connect({'database': sqlite_file, 'readonly': True}) as conn:
        with pytest.raises(EngineError) as exc_info:
            conn.execute('INSERT INTO t VALUES (1, ?)', 'x')
        assert exc_info.value.code == codes.READONLY


def test_locked_database_is_retryable(sqlite_file):
    """A write blocked by another connection's transaction reports BUSY"""
    with db.connect({'database': sqlite_file}) as writer, \
            db.connect({'database': sqlite_file}) as blocked:
        writer.execute('BEGIN IMMEDIATE')
        with pytest.raises(EngineError) as exc_info:
            blocked.execute("INSERT INTO t VALUES (1, 'x')")
        assert exc_info.value.code == codes.BUSY
        assert is_retryable_error(exc_info.value)
        writer.execute('COMMIT')
        assert blocked.execute("INSERT INTO t VALUES (1, 'x')") == 1
