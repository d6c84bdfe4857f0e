"""
Typed access layer for SQLite.

Prepare parameterized statements, bind typed values by position, and read
rows back as typed columns or as generic rows decoded from the engine's
declared column types:

    cn = typedlite.connect({'database': ':memory:'})
    cn.execute('create table t (a INTEGER, b TEXT)')
    with cn.query('insert into t (a, b) values (?, ?)') as stmt:
        stmt.bind(42, 'hello').execute()
    for row in typedlite.Rowset(cn.query('select a, b from t')):
        row.get('a', typedlite.Int32), row.get('b', str)

The query operations can be called either as:
- Module functions: typedlite.select(cn, sql, *args)
- Connection methods: cn.select(sql, *args)
"""
__version__ = '0.1.0'

from typing import Any

from typedlite import codes
from typedlite.binding import Binder, Extractor, register_extractor
from typedlite.connection import Connection, connect
from typedlite.exceptions import ColumnNotFoundError, DatabaseError
from typedlite.exceptions import EngineError, TypeConversionError
from typedlite.exceptions import TypeMismatchError, UnsupportedConversionError
from typedlite.exceptions import is_retryable_error
from typedlite.options import DatabaseOptions, iterdict_data_loader
from typedlite.options import pandas_data_loader
from typedlite.row import Row
from typedlite.rowset import RowIterator, Rowset
from typedlite.statement import Statement, StatementState
from typedlite.types import Cell, Column, Int32, Int64, register_decltype


def execute(cn: Connection, sql: str, *args: Any) -> int:
    """Execute a SQL statement and return the changed row count.
    """
    return cn.execute(sql, *args)


delete = execute
insert = execute
update = execute


def select(cn: Connection, sql: str, *args: Any, **kwargs: Any) -> Any:
    """Execute a SELECT query and return rows through the data loader.
    """
    return cn.select(sql, *args, **kwargs)


def select_row(cn: Connection, sql: str, *args: Any) -> Any:
    """Execute a query and return a single row.

    Raises AssertionError if the query returns zero or multiple rows.
    """
    return cn.select_row(sql, *args)


def select_scalar(cn: Connection, sql: str, *args: Any, kind: Any = Int64) -> Any:
    """Execute a query and return a single value.

    Raises AssertionError if the query returns zero or multiple rows.
    """
    return cn.select_scalar(sql, *args, kind=kind)


__all__ = [
    'Binder',
    'Cell',
    'Column',
    'ColumnNotFoundError',
    'Connection',
    'DatabaseError',
    'DatabaseOptions',
    'EngineError',
    'Extractor',
    'Int32',
    'Int64',
    'Row',
    'RowIterator',
    'Rowset',
    'Statement',
    'StatementState',
    'TypeConversionError',
    'TypeMismatchError',
    'UnsupportedConversionError',
    'codes',
    'connect',
    'delete',
    'execute',
    'insert',
    'is_retryable_error',
    'iterdict_data_loader',
    'pandas_data_loader',
    'register_decltype',
    'register_extractor',
    'select',
    'select_row',
    'select_scalar',
    'update',
]
