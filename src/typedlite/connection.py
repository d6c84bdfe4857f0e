"""
Database connection handling.

This module provides:
1. The `connect()` function for opening a database from options
2. The `Connection` class that owns the native database handle

The Connection creates statements and offers shortcuts that prepare, bind,
run and finalize in one call:
- execute(sql, *args) - Run a statement and return the changed row count
- select(sql, *args) - Run a query and return rows through the data loader
- select_row(sql, *args) - Run a query expecting exactly 1 row
- select_scalar(sql, *args) - Run a query expecting exactly 1 value
"""
import logging
import weakref
from typing import Any, Self

from typedlite import codes
from typedlite.engine import get_engine_class
from typedlite.exceptions import EngineError
from typedlite.options import DatabaseOptions
from typedlite.row import Row
from typedlite.statement import Statement
from typedlite.types import Int64

from libb import attrdict, load_options

__all__ = [
    'Connection',
    'connect',
]

logger = logging.getLogger(__name__)


class Connection:
    """Owns a native database handle and the statements compiled on it.

    Statements keep a reference back to their connection. The connection
    tracks them so that close() finalizes every statement still open before
    releasing the handle.
    """

    def __init__(self, options: DatabaseOptions) -> None:
        self.options = options
        self.native = get_engine_class(options.drivername)(options)
        self._statements: weakref.WeakSet[Statement] = weakref.WeakSet()
        self._closed = True
        self.calls = 0
        self.time = 0

        rc = self.native.open()
        if rc:
            raise EngineError(rc, self.native.errmsg())
        self._closed = False

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Close the connection when exiting the context manager
        """
        try:
            self.close()
            logger.debug('Closed connection via context manager')
        except Exception as e:
            logger.debug(f'Error closing connection in __exit__: {e}')

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f'<Connection {self.options.drivername}:{self.options.database} {state}>'

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dialect(self) -> str:
        return self.options.drivername

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def query(self, sql: str) -> Statement:
        """Compile sql into a Statement.

        Raises
            EngineError: if the connection is closed or the engine rejects sql
        """
        if self._closed:
            raise EngineError(codes.MISUSE, 'connection is closed')
        statement = Statement(self, sql)
        self._statements.add(statement)
        return statement

    def close(self) -> None:
        """Finalize open statements, then close the native handle.
        """
        if self._closed:
            return
        for statement in list(self._statements):
            statement.finalize()
        self._statements.clear()
        self._closed = True
        rc = self.native.close()
        if rc:
            raise EngineError(rc, self.native.errmsg())
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')

    def execute(self, sql: str, *args: Any) -> int:
        """Execute a SQL statement with the given parameters and return the changed row count.
        """
        with self.query(sql) as statement:
            return statement.bind(*args).execute()

    def select(self, sql: str, *args: Any, **kwargs: Any) -> Any:
        """Execute a SELECT query and return its rows through the data loader.

        Rows are decoded using the declared column types.
        """
        with self.query(sql) as statement:
            rows = statement.bind(*args).fetchall(Row)
            columns = statement.columns
        logger.debug(f'Select query returned {len(rows)} row(s)')
        return self.options.data_loader([row.to_dict() for row in rows], columns, **kwargs)

    def select_row(self, sql: str, *args: Any) -> attrdict:
        """Execute a query and return a single row as an attribute dictionary.

        Raises AssertionError if the query returns zero or multiple rows.
        """
        with self.query(sql) as statement:
            rows = statement.bind(*args).fetchall(Row)
        assert len(rows) == 1, f'Expected one row, got {len(rows)}'
        return rows[0].to_attrdict()

    def select_scalar(self, sql: str, *args: Any, kind: Any = Int64) -> Any:
        """Execute a query and return the first column of its single row as kind.

        Raises AssertionError if the query returns zero or multiple rows.
        """
        with self.query(sql) as statement:
            values = statement.bind(*args).fetchall(kind)
        assert len(values) == 1, f'Expected one row, got {len(values)}'
        logger.debug(f'Scalar query returned value of type {type(values[0]).__name__}')
        return values[0]


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> Connection:
    """Open a database connection

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Connection owning the opened database handle
    """
    if not isinstance(options, DatabaseOptions):
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    return Connection(options)
