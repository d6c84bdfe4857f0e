"""
Prepared statement lifecycle.

A Statement sequences prepare -> bind -> step -> extract -> reset/finalize
against one native cursor and translates every engine status into an
EngineError.
"""
import enum
import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, Any, Self

from typedlite import codes
from typedlite.binding import Binder, Extractor
from typedlite.engine.base import NativeCursor
from typedlite.exceptions import EngineError
from typedlite.row import Row
from typedlite.types import Column

if TYPE_CHECKING:
    from typedlite.connection import Connection

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging statement SQL and execution time."""
    @wraps(func)
    def wrapper(self: 'Statement', *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.sql}\nbound: {self.position - 1} parameter(s)')
        try:
            return func(self, *args, **kwargs)
        except Exception:
            logger.error(f'Error with statement:\nSQL:\n{self.sql}')
            raise
        finally:
            elapsed = time.time() - start
            self.connection.addcall(elapsed)
            logger.debug(f'Statement time: {elapsed:.4f}s')
    return wrapper


class StatementState(enum.Enum):
    PREPARED = 'prepared'
    EXECUTING = 'executing'
    EXHAUSTED = 'exhausted'
    FINALIZED = 'finalized'


class Statement:
    """A compiled SQL statement with positional binding and typed fetch.

    Usage:
        with cn.query('select a, b from t where a > ?') as stmt:
            stmt.bind(10)
            row = Row()
            while stmt.fetch(row):
                print(row.get('a', Int32), row.get('b', str))

    The statement owns its native cursor and releases it on finalize(), on
    leaving a with block, or when it is garbage collected. It must not be
    used from more than one thread at a time.

    Only the first statement of sql is compiled; any text after it is kept
    in ``tail`` and never run.
    """

    def __init__(self, connection: 'Connection', sql: str) -> None:
        self.connection = connection
        self.sql = sql
        self.tail = ''
        self._handle: NativeCursor | None = None
        self._binder = Binder()
        self._extractor = Extractor()
        self.state = StatementState.FINALIZED

        rc, handle, tail = connection.native.prepare(sql)
        if rc:
            raise EngineError(rc, connection.native.errmsg())
        self._handle = handle
        self.tail = tail
        if tail.strip():
            logger.debug(f'Statement text after the first statement is not run: {tail.strip()}')
        self.state = StatementState.PREPARED
        logger.debug(f'Prepared statement: {sql}')

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.finalize()

    def __del__(self) -> None:
        if getattr(self, '_handle', None) is not None:
            self.finalize()

    def __repr__(self) -> str:
        return f'<Statement {self.state.value}: {self.sql!r}>'

    @property
    def handle(self) -> NativeCursor:
        """The native cursor.

        Raises
            EngineError: MISUSE once the statement has been finalized
        """
        if self._handle is None:
            raise EngineError(codes.MISUSE, f'statement is finalized: {self.sql}')
        return self._handle

    @property
    def finalized(self) -> bool:
        return self._handle is None

    @property
    def position(self) -> int:
        """1-based position the next bound value will take."""
        return self._binder.position

    @property
    def columns(self) -> list[Column]:
        """Result column metadata as reported by the engine, known from prepare on."""
        handle = self.handle
        return [Column(handle.column_name(i), handle.column_decltype(i))
                for i in range(handle.column_count())]

    def bind(self, *values: Any) -> Self:
        """Bind values to the next parameter positions, in order.

        Returns the statement so calls can be chained.
        """
        handle = self.handle
        for value in values:
            self._binder.bind(value, handle)
        return self

    def _step(self) -> int:
        rc = self.handle.step()
        if rc == codes.ROW:
            self.state = StatementState.EXECUTING
        elif rc == codes.DONE:
            self.state = StatementState.EXHAUSTED
        return rc

    @dumpsql
    def execute(self) -> int:
        """Run a statement that produces no rows.

        Returns the number of rows the statement changed.

        Raises
            EngineError: ROW if the statement produced a row (use fetch()),
                the engine status for any other failure
        """
        rc = self._step()
        if rc == codes.ROW:
            raise EngineError(rc, 'use fetch() instead of execute()')
        if rc != codes.DONE:
            raise EngineError(rc, self.sql)
        return self.connection.native.changes()

    def _advance(self) -> bool:
        """Step once and clear the extractor; True when a row is current."""
        rc = self._step()
        if rc not in (codes.ROW, codes.DONE):
            raise EngineError(rc, self.sql)
        self._extractor.reset()
        return rc == codes.ROW

    def fetch(self, into: Row) -> bool:
        """Step once and decode the current row into ``into``.

        Returns True when a row was decoded. When the statement is done the
        decode still runs against the empty cursor, leaving ``into`` with
        the engine's default values, and False is returned.
        """
        has_row = self._advance()
        self._extractor.extract_into(self.handle, into)
        return has_row

    def fetchone(self, kind: Any = Row) -> Any:
        """Step once and return the current row decoded as kind.

        kind may be Row (decode by declared types), a column kind such as
        str, Int32, Int64, int or float, or a tuple of column kinds.
        Returns None when the statement is done.
        """
        if not self._advance():
            return None
        return self._extractor.extract(self.handle, kind)

    @dumpsql
    def fetchall(self, kind: Any = Row) -> list[Any]:
        """Fetch every remaining row decoded as kind."""
        rows = []
        while (value := self.fetchone(kind)) is not None:
            rows.append(value)
        logger.debug(f'Fetched {len(rows)} row(s)')
        return rows

    def reset(self) -> Self:
        """Rewind for re-execution with new bindings.

        Does nothing once the statement has been finalized.
        """
        if self._handle is None:
            return self
        rc = self._handle.reset()
        if rc:
            raise EngineError(rc, 'reset')
        self._binder.reset()
        self.state = StatementState.PREPARED
        return self

    def finalize(self) -> None:
        """Release the native cursor. Safe to call more than once.
        """
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._binder.reset()
        self.state = StatementState.FINALIZED
        try:
            rc = handle.finalize()
        except Exception as e:
            logger.debug(f'Error finalizing statement: {e}')
            return
        if rc:
            logger.debug(f'Finalize reported status {rc} for: {self.sql}')
        else:
            logger.debug(f'Finalized statement: {self.sql}')
