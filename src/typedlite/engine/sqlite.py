"""
SQLite engine adapter built on apsw.

apsw exposes SQLite's statement interface closely (declared column types,
result codes on every error, row at a time stepping) but folds binding and
the first step into a single execute call. This adapter restores the
native shape the core expects:
- Prepare compiles only the first statement of the text and reports the rest
  as an unconsumed tail
- Parameters are collected by position and handed over on the first step;
  positions left unbound are NULL
- Column reads coerce between storage classes the way sqlite3_column_* do
- Text buffers are read up to their NUL terminator
- A step after completion restarts the statement (automatic reset)
"""
import logging
import math
import re
from typing import TYPE_CHECKING, Any

import apsw
import apsw.ext
from typedlite import codes
from typedlite.engine.base import NativeConnection, NativeCursor
from typedlite.engine.base import register_engine
from typedlite.types import Int32, Int64

if TYPE_CHECKING:
    from typedlite.options import DatabaseOptions

logger = logging.getLogger(__name__)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_NUMERIC_PREFIX = re.compile(
    r'\s*[+-]?(?:\d+(?P<frac>\.\d*)?|(?P<lead>\.\d+))(?P<exp>[eE][+-]?\d+)?'
)


def _c_string(text: str) -> str:
    """Cut text at its first NUL, as a C reader would."""
    return text.split('\x00', 1)[0]


def _text_to_number(text: str) -> int | float:
    """Parse the longest numeric prefix of text, 0 if there is none."""
    match = _NUMERIC_PREFIX.match(text)
    if match is None:
        return 0
    literal = match.group(0).strip()
    if match.group('frac') is None and match.group('lead') is None and match.group('exp') is None:
        return int(literal)
    return float(literal)


def _float_to_int64(value: float) -> int:
    if math.isnan(value):
        return 0
    if value >= INT64_MAX:
        return INT64_MAX
    if value <= INT64_MIN:
        return INT64_MIN
    return int(value)


def _as_int64(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _float_to_int64(value)
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'replace')
    number = _text_to_number(value)
    if isinstance(number, float):
        return _float_to_int64(number)
    return max(INT64_MIN, min(INT64_MAX, number))


def _as_double(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'replace')
    return float(_text_to_number(value))


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return _c_string(value)
    if isinstance(value, bytes):
        return _c_string(value.decode('utf-8', 'replace'))
    return str(value)


def _result_code(exc: apsw.Error) -> int:
    """Return the SQLite result code carried by an apsw exception.

    apsw-specific errors carry no SQLite code; binding count problems map to
    RANGE and everything else to MISUSE.
    """
    code = getattr(exc, 'result', None)
    if code is not None and code > 0:
        return code
    if isinstance(exc, apsw.BindingsError):
        return codes.RANGE
    return codes.MISUSE


class SQLiteCursor(NativeCursor):
    """Prepared statement on an apsw connection.
    """

    def __init__(self, connection: 'SQLiteConnection', sql: str) -> None:
        self.sql = sql
        self.tail = ''
        self._statement_sql = sql
        self._connection = connection
        self._cursor: apsw.Cursor | None = None
        self._parameter_count = 0
        self._description: tuple[tuple[str, str | None], ...] = ()
        self._bindings: dict[int, Any] = {}
        self._running = False
        self._stepped = False
        self._row: tuple | None = None
        self._open_cursor()

    def _open_cursor(self) -> None:
        self._cursor = self._connection.db.cursor()
        self._cursor.exec_trace = self._trace

    def _trace(self, cursor: apsw.Cursor, sql: str, bindings: Any) -> bool:
        """Refresh the result description before each run."""
        self._description = cursor.get_description()
        return True

    def compile(self) -> int:
        """Compile the first statement of sql without running it.

        Parameter count and result description are known from here on; text
        after the first statement is kept in ``tail`` and never run.
        """
        try:
            details = apsw.ext.query_info(self._connection.db, self.sql)
        except apsw.Error as exc:
            return self._connection.record(exc)
        except TypeError:
            # text holds no statement, only whitespace or comments
            return self._connection.fail(codes.MISUSE, f'no SQL statement to prepare: {self.sql!r}')
        self._statement_sql = details.first_query
        self.tail = details.query_remaining or ''
        self._parameter_count = details.bindings_count
        self._description = details.description
        return codes.OK

    def _collect_bindings(self) -> tuple | None:
        if not self._parameter_count:
            return None
        return tuple(self._bindings.get(i) for i in range(1, self._parameter_count + 1))

    def _bind(self, position: int, value: Any) -> int:
        if self._cursor is None or self._stepped:
            return codes.MISUSE
        if not 1 <= position <= self._parameter_count:
            return codes.RANGE
        self._bindings[position] = value
        return codes.OK

    def step(self) -> int:
        if self._cursor is None:
            return codes.MISUSE
        self._stepped = True
        try:
            if not self._running:
                self._cursor.execute(self._statement_sql, self._collect_bindings())
                self._running = True
            self._row = next(self._cursor)
        except StopIteration:
            self._row = None
            self._running = False
            return codes.DONE
        except apsw.Error as exc:
            self._row = None
            self._running = False
            return self._connection.record(exc)
        return codes.ROW

    def bind_text(self, position: int, data: bytes, nbytes: int) -> int:
        if nbytes >= 0:
            data = data[:nbytes]
        text = data.split(b'\x00', 1)[0].decode('utf-8')
        return self._bind(position, text)

    def bind_int(self, position: int, value: int) -> int:
        return self._bind(position, int(Int32.wrap(value)))

    def bind_int64(self, position: int, value: int) -> int:
        return self._bind(position, int(Int64.wrap(value)))

    def bind_double(self, position: int, value: float) -> int:
        return self._bind(position, float(value))

    def _value(self, index: int) -> Any:
        if self._row is None or not 0 <= index < len(self._row):
            return None
        return self._row[index]

    def column_text(self, index: int) -> str | None:
        return _as_text(self._value(index))

    def column_int(self, index: int) -> int:
        return int(Int32.wrap(_as_int64(self._value(index))))

    def column_int64(self, index: int) -> int:
        return _as_int64(self._value(index))

    def column_double(self, index: int) -> float:
        return _as_double(self._value(index))

    def column_count(self) -> int:
        return len(self._description)

    def column_decltype(self, index: int) -> str | None:
        if not 0 <= index < len(self._description):
            return None
        return self._description[index][1]

    def column_name(self, index: int) -> str:
        if not 0 <= index < len(self._description):
            return ''
        return self._description[index][0]

    def reset(self) -> int:
        if self._cursor is None:
            return codes.MISUSE
        self._row = None
        self._stepped = False
        if not self._running:
            return codes.OK
        self._running = False
        try:
            self._cursor.close()
        except apsw.Error as exc:
            return self._connection.record(exc)
        finally:
            self._open_cursor()
        return codes.OK

    def finalize(self) -> int:
        if self._cursor is None:
            return codes.OK
        cursor, self._cursor = self._cursor, None
        self._row = None
        self._running = False
        try:
            cursor.close(True)
        except apsw.Error as exc:
            return self._connection.record(exc)
        return codes.OK


@register_engine('sqlite')
class SQLiteConnection(NativeConnection):
    """SQLite database handle.
    """

    def __init__(self, options: 'DatabaseOptions') -> None:
        super().__init__(options)
        self.db: apsw.Connection | None = None
        self._errmsg = ''

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def record(self, exc: apsw.Error) -> int:
        """Remember the message of a failed engine call and return its code."""
        self._errmsg = str(exc)
        return _result_code(exc)

    def fail(self, code: int, message: str) -> int:
        """Remember message for a failure detected by the adapter itself."""
        self._errmsg = message
        return code

    def open(self) -> int:
        if self.options.readonly:
            flags = apsw.SQLITE_OPEN_READONLY
        else:
            flags = apsw.SQLITE_OPEN_READWRITE | apsw.SQLITE_OPEN_CREATE
        try:
            self.db = apsw.Connection(self.options.database, flags=flags,
                                      statementcachesize=self.options.statement_cache_size)
            if self.options.busy_timeout:
                self.db.set_busy_timeout(self.options.busy_timeout)
        except apsw.Error as exc:
            self.db = None
            return self.record(exc)
        logger.debug(f'Opened SQLite database {self.options.database} (SQLite {apsw.sqlite_lib_version()})')
        return codes.OK

    def errmsg(self) -> str:
        return self._errmsg

    def prepare(self, sql: str) -> tuple[int, SQLiteCursor | None, str]:
        if self.db is None:
            return self.fail(codes.MISUSE, 'database is not open'), None, ''
        try:
            cursor = SQLiteCursor(self, sql)
        except apsw.Error as exc:
            return self.record(exc), None, ''
        rc = cursor.compile()
        if rc:
            message = self._errmsg
            cursor.finalize()
            self._errmsg = message
            return rc, None, ''
        return codes.OK, cursor, cursor.tail

    def changes(self) -> int:
        if self.db is None:
            return 0
        return self.db.changes()

    def close(self) -> int:
        if self.db is None:
            return codes.OK
        db, self.db = self.db, None
        try:
            db.close()
        except apsw.Error as exc:
            return self.record(exc)
        logger.debug(f'Closed SQLite database {self.options.database}')
        return codes.OK
