"""
Engine result codes and their descriptions.

The numeric values are SQLite's primary result codes. Extended result codes
carry the primary code in their low byte, so descriptions are looked up on
``code & 0xFF``.
"""

OK = 0
ERROR = 1
INTERNAL = 2
PERM = 3
ABORT = 4
BUSY = 5
LOCKED = 6
NOMEM = 7
READONLY = 8
INTERRUPT = 9
IOERR = 10
CORRUPT = 11
NOTFOUND = 12
FULL = 13
CANTOPEN = 14
PROTOCOL = 15
EMPTY = 16
SCHEMA = 17
TOOBIG = 18
CONSTRAINT = 19
MISMATCH = 20
MISUSE = 21
NOLFS = 22
AUTH = 23
FORMAT = 24
RANGE = 25
NOTADB = 26
NOTICE = 27
WARNING = 28
ROW = 100
DONE = 101

DESCRIPTIONS: dict[int, str] = {
    OK: 'Successful result',
    ERROR: 'SQL error or missing database',
    INTERNAL: 'Internal logic error in SQLite',
    PERM: 'Access permission denied',
    ABORT: 'Callback routine requested an abort',
    BUSY: 'The database file is locked',
    LOCKED: 'A table in the database is locked',
    NOMEM: 'A malloc() failed',
    READONLY: 'Attempt to write a readonly database',
    INTERRUPT: 'Operation terminated by sqlite3_interrupt()',
    IOERR: 'Some kind of disk I/O error occurred',
    CORRUPT: 'The database disk image is malformed',
    NOTFOUND: 'Unknown opcode in sqlite3_file_control()',
    FULL: 'Insertion failed because database is full',
    CANTOPEN: 'Unable to open the database file',
    PROTOCOL: 'Database lock protocol error',
    EMPTY: 'Database is empty',
    SCHEMA: 'The database schema changed',
    TOOBIG: 'String or BLOB exceeds size limit',
    CONSTRAINT: 'Abort due to constraint violation',
    MISMATCH: 'Data type mismatch',
    MISUSE: 'Library used incorrectly',
    NOLFS: 'Uses OS features not supported on host',
    AUTH: 'Authorization denied',
    FORMAT: 'Auxiliary database format error',
    RANGE: '2nd parameter to sqlite3_bind out of range',
    NOTADB: 'File opened that is not a database file',
    NOTICE: 'Notifications from sqlite3_log()',
    WARNING: 'Warnings from sqlite3_log()',
    ROW: 'sqlite3_step() has another row ready',
    DONE: 'sqlite3_step() has finished executing',
}


def primary_code(code: int) -> int:
    """Strip the extended bits from a result code."""
    if code in (ROW, DONE):
        return code
    return code & 0xFF


def describe(code: int) -> str:
    """Return the description for a primary or extended result code."""
    return DESCRIPTIONS.get(primary_code(code), 'Unknown code')
