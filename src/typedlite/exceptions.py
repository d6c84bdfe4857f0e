"""
Typed access layer exception classes.
"""
from typedlite import codes

RETRYABLE_CODES = frozenset({codes.BUSY, codes.LOCKED})


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient engine condition.

    Returns True for engine errors that may succeed when the caller tries
    again later:
    - The database file is locked (BUSY)
    - A table in the database is locked (LOCKED)

    Returns False for everything else, including syntax errors, constraint
    violations and type conversion failures. This layer never retries on its
    own; the check is for callers that implement their own policy.

    :param exc: The exception to check.
    :returns: True if the error is likely transient and worth retrying.
    """
    if not isinstance(exc, EngineError):
        return False
    return codes.primary_code(exc.code) in RETRYABLE_CODES


class DatabaseError(Exception):
    """Base class for all typedlite errors.
    """


class EngineError(DatabaseError):
    """Non-zero status reported by the database engine.

    Carries the numeric status, its description from the fixed result code
    table and optional caller context such as the SQL text or the name of
    the failing operation.
    """

    def __init__(self, code: int, context: str = '') -> None:
        self.code = code
        self.description = codes.describe(code)
        self.context = context
        super().__init__(f'SQLITE[{code}]: {self.description} ({context})')


class TypeConversionError(DatabaseError):
    """Error converting a value between Python and the engine.
    """


class TypeMismatchError(TypeConversionError, TypeError):
    """A stored cell was requested as a different type.
    """


class ColumnNotFoundError(DatabaseError, KeyError):
    """A row entry was requested by a name that was never added.
    """

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ''


class UnsupportedConversionError(TypeConversionError):
    """Generic row decode met a declared column type it cannot handle.
    """

    def __init__(self, column: str | None, decltype: str | None) -> None:
        self.column = column
        self.decltype = decltype
        super().__init__(f'Unsupported conversion for column {column!r} '
                         f'with declared type {decltype!r}')
