"""
Native boundary between the typed access layer and a database engine.

Defines the abstract classes an engine adapter implements. The interface
mirrors the engine's C call interface: operations report integer result
codes (see typedlite.codes) instead of raising, so the core owns the
translation of every status into a structured exception.

Each concrete engine registers its connection class under a driver name:

    @register_engine('sqlite')
    class SQLiteConnection(NativeConnection):
        ...
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typedlite.options import DatabaseOptions

# Registry of driver name -> native connection class
_ENGINE_REGISTRY: dict[str, type['NativeConnection']] = {}


def register_engine(drivername: str):
    """Decorator to register a native connection class for a driver name.
    """
    def decorator(cls: type['NativeConnection']) -> type['NativeConnection']:
        _ENGINE_REGISTRY[drivername] = cls
        return cls
    return decorator


class NativeCursor(ABC):
    """A compiled statement owned by the engine.

    Parameters are addressed 1-based, result columns 0-based.
    """

    @abstractmethod
    def step(self) -> int:
        """Advance the statement.

        Returns ROW when a result row is available, DONE when the statement
        has finished, any other code on failure.
        """

    @abstractmethod
    def bind_text(self, position: int, data: bytes, nbytes: int) -> int:
        """Bind a NUL terminated UTF-8 buffer of nbytes bytes.

        The engine copies the buffer before returning.
        """

    @abstractmethod
    def bind_int(self, position: int, value: int) -> int:
        """Bind a signed 32-bit integer."""

    @abstractmethod
    def bind_int64(self, position: int, value: int) -> int:
        """Bind a signed 64-bit integer."""

    @abstractmethod
    def bind_double(self, position: int, value: float) -> int:
        """Bind a double precision float."""

    @abstractmethod
    def column_text(self, index: int) -> str | None:
        """Read a column as text; None for NULL."""

    @abstractmethod
    def column_int(self, index: int) -> int:
        """Read a column as a signed 32-bit integer."""

    @abstractmethod
    def column_int64(self, index: int) -> int:
        """Read a column as a signed 64-bit integer."""

    @abstractmethod
    def column_double(self, index: int) -> float:
        """Read a column as a double."""

    @abstractmethod
    def column_count(self) -> int:
        """Number of columns in the result set."""

    @abstractmethod
    def column_decltype(self, index: int) -> str | None:
        """Declared type of a result column, None for expressions."""

    @abstractmethod
    def column_name(self, index: int) -> str:
        """Name of a result column."""

    @abstractmethod
    def reset(self) -> int:
        """Return the statement to its initial state, keeping bindings."""

    @abstractmethod
    def finalize(self) -> int:
        """Release the statement."""


class NativeConnection(ABC):
    """An engine database handle.

    Construction never fails; call open() and check its status, then use
    errmsg() for the engine's message on failure.
    """

    def __init__(self, options: 'DatabaseOptions') -> None:
        self.options = options

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return option names that must be set for this engine."""
        return []

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this engine.

        Raises
            ValueError: If any required field is None or empty
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or empty')

    @abstractmethod
    def open(self) -> int:
        """Open the database named in the options."""

    @abstractmethod
    def errmsg(self) -> str:
        """Message for the most recent failure."""

    @abstractmethod
    def prepare(self, sql: str) -> tuple[int, NativeCursor | None, str]:
        """Compile the first statement of sql into a cursor.

        Returns the status, the cursor (None on failure) and the unconsumed
        text following the first statement.
        """

    @abstractmethod
    def changes(self) -> int:
        """Rows modified by the most recently completed statement."""

    @abstractmethod
    def close(self) -> int:
        """Close the database handle."""
