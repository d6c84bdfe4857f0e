"""
Positional parameter binding and column extraction.

Binder maps the Python type of an argument to one of the engine's typed
bind operations; Extractor maps a requested Python kind to one of the
engine's typed column reads. Both only record how many positions they have
handled. The statement passes its cursor on every call, so neither holds a
handle that could go stale.

Supported kinds are extended by registration:

    @Binder.bind.register(decimal.Decimal)
    def _bind_decimal(self, value, cursor):
        self.bind(str(value), cursor)

    @register_extractor(decimal.Decimal)
    def _extract_decimal(extractor, cursor):
        return extractor.advance(decimal.Decimal(cursor.column_text(extractor.index) or 0))
"""
import functools
import logging
import uuid
from collections.abc import Callable
from typing import Any

from typedlite.engine.base import NativeCursor
from typedlite.exceptions import EngineError, TypeConversionError
from typedlite.row import Row
from typedlite.types import Int32, Int64, resolve_decltype

logger = logging.getLogger(__name__)


class Binder:
    """Binds arguments to consecutive 1-based parameter positions.
    """

    def __init__(self) -> None:
        self._bound: list[int] = []

    @property
    def position(self) -> int:
        """Position the next bind will use."""
        return len(self._bound) + 1

    def reset(self) -> None:
        self._bound.clear()

    def _check(self, rc: int, operation: str) -> None:
        if rc:
            raise EngineError(rc, operation)
        self._bound.append(self.position)

    @functools.singledispatchmethod
    def bind(self, value: Any, cursor: NativeCursor) -> None:
        """Bind value at the next position."""
        raise TypeConversionError(f'Cannot bind value of type {type(value).__name__}')

    @bind.register(str)
    def _bind_text(self, value: str, cursor: NativeCursor) -> None:
        data = value.encode('utf-8') + b'\x00'
        self._check(cursor.bind_text(self.position, data, len(data)), 'bind_text')

    @bind.register(Int32)
    def _bind_int32(self, value: Int32, cursor: NativeCursor) -> None:
        self._check(cursor.bind_int(self.position, value), 'bind_int')

    @bind.register(Int64)
    def _bind_int64(self, value: Int64, cursor: NativeCursor) -> None:
        self._check(cursor.bind_int64(self.position, value), 'bind_int64')

    @bind.register(int)
    def _bind_integer(self, value: int, cursor: NativeCursor) -> None:
        if Int32.fits(value):
            self.bind(Int32(value), cursor)
        else:
            self.bind(Int64(value), cursor)

    @bind.register(float)
    def _bind_double(self, value: float, cursor: NativeCursor) -> None:
        self._check(cursor.bind_double(self.position, value), 'bind_double')

    @bind.register(uuid.UUID)
    def _bind_uuid(self, value: uuid.UUID, cursor: NativeCursor) -> None:
        self.bind(str(value), cursor)


# Registry of requested kind -> column decoder
_EXTRACTOR_REGISTRY: dict[type, Callable[['Extractor', NativeCursor], Any]] = {}


def register_extractor(kind: type):
    """Decorator to register the decoder used when kind is requested.

    The decoder receives the extractor and the cursor, reads the column at
    ``extractor.index`` and returns ``extractor.advance(value)``.
    """
    def decorator(func: Callable[['Extractor', NativeCursor], Any]):
        _EXTRACTOR_REGISTRY[kind] = func
        return func
    return decorator


class Extractor:
    """Reads consecutive 0-based result columns as requested kinds.
    """

    def __init__(self) -> None:
        self._extracted: list[int] = []

    @property
    def index(self) -> int:
        """Column the next read will use."""
        return len(self._extracted)

    def reset(self) -> None:
        self._extracted.clear()

    def advance(self, value: Any) -> Any:
        """Mark the current column as read and pass value through."""
        self._extracted.append(self.index)
        return value

    def extract(self, cursor: NativeCursor, kind: Any = Row) -> Any:
        """Decode the next column (or the whole row, or a tuple of kinds)."""
        if isinstance(kind, tuple):
            return tuple(self.extract(cursor, k) for k in kind)
        try:
            decoder = _EXTRACTOR_REGISTRY[kind]
        except (KeyError, TypeError):
            name = getattr(kind, '__name__', repr(kind))
            raise TypeConversionError(f'Cannot extract a column as {name}') from None
        return decoder(self, cursor)

    def extract_into(self, cursor: NativeCursor, row: Row) -> Row:
        """Decode every remaining column into row using the declared types.

        Raises
            UnsupportedConversionError: for a declared type with no decoder;
                columns added before it stay in the row
        """
        count = cursor.column_count()
        while count > self.index:
            index = self.index
            name = cursor.column_name(index)
            kind = resolve_decltype(cursor.column_decltype(index), name)
            row.add(name, self.extract(cursor, kind), kind)
        return row


@register_extractor(str)
def _extract_text(extractor: Extractor, cursor: NativeCursor) -> str:
    value = cursor.column_text(extractor.index)
    return extractor.advance(value if value is not None else '')


@register_extractor(Int32)
def _extract_int32(extractor: Extractor, cursor: NativeCursor) -> Int32:
    return extractor.advance(Int32(cursor.column_int(extractor.index)))


@register_extractor(Int64)
def _extract_int64(extractor: Extractor, cursor: NativeCursor) -> Int64:
    return extractor.advance(Int64(cursor.column_int64(extractor.index)))


@register_extractor(int)
def _extract_integer(extractor: Extractor, cursor: NativeCursor) -> int:
    return extractor.advance(int(cursor.column_int64(extractor.index)))


@register_extractor(float)
def _extract_double(extractor: Extractor, cursor: NativeCursor) -> float:
    return extractor.advance(float(cursor.column_double(extractor.index)))


@register_extractor(Row)
def _extract_row(extractor: Extractor, cursor: NativeCursor) -> Row:
    return extractor.extract_into(cursor, Row())
