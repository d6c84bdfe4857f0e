"""
Consolidated type handling for the typed access layer.

This module provides:
- Int32, Int64: sized integer kinds matching the engine's integer operations
- Cell: type-checked holder for a single value
- Declared type registry: engine column declared types -> Python kinds
- Column: column metadata from a prepared statement
"""
import logging
from dataclasses import dataclass
from typing import Any

from typedlite.exceptions import TypeMismatchError
from typedlite.exceptions import UnsupportedConversionError

logger = logging.getLogger(__name__)


class SizedInt(int):
    """Integer constrained to a signed two's complement range.
    """
    bits = 64

    def __new__(cls, value: Any = 0) -> 'SizedInt':
        self = super().__new__(cls, value)
        limit = 1 << (cls.bits - 1)
        if not -limit <= self < limit:
            raise OverflowError(f'{int(self)} does not fit in {cls.__name__}')
        return self

    def __repr__(self) -> str:
        return f'{type(self).__name__}({int(self)})'

    @classmethod
    def fits(cls, value: int) -> bool:
        """Check whether value lies in the signed range of this kind."""
        limit = 1 << (cls.bits - 1)
        return -limit <= value < limit

    @classmethod
    def wrap(cls, value: int) -> 'SizedInt':
        """Truncate value to the low bits of this kind, sign extended."""
        modulus = 1 << cls.bits
        value &= modulus - 1
        if value >= modulus >> 1:
            value -= modulus
        return cls(value)


class Int32(SizedInt):
    """Signed 32-bit integer."""
    bits = 32


class Int64(SizedInt):
    """Signed 64-bit integer."""
    bits = 64


class Cell:
    """Holds exactly one value together with the kind it was stored as.

    Access is checked against the stored kind on every read; a request for
    an unrelated kind raises TypeMismatchError rather than converting.
    """

    __slots__ = ('_value', '_kind')

    def __init__(self, value: Any, kind: type | None = None) -> None:
        self._value = value
        self._kind = kind if kind is not None else type(value)

    @property
    def kind(self) -> type:
        return self._kind

    def get(self, kind: type = object) -> Any:
        """Return the stored value if it was stored as kind (or a subclass)."""
        if not issubclass(self._kind, kind):
            raise TypeMismatchError(
                f'Cell holds {self._kind.__name__}, requested {kind.__name__}')
        return self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._kind is other._kind and self._value == other._value

    def __repr__(self) -> str:
        return f'Cell({self._value!r}, {self._kind.__name__})'


# Declared type resolution - engine declared column types -> Python kinds

_DECLTYPE_REGISTRY: dict[str, type] = {}


def register_decltype(decltype: str, kind: type) -> None:
    """Decode columns declared as decltype into kind during generic row decode.

    Usage:
        register_decltype('REAL', float)
    """
    _DECLTYPE_REGISTRY[decltype.upper()] = kind
    logger.debug(f'Registered declared type {decltype.upper()} -> {kind.__name__}')


register_decltype('TEXT', str)
register_decltype('FLOAT', float)
register_decltype('INTEGER', Int32)


def get_decltype_kind(decltype: str | None) -> type | None:
    """Return the Python kind for a declared type, or None if unknown."""
    if decltype is None:
        return None
    return _DECLTYPE_REGISTRY.get(decltype.upper())


def resolve_decltype(decltype: str | None, column: str | None = None) -> type:
    """Return the Python kind for a declared type.

    Raises
        UnsupportedConversionError: if the declared type is not registered
    """
    kind = get_decltype_kind(decltype)
    if kind is None:
        raise UnsupportedConversionError(column, decltype)
    return kind


@dataclass(frozen=True)
class Column:
    """Result column metadata.
    """
    name: str
    decltype: str | None = None

    @property
    def python_type(self) -> type | None:
        return get_decltype_kind(self.decltype)

    @staticmethod
    def get_names(columns: list['Column']) -> list[str]:
        return [c.name for c in columns]

    @staticmethod
    def get_column_types_dict(columns: list['Column']) -> dict[str, type | None]:
        return {c.name: c.python_type for c in columns}
