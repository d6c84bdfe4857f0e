"""Row container mapping column names to type-checked cells."""
import logging
from collections.abc import Iterator
from typing import Any

from typedlite.exceptions import ColumnNotFoundError
from typedlite.types import Cell

from libb import attrdict

logger = logging.getLogger(__name__)


class Row:
    """Insertion-ordered mapping from column name to a Cell.

    A Row owns its cells: adding a name that is already present replaces
    the previous cell. Typed access goes through ``get(name, kind)``, which
    fails for missing names and for kinds that disagree with the stored one.
    """

    __slots__ = ('_cells',)

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._cells: dict[str, Cell] = {}
        for name, value in (values or {}).items():
            self.add(name, value)

    def get(self, name: str, kind: type = object) -> Any:
        """Return the value stored under name, checked against kind.

        Raises
            ColumnNotFoundError: if name was never added
            TypeMismatchError: if the stored value is not of kind
        """
        return self.cell(name).get(kind)

    def add(self, name: str, value: Any, kind: type | None = None) -> None:
        """Store value under name, replacing any existing cell."""
        if name in self._cells:
            logger.debug(f'Replacing cell for column {name}')
        self._cells[name] = Cell(value, kind)

    def cell(self, name: str) -> Cell:
        try:
            return self._cells[name]
        except KeyError:
            raise ColumnNotFoundError(f'Nonexistent column requested: {name}') from None

    def size(self) -> int:
        """Number of distinct column names currently stored."""
        return len(self._cells)

    def keys(self) -> list[str]:
        return list(self._cells)

    def items(self) -> Iterator[tuple[str, Any]]:
        for name, cell in self._cells.items():
            yield name, cell.get()

    def kinds(self) -> dict[str, type]:
        return {name: cell.kind for name, cell in self._cells.items()}

    def to_dict(self) -> dict[str, Any]:
        return dict(self.items())

    def to_attrdict(self) -> attrdict:
        return attrdict(self.to_dict())

    def copy(self) -> 'Row':
        row = Row()
        row._cells = dict(self._cells)
        return row

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._cells

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        inner = ', '.join(f'{name}={cell.get()!r}' for name, cell in self._cells.items())
        return f'Row({inner})'
