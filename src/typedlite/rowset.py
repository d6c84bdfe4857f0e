"""
Single-pass iteration over the rows of a statement.
"""
from collections.abc import Iterator
from typing import Any

from typedlite.row import Row
from typedlite.statement import Statement


class RowIterator(Iterator):
    """Forward-only iterator over a statement.

    Construction immediately fetches the first row, so an iterator over an
    empty result set is exhausted from the start. Every value it yields is
    decoded fresh; holding on to one across the next step is safe.
    """

    def __init__(self, statement: Statement | None = None, kind: Any = Row) -> None:
        self._statement = statement
        self._kind = kind
        self._current: Any = None
        if statement is not None:
            self._advance()

    def _advance(self) -> None:
        self._current = self._statement.fetchone(self._kind)
        if self._current is None:
            self._statement = None

    @property
    def exhausted(self) -> bool:
        return self._statement is None

    def __next__(self) -> Any:
        if self._statement is None:
            raise StopIteration
        value = self._current
        self._advance()
        return value


class Rowset:
    """Lazy view of a statement's rows decoded as kind.

    Usage:
        stmt = cn.query('select name, value from test_table')
        for row in Rowset(stmt):
            print(row.get('name', str))

        for name, value in Rowset(stmt.reset(), (str, Int32)):
            ...

    The rowset does not own the statement. Each call to iter() continues
    from the statement's current position. Iterating again after the
    statement is exhausted starts over from the first row, because a step
    past the end restarts the statement; reset() does the same earlier.
    """

    def __init__(self, statement: Statement, kind: Any = Row) -> None:
        self.statement = statement
        self.kind = kind

    def __iter__(self) -> RowIterator:
        return RowIterator(self.statement, self.kind)
