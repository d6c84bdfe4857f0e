import pytest
from typedlite.exceptions import TypeMismatchError, UnsupportedConversionError
from typedlite.types import Cell, Column, Int32, Int64, get_decltype_kind
from typedlite.types import register_decltype, resolve_decltype


class TestSizedInt:
    """Sized integer kinds"""

    def test_range_limits(self):
        assert Int32(2**31 - 1) == 2**31 - 1
        assert Int32(-2**31) == -2**31
        assert Int64(2**63 - 1) == 2**63 - 1
        with pytest.raises(OverflowError):
            Int32(2**31)
        with pytest.raises(OverflowError):
            Int64(-2**63 - 1)

    def test_fits(self):
        assert Int32.fits(0)
        assert not Int32.fits(2**31)
        assert Int64.fits(2**31)
        assert not Int64.fits(2**63)

    def test_wrap(self):
        assert Int32.wrap(2**32 + 5) == 5
        assert Int32.wrap(2**31) == -2**31
        assert Int64.wrap(-1) == -1
        assert type(Int32.wrap(7)) is Int32

    def test_kinds_are_distinct(self):
        assert not issubclass(Int32, Int64)
        assert not issubclass(Int64, Int32)
        assert isinstance(Int32(1), int)

    def test_repr(self):
        assert repr(Int32(42)) == 'Int32(42)'
        assert repr(Int64(-1)) == 'Int64(-1)'


class TestCell:
    """Type-checked single value holder"""

    def test_get_same_kind(self):
        cell = Cell('hello')
        assert cell.get(str) == 'hello'
        assert cell.kind is str

    def test_get_without_kind(self):
        assert Cell(1.5).get() == 1.5

    def test_get_mismatched_kind(self):
        cell = Cell(Int32(42), Int32)
        with pytest.raises(TypeMismatchError):
            cell.get(str)
        with pytest.raises(TypeMismatchError):
            cell.get(Int64)
        with pytest.raises(TypeError):
            cell.get(float)

    def test_get_base_kind(self):
        """A value stored as a subclass can be read as its base"""
        cell = Cell(Int32(42), Int32)
        assert cell.get(int) == 42

    def test_explicit_kind(self):
        cell = Cell('', str)
        assert cell.kind is str

    def test_equality(self):
        assert Cell(Int32(1), Int32) == Cell(Int32(1), Int32)
        assert Cell(Int32(1), Int32) != Cell(Int64(1), Int64)
        assert Cell('a') != Cell('b')


class TestDecltypes:
    """Declared type registry"""

    @pytest.mark.parametrize(('decltype', 'kind'), [
        ('TEXT', str),
        ('FLOAT', float),
        ('INTEGER', Int32),
        ('integer', Int32),
        ('Text', str),
    ])
    def test_default_registry(self, decltype, kind):
        assert resolve_decltype(decltype) is kind

    @pytest.mark.parametrize('decltype', ['BLOB', 'REAL', 'VARCHAR(10)', None])
    def test_unsupported(self, decltype):
        assert get_decltype_kind(decltype) is None
        with pytest.raises(UnsupportedConversionError) as exc_info:
            resolve_decltype(decltype, 'col')
        assert exc_info.value.column == 'col'
        assert exc_info.value.decltype == decltype

    def test_register_decltype(self):
        register_decltype('real', float)
        assert resolve_decltype('REAL') is float


def test_column_helpers():
    """Test column name and type helpers"""
    columns = [Column('id', 'INTEGER'), Column('name', 'TEXT'), Column('expr')]
    assert Column.get_names(columns) == ['id', 'name', 'expr']
    assert Column.get_column_types_dict(columns) == {'id': Int32, 'name': str, 'expr': None}
    assert columns[0].python_type is Int32
