import pathlib
import site

import pytest
from typedlite import types

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def restore_decltypes():
    """Restore the declared type registry after each test to ensure test isolation."""
    saved = dict(types._DECLTYPE_REGISTRY)
    yield
    types._DECLTYPE_REGISTRY.clear()
    types._DECLTYPE_REGISTRY.update(saved)


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
