from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pandas as pd
from typedlite.engine import get_available_engines, get_engine_class
from typedlite.engine import is_supported_engine
from typedlite.types import Column

from libb import ConfigOptions

__all__ = [
    'DatabaseOptions',
    'iterdict_data_loader',
    'pandas_data_loader',
]


def iterdict_data_loader(data, columns, **kwargs) -> list[dict]:
    """Minimal data loader.

    Accepts additional keyword arguments for compatibility with other data
    loaders, but doesn't use them.
    """
    if not data:
        return []
    return list(data)


def _empty_dataframe(columns) -> pd.DataFrame:
    """Create empty DataFrame with column metadata."""
    df = pd.DataFrame(columns=Column.get_names(columns))
    df.attrs['column_types'] = Column.get_column_types_dict(columns)
    return df


def pandas_data_loader(data, columns, **kwargs) -> pd.DataFrame:
    """pandas DataFrame loader.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    Includes the decoded column kinds in the DataFrame.attrs attribute.
    """
    if not data:
        return _empty_dataframe(columns)

    df = pd.DataFrame.from_records(list(data), columns=Column.get_names(columns))
    df.attrs['column_types'] = Column.get_column_types_dict(columns)
    return df


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `sqlite`

    - database: path of the database file, or `:memory:`
    - readonly: open without write access (default: False)
    - busy_timeout: milliseconds to wait on a locked database before
      reporting BUSY (default: 0, report at once)
    - statement_cache_size: compiled statements kept by the engine (default: 100)
    - data_loader: callable turning selected rows into the result format
      (default: list of dicts)
    """
    drivername: str = 'sqlite'
    database: str = None
    readonly: bool = False
    busy_timeout: int = 0
    statement_cache_size: int = 100
    data_loader: Callable[..., Any] | None = None

    def __post_init__(self):
        if not is_supported_engine(self.drivername):
            available = get_available_engines()
            raise ValueError(f'drivername must be one of: {available}')
        engine_cls = get_engine_class(self.drivername)
        engine_cls.validate_options(self)
        if self.busy_timeout < 0:
            raise ValueError('busy_timeout cannot be negative')
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader
