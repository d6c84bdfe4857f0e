"""
Engine factory for native database handles.
"""
from typedlite.engine.base import _ENGINE_REGISTRY
from typedlite.engine.base import NativeConnection as NativeConnection
from typedlite.engine.base import NativeCursor as NativeCursor
from typedlite.engine.base import register_engine as register_engine
from typedlite.engine.sqlite import SQLiteConnection as SQLiteConnection
from typedlite.engine.sqlite import SQLiteCursor as SQLiteCursor


def _validate_drivername(drivername: str) -> None:
    """Raise ValueError if drivername is not registered."""
    if drivername not in _ENGINE_REGISTRY:
        available = list(_ENGINE_REGISTRY.keys())
        raise ValueError(f'Unsupported driver: {drivername}. Available: {available}')


def get_available_engines() -> list[str]:
    """Return list of registered driver names."""
    return list(_ENGINE_REGISTRY.keys())


def is_supported_engine(drivername: str) -> bool:
    """Check if a driver name is registered."""
    return drivername in _ENGINE_REGISTRY


def get_engine_class(drivername: str) -> type[NativeConnection]:
    """Get the native connection class for a driver name."""
    _validate_drivername(drivername)
    return _ENGINE_REGISTRY[drivername]
