from .connection import (
    Base,
    SessionLocal,
    build_engine,
    engine,
    get_db,
    get_session_factory,
    store_operation,
)

__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "engine",
    "get_db",
    "get_session_factory",
    "store_operation",
]
