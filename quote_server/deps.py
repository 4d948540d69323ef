"""
Dependency injection for FastAPI routes.
Provides the shared database engine (connection pool).
"""
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.engine import Engine


# === Database Dependencies ===

_engine: Optional[Engine] = None


def set_engine(engine: Engine) -> None:
    """Install the process-wide engine. Called once during startup."""
    global _engine
    _engine = engine


def engine_ready() -> bool:
    return _engine is not None


def close_engine() -> None:
    """Dispose pooled connections and forget the engine."""
    global _engine
    if _engine is None:
        return
    _engine.dispose()
    _engine = None


def get_engine() -> Engine:
    """
    Engine dependency for FastAPI routes.

    The engine's pool does its own locking; routes share it freely.

    Usage:
        @app.get("/items")
        def list_items(engine: DBEngine):
            ...
    """
    if _engine is None:
        raise RuntimeError("Database engine is not initialized. Call init_store() on startup.")
    return _engine


# === Type Aliases ===

DBEngine = Annotated[Engine, Depends(get_engine)]
