"""
Database module - models, migrations and the engine lifecycle.

Uses SQLModel over SQLite; the schema itself comes from versioned SQL scripts.
"""

from quote_server.db import models, migrations, sqlite

__all__ = ["models", "migrations", "sqlite"]
