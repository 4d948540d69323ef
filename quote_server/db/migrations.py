"""
Versioned SQL migrations.

Scripts live in a directory as ``NNNN_description.sql`` and are applied in
version order, exactly once each. Every script runs in its own transaction
together with the ``schema_migrations`` row that records it, so a failing
script leaves no trace.
"""
from __future__ import annotations

import hashlib
import logging
import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from quote_server.db.models import SchemaMigration

logger = logging.getLogger(__name__)

_FILENAME_RE = re.compile(r"^(?P<version>\d+)_(?P<description>[\w-]+)\.sql$")


class MigrationError(Exception):
    """A migration script could not be discovered or applied."""


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    path: Path
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


def discover_migrations(directory: Path) -> list[Migration]:
    """Load every ``NNNN_name.sql`` script in ``directory``, sorted by version."""
    directory = Path(directory)
    if not directory.is_dir():
        raise MigrationError(f"Migrations directory not found: {directory}")

    migrations: dict[int, Migration] = {}
    for path in sorted(directory.iterdir()):
        match = _FILENAME_RE.match(path.name)
        if not match or not path.is_file():
            continue
        version = int(match.group("version"))
        if version in migrations:
            raise MigrationError(
                f"Duplicate migration version {version}: "
                f"{migrations[version].path.name} and {path.name}"
            )
        migrations[version] = Migration(
            version=version,
            description=match.group("description").replace("_", " "),
            path=path,
            sql=path.read_text(encoding="utf-8"),
        )
    return [migrations[v] for v in sorted(migrations)]


def split_statements(script: str) -> Iterator[str]:
    """Yield complete SQL statements from a script, ignoring blank tails."""
    buffer = ""
    for char in script:
        buffer += char
        if char == ";" and sqlite3.complete_statement(buffer):
            statement = buffer.strip()
            buffer = ""
            if statement.strip(";").strip():
                yield statement
    if buffer.strip() and _has_sql(buffer):
        raise MigrationError(f"Incomplete SQL statement at end of script: {buffer.strip()[:80]}")


def _has_sql(text: str) -> bool:
    lines = [line.split("--", 1)[0].strip() for line in text.splitlines()]
    return any(lines)


def applied_migrations(engine: Engine) -> dict[int, SchemaMigration]:
    SchemaMigration.__table__.create(engine, checkfirst=True)
    with Session(engine) as session:
        rows = session.exec(select(SchemaMigration)).all()
        return {row.version: row for row in rows}


def run_migrations(engine: Engine, directory: Path) -> list[int]:
    """
    Apply pending migrations from ``directory``.

    Returns the versions applied by this call (empty when up to date).
    Raises MigrationError if an applied script was edited afterwards.
    """
    migrations = discover_migrations(directory)
    applied = applied_migrations(engine)

    newly_applied: list[int] = []
    for migration in migrations:
        existing = applied.get(migration.version)
        if existing is not None:
            if existing.checksum != migration.checksum:
                raise MigrationError(
                    f"Migration {migration.path.name} was modified after it was applied"
                )
            continue

        with Session(engine) as session, session.begin():
            connection = session.connection()
            for statement in split_statements(migration.sql):
                connection.exec_driver_sql(statement)
            session.add(
                SchemaMigration(
                    version=migration.version,
                    description=migration.description,
                    checksum=migration.checksum,
                )
            )
        logger.info("Applied migration %04d (%s)", migration.version, migration.description)
        newly_applied.append(migration.version)

    return newly_applied


def current_version(engine: Engine) -> int:
    """Highest applied migration version, 0 for a fresh database."""
    applied = applied_migrations(engine)
    return max(applied) if applied else 0
