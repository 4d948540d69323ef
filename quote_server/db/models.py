"""
SQLModel database models.

The tables themselves are created by the SQL scripts in
``quote_server/migrations``; these models only describe them for queries.
"""
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Column, Text, Integer


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class Quote(SQLModel, table=True):
    """
    A quotation keyed by an externally assigned id.

    Ids come from the import source and are never generated, reused or
    reassigned by the database.
    """
    __tablename__ = "quotes"

    id: int = Field(
        sa_column=Column(Integer, primary_key=True, autoincrement=False)
    )
    quote: str = Field(sa_column=Column(Text, nullable=False))
    author: str = Field(default="", sa_column=Column(Text, nullable=False))


class SchemaMigration(SQLModel, table=True):
    """Ledger of applied migration scripts."""
    __tablename__ = "schema_migrations"

    version: int = Field(
        sa_column=Column(Integer, primary_key=True, autoincrement=False)
    )
    description: str = Field(sa_column=Column(Text, nullable=False))
    checksum: str = Field(max_length=64)
    applied_at: Optional[datetime] = Field(default_factory=utc_now)
