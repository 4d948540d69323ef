"""
Quote import with deterministic, idempotent ingestion.

Key design principles:
- Idempotent: a quote whose id already exists is skipped, never overwritten
- Isolated: every record gets its own transaction, one bad record never
  aborts the batch
- Fail fast on the source: an unreadable or malformed file is rejected
  before any record is written
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from quote_server.db.models import Quote
from quote_server.errors import SourceReadError
from quote_server.schemas import QuoteIn
from quote_server.services.quotes import insert_if_absent

logger = logging.getLogger(__name__)

_QUOTE_LIST = TypeAdapter(list[QuoteIn])


@dataclass
class ImportFailure:
    id: int
    reason: str


@dataclass
class ImportReport:
    """Outcome of one import pass."""
    total: int = 0
    inserted: int = 0
    skipped: int = 0
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def clean(self) -> bool:
        """Every record was either inserted or already present."""
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "failed": self.failed,
            "failures": [{"id": f.id, "reason": f.reason} for f in self.failures],
        }


# === Source Parsing ===

def parse_quotes(raw: Union[str, bytes]) -> list[QuoteIn]:
    """
    Parse a JSON array of ``{id, quote, author}`` objects.

    Raises:
        SourceReadError: invalid JSON or any record of the wrong shape
    """
    try:
        return _QUOTE_LIST.validate_json(raw)
    except ValidationError as e:
        raise SourceReadError(
            f"Malformed quote data ({e.error_count()} error(s))", cause=e
        ) from e


def read_quotes_from_file(path: Union[str, Path]) -> list[QuoteIn]:
    """Read and validate a quote file."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SourceReadError(f"Could not read quote file {path}", cause=e) from e
    return parse_quotes(raw)


# === Persistence ===

def import_quotes(engine: Engine, records: Iterable[QuoteIn]) -> ImportReport:
    """
    Load ``records`` into the store, one transaction per record.

    A failing record is rolled back, logged and counted; the loop always
    moves on to the next one. Running the same batch twice leaves the store
    exactly as running it once.
    """
    report = ImportReport()

    for record in records:
        report.total += 1
        quote = Quote(id=record.id, quote=record.quote, author=record.author)
        try:
            with Session(engine) as session, session.begin():
                inserted = insert_if_absent(session, quote)
        except (SQLAlchemyError, OverflowError) as e:
            reason = str(getattr(e, "orig", None) or e)
            logger.error("Failed to insert quote %s: %s", record.id, reason)
            report.failures.append(ImportFailure(id=record.id, reason=reason))
            continue

        if inserted:
            report.inserted += 1
        else:
            report.skipped += 1
            logger.debug("Quote %s already present, skipped", record.id)

    logger.info(
        "Imported %d quote(s): %d new, %d skipped, %d failed",
        report.total,
        report.inserted,
        report.skipped,
        report.failed,
    )
    return report


def import_from_file(engine: Engine, path: Union[str, Path]) -> ImportReport:
    """Read ``path`` and import it. The whole call fails only if the file does."""
    logger.info("Initializing database from %s", path)
    records = read_quotes_from_file(path)
    return import_quotes(engine, records)
