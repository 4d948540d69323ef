"""
Quote store operations.

Reads always go to the database; nothing is cached between requests.
SQLAlchemy failures surface as StoreIoError, absence as NotFound.
"""
from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from quote_server.db.models import Quote
from quote_server.errors import NotFound, StoreIoError


def fetch_by_id(engine: Engine, quote_id: int) -> Quote:
    """Look up exactly one quote by primary key."""
    try:
        with Session(engine) as session:
            quote = session.get(Quote, quote_id)
            if quote is not None:
                session.expunge(quote)
    except SQLAlchemyError as e:
        raise StoreIoError(f"Failed to fetch quote {quote_id}", cause=e) from e

    if quote is None:
        raise NotFound(f"No quote with id {quote_id}")
    return quote


def fetch_random_id(engine: Engine) -> int:
    """
    Pick one quote id uniformly at random.

    ORDER BY RANDOM() scans the whole table, which is fine at the sizes
    this server holds but is O(n) per call.
    """
    statement = select(Quote.id).order_by(func.random()).limit(1)
    try:
        with Session(engine) as session:
            quote_id = session.exec(statement).first()
    except SQLAlchemyError as e:
        raise StoreIoError("Failed to select a random quote", cause=e) from e

    if quote_id is None:
        raise NotFound("No quotes available")
    return quote_id


def insert_if_absent(session: Session, quote: Quote) -> bool:
    """
    Insert ``quote`` unless its id already exists.

    Returns True when a row was written, False when the id was taken.
    Other constraint violations propagate to the caller.
    """
    statement = (
        sqlite_insert(Quote.__table__)
        .values(id=quote.id, quote=quote.quote, author=quote.author)
        .on_conflict_do_nothing(index_elements=["id"])
    )
    result = session.connection().execute(statement)
    return result.rowcount == 1


def count_quotes(engine: Engine) -> int:
    try:
        with Session(engine) as session:
            return session.exec(select(func.count()).select_from(Quote)).one()
    except SQLAlchemyError as e:
        raise StoreIoError("Failed to count quotes", cause=e) from e
