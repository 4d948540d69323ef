import sqlite3

import pytest
from sqlmodel import Session

from quote_server.db.models import Quote
from quote_server.db.sqlite import check_db_health, create_store_engine, database_path
from quote_server.errors import ErrorKind, NotFound, StoreIoError
from quote_server.services.ingest import import_quotes
from quote_server.services.quotes import (
    count_quotes,
    fetch_by_id,
    fetch_random_id,
    insert_if_absent,
)


def test_fetch_by_id_returns_stored_quote(engine, sample_quotes):
    import_quotes(engine, sample_quotes)

    quote = fetch_by_id(engine, 1)
    assert (quote.id, quote.quote, quote.author) == (1, "A", "Auth1")


def test_fetch_by_id_preserves_text_exactly(engine):
    with Session(engine) as session, session.begin():
        insert_if_absent(session, Quote(id=7, quote="  Ünïcode — \"quoted\"\nline  ", author=""))

    quote = fetch_by_id(engine, 7)
    assert quote.quote == "  Ünïcode — \"quoted\"\nline  "
    assert quote.author == ""


def test_fetch_by_id_missing(engine, sample_quotes):
    import_quotes(engine, sample_quotes)

    with pytest.raises(NotFound) as exc_info:
        fetch_by_id(engine, 99)
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


def test_fetch_random_id_empty_store(engine):
    with pytest.raises(NotFound):
        fetch_random_id(engine)


def test_fetch_random_id_returns_present_id(engine, sample_quotes):
    import_quotes(engine, sample_quotes)

    seen = {fetch_random_id(engine) for _ in range(30)}
    assert seen <= {1, 2}
    assert seen


def test_insert_if_absent_reports_conflict(engine):
    with Session(engine) as session, session.begin():
        assert insert_if_absent(session, Quote(id=5, quote="first", author="X")) is True
    with Session(engine) as session, session.begin():
        assert insert_if_absent(session, Quote(id=5, quote="second", author="Y")) is False

    quote = fetch_by_id(engine, 5)
    assert quote.quote == "first"
    assert quote.author == "X"


def test_count_quotes(engine, sample_quotes):
    assert count_quotes(engine) == 0
    import_quotes(engine, sample_quotes)
    assert count_quotes(engine) == 2


@pytest.fixture
def dropped_table(engine, db_url, sample_quotes):
    """Engine whose quotes table has been removed behind its back."""
    import_quotes(engine, sample_quotes)
    engine.dispose()
    conn = sqlite3.connect(database_path(db_url))
    try:
        conn.execute("DROP TABLE quotes")
        conn.commit()
    finally:
        conn.close()
    return engine


@pytest.mark.parametrize(
    "operation",
    [
        lambda engine: fetch_by_id(engine, 1),
        fetch_random_id,
        count_quotes,
    ],
    ids=["fetch_by_id", "fetch_random_id", "count_quotes"],
)
def test_driver_failure_is_store_io(dropped_table, operation):
    with pytest.raises(StoreIoError) as exc_info:
        operation(dropped_table)
    assert exc_info.value.kind is ErrorKind.STORE_IO
    assert "no such table" in str(exc_info.value)


def test_file_that_is_not_a_database(tmp_path):
    path = tmp_path / "junk.db"
    path.write_bytes(b"this is not an sqlite database" * 100)
    engine = create_store_engine(f"sqlite:///{path}")
    try:
        with pytest.raises(StoreIoError) as exc_info:
            fetch_by_id(engine, 1)
        assert exc_info.value.kind is ErrorKind.STORE_IO
    finally:
        engine.dispose()


def test_health_uses_quote_count(engine, sample_quotes):
    import_quotes(engine, sample_quotes)

    health = check_db_health(engine)
    assert health["status"] == "healthy"
    assert health["counts"] == {"quotes": 2}


def test_health_reports_store_failure(dropped_table):
    health = check_db_health(dropped_table)
    assert health["status"] == "unhealthy"
    assert "no such table" in health["error"]
