"""
Smoke tests for the HTTP surfaces.
"""
import json

import pytest
from fastapi.testclient import TestClient

from quote_server.config import get_settings, reload_settings
from quote_server.deps import get_engine
from quote_server.errors import NotFound, SourceReadError, StoreIoError
from quote_server.services import handlers
from quote_server.services.ingest import import_quotes
from quote_server.web import INTERNAL_MESSAGE, NOT_FOUND_MESSAGE


@pytest.fixture
def seeded(client, sample_quotes):
    """Client with the two sample quotes loaded."""
    import_quotes(get_engine(), sample_quotes)
    return client


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "quote-server"
    assert data["database"]["counts"]["quotes"] == 0
    assert data["database"]["schema_version"] == 1


def test_api_get_quote(seeded):
    response = seeded.get("/api/v1/quote/1")
    assert response.status_code == 200
    assert response.json() == {"id": 1, "quote": "A", "author": "Auth1"}


def test_api_get_missing_quote(seeded):
    response = seeded.get("/api/v1/quote/99")
    assert response.status_code == 404
    assert response.json() == {"detail": "Quote not found"}


def test_api_invalid_id_is_not_found(seeded):
    response = seeded.get("/api/v1/quote/abc")
    assert response.status_code == 404


def test_api_random_quote(seeded):
    response = seeded.get("/api/v1/random-quote")
    assert response.status_code == 200
    assert response.json() in [
        {"id": 1, "quote": "A", "author": "Auth1"},
        {"id": 2, "quote": "B", "author": "Auth2"},
    ]


def test_api_random_quote_empty(client):
    response = client.get("/api/v1/random-quote")
    assert response.status_code == 404


def test_api_store_failure_is_internal(seeded, monkeypatch):
    def broken(engine, quote_id):
        raise StoreIoError("database is locked")

    monkeypatch.setattr(handlers, "get_by_id", broken)

    response = seeded.get("/api/v1/quote/1")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "locked" not in response.text


def test_page_random_quote(seeded):
    response = seeded.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Auth1" in response.text or "Auth2" in response.text


def test_page_quote_by_id(seeded):
    response = seeded.get("/", params={"id": "2"})
    assert response.status_code == 200
    assert "Auth2" in response.text
    assert "Auth1" not in response.text


def test_page_missing_quote(seeded):
    response = seeded.get("/", params={"id": "99"})
    assert response.status_code == 404
    assert NOT_FOUND_MESSAGE in response.text


def test_page_empty_store(client):
    response = client.get("/")
    assert response.status_code == 404
    assert NOT_FOUND_MESSAGE in response.text


def test_page_store_failure_hides_detail(seeded, monkeypatch):
    def broken(engine):
        raise StoreIoError("disk I/O error at /secret/path")

    monkeypatch.setattr(handlers, "get_random", broken)

    response = seeded.get("/")
    assert response.status_code == 500
    assert INTERNAL_MESSAGE in response.text
    assert "/secret/path" not in response.text


def test_page_escapes_quote_text(client):
    from quote_server.schemas import QuoteIn

    import_quotes(get_engine(), [QuoteIn(id=5, quote="<script>x</script>", author="A & B")])

    response = client.get("/?id=5")
    assert response.status_code == 200
    assert "<script>x</script>" not in response.text
    assert "&lt;script&gt;" in response.text
    assert "A &amp; B" in response.text


def test_unknown_route(client):
    response = client.get("/no/such/page")
    assert response.status_code == 404
    assert response.text == "Oops! Page not found."


def test_startup_imports_init_file(app_env, tmp_path):
    from quote_server.main import app

    source = tmp_path / "quotes.json"
    source.write_text(json.dumps([{"id": 3, "quote": "C", "author": "Auth3"}]))
    app_env.setenv("INIT_FROM", str(source))
    reload_settings()

    with TestClient(app) as client:
        response = client.get("/api/v1/quote/3")
        assert response.status_code == 200
        assert response.json()["author"] == "Auth3"


def test_startup_fails_on_unreadable_init_file(app_env, tmp_path):
    from quote_server.main import app

    app_env.setenv("INIT_FROM", str(tmp_path / "missing.json"))
    reload_settings()

    with pytest.raises(SourceReadError):
        with TestClient(app):
            pass


def test_config_loads():
    """Test that configuration loads correctly."""
    settings = get_settings()

    assert settings is not None
    assert hasattr(settings, "DATABASE_URL")
    assert settings.migrations_path.is_dir()


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = reload_settings()

    assert settings.PORT == 8080
    assert settings.LOG_LEVEL == "DEBUG"

    monkeypatch.delenv("PORT")
    monkeypatch.delenv("LOG_LEVEL")
    reload_settings()


def test_not_found_never_escalates(seeded):
    """Lookups of absent ids stay typed outcomes, not crashes."""
    for text in ["0", "-1", "99999", "x"]:
        assert seeded.get(f"/api/v1/quote/{text}").status_code == 404
    with pytest.raises(NotFound):
        handlers.get_by_id(get_engine(), "0")
