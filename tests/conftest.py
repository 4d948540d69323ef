import pytest
from fastapi.testclient import TestClient

from quote_server.config import reload_settings
from quote_server.db.sqlite import init_store
from quote_server.deps import close_engine
from quote_server.schemas import QuoteIn


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'data' / 'quotes.db'}"


@pytest.fixture
def engine(db_url):
    engine = init_store(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def sample_quotes():
    return [
        QuoteIn(id=1, quote="A", author="Auth1"),
        QuoteIn(id=2, quote="B", author="Auth2"),
    ]


@pytest.fixture
def app_env(db_url, monkeypatch):
    """Point the application settings at a fresh database."""
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.delenv("INIT_FROM", raising=False)
    close_engine()
    reload_settings()
    yield monkeypatch
    close_engine()
    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def client(app_env):
    from quote_server.main import app

    with TestClient(app) as test_client:
        yield test_client
