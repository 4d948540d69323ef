"""
FastAPI application: JSON API, HTML page and health check.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from quote_server import __version__
from quote_server.api import router as api_router
from quote_server.config import get_settings
from quote_server.db.sqlite import check_db_health, init_store
from quote_server.deps import DBEngine, close_engine, engine_ready, set_engine
from quote_server.log import configure_logging
from quote_server.schemas import HealthStatus
from quote_server.services.ingest import import_from_file
from quote_server.web import router as web_router

logger = logging.getLogger(__name__)


def startup() -> None:
    """
    Open and migrate the store, then run the optional import.

    Both steps finish before the first request is served. A StoreInitError
    or SourceReadError propagates and stops the process.
    """
    settings = get_settings()
    if engine_ready():
        return

    engine = init_store(settings.DATABASE_URL, settings.migrations_path)
    set_engine(engine)

    if settings.INIT_FROM is not None:
        try:
            report = import_from_file(engine, settings.INIT_FROM)
        except Exception:
            close_engine()
            raise
        logger.info("Database initialized from %s: %s", settings.INIT_FROM, report.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_SQL)

    startup()
    logger.info("Quote server ready")

    yield

    close_engine()
    logger.info("Quote server stopped")


app = FastAPI(
    title="Quote Server",
    version=__version__,
    description="Quotes by id or at random, as JSON or as a web page",
    lifespan=lifespan,
)


# === Middleware ===

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# === Health Check ===

@app.get("/health", response_model=HealthStatus, tags=["health"])
def health_check(engine: DBEngine):
    """Database connectivity and quote count."""
    db_health = check_db_health(engine)
    return HealthStatus(
        status="ok" if db_health.get("status") == "healthy" else "unhealthy",
        service="quote-server",
        timestamp=datetime.now(timezone.utc),
        database=db_health,
    )


# === Routes ===

app.include_router(api_router)
app.include_router(web_router)


@app.api_route(
    "/{full_path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def handler_404(full_path: str):
    return PlainTextResponse("Oops! Page not found.", status_code=404)
