"""
Server-rendered HTML page.

``GET /`` shows a random quote, ``GET /?id=N`` a specific one. Errors render
a friendly page; internal detail only goes to the log.
"""
import html
import logging
from functools import lru_cache
from string import Template
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse

from quote_server.config import PACKAGE_DIR
from quote_server.db.models import Quote
from quote_server.deps import DBEngine
from quote_server.errors import Outcome, QuoteServerError, outcome_for
from quote_server.services import handlers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["web"])

TEMPLATES_DIR = PACKAGE_DIR / "templates"

NOT_FOUND_MESSAGE = "The quote you were looking for decided to take a day off. Try another!"
INTERNAL_MESSAGE = "We hit a snag trying to fetch a quote. Please try again."


@lru_cache()
def load_template(name: str) -> Template:
    return Template((TEMPLATES_DIR / name).read_text(encoding="utf-8"))


def render_quote(quote: Quote) -> str:
    return load_template("index.html").substitute(
        id=quote.id,
        quote=html.escape(quote.quote),
        author=html.escape(quote.author),
    )


def render_error(error: QuoteServerError) -> HTMLResponse:
    if outcome_for(error.kind) is Outcome.NOT_FOUND:
        status_code, message = 404, NOT_FOUND_MESSAGE
    else:
        status_code, message = 500, INTERNAL_MESSAGE
    page = load_template("error.html").substitute(message=html.escape(message))
    return HTMLResponse(page, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def main_page(engine: DBEngine, quote_id: Optional[str] = Query(None, alias="id")):
    """Render a quote by id, or a random one when no id is given."""
    try:
        if quote_id is not None:
            logger.debug("Web: fetching quote by id %s", quote_id)
            quote = handlers.get_by_id(engine, quote_id)
        else:
            logger.debug("Web: fetching random quote")
            quote = handlers.get_random(engine)
    except QuoteServerError as e:
        logger.warning("Web: failed to get quote for page: %s", e)
        return render_error(e)

    try:
        page = render_quote(quote)
    except (OSError, KeyError, ValueError) as e:
        logger.error("Web: template rendering error: %s", e)
        return HTMLResponse(
            load_template("error.html").substitute(message=INTERNAL_MESSAGE),
            status_code=500,
        )
    return HTMLResponse(page)
