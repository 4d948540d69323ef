"""
JSON API endpoints under ``/api/v1``.
"""
import logging

from fastapi import APIRouter, HTTPException

from quote_server.deps import DBEngine
from quote_server.errors import Outcome, QuoteServerError, outcome_for
from quote_server.schemas import ErrorResponse, QuoteOut
from quote_server.services import handlers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["quotes"])

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "No matching quote found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def to_http_error(error: QuoteServerError) -> HTTPException:
    """Map an error kind to a status code without leaking its detail."""
    if outcome_for(error.kind) is Outcome.NOT_FOUND:
        return HTTPException(status_code=404, detail="Quote not found")
    return HTTPException(status_code=500, detail="Internal server error")


@router.get("/quote/{quote_id}", response_model=QuoteOut, responses=_ERROR_RESPONSES)
def get_quote(quote_id: str, engine: DBEngine):
    """Get a quote by id."""
    try:
        quote = handlers.get_by_id(engine, quote_id)
    except QuoteServerError as e:
        logger.warning("API: quote fetch failed for id %s: %s", quote_id, e)
        raise to_http_error(e) from e
    return QuoteOut.model_validate(quote)


@router.get("/random-quote", response_model=QuoteOut, responses=_ERROR_RESPONSES)
def get_random_quote(engine: DBEngine):
    """Get a random quote. 404 when the database holds no quotes."""
    try:
        quote = handlers.get_random(engine)
    except QuoteServerError as e:
        logger.warning("API: failed to get random quote: %s", e)
        raise to_http_error(e) from e
    return QuoteOut.model_validate(quote)
