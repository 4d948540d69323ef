"""
Lookup operations shared by the JSON API and the HTML page.

Both return a Quote or raise a QuoteServerError; the adapters translate the
error's kind into their own response format.
"""
import logging
import re

from sqlalchemy.engine import Engine

from quote_server.db.models import Quote
from quote_server.errors import NotFound
from quote_server.services.quotes import fetch_by_id, fetch_random_id

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"[+-]?[0-9]+")
_ID_MIN = -(2 ** 63)
_ID_MAX = 2 ** 63 - 1


def parse_quote_id(text: str) -> int:
    """
    Parse a textual id into a 64-bit signed integer.

    Anything else can never match a row, so it is reported as NotFound.
    """
    if not _ID_RE.fullmatch(text):
        raise NotFound(f"Invalid quote id {text!r}")
    value = int(text)
    if not _ID_MIN <= value <= _ID_MAX:
        raise NotFound(f"Quote id out of range: {text!r}")
    return value


def get_by_id(engine: Engine, quote_id: str) -> Quote:
    return fetch_by_id(engine, parse_quote_id(quote_id))


def get_random(engine: Engine) -> Quote:
    """
    Fetch a random quote in two steps: pick an id, then load it.

    A row removed between the steps surfaces as NotFound; there is no retry.
    """
    quote_id = fetch_random_id(engine)
    logger.debug("Random quote id %s", quote_id)
    return fetch_by_id(engine, quote_id)
