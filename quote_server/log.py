"""Logging setup shared by the server and the CLI."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_sql: bool = False) -> None:
    """Configure the root logger once; later calls only adjust levels."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))
    logging.getLogger("quote_server").setLevel(getattr(logging, level, logging.INFO))
    # Statement logging mirrors the engine's echo flag.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if log_sql else logging.WARNING
    )
