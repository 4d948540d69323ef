"""
Services module - quote store operations, import and lookups.
"""

from quote_server.services import quotes, ingest, handlers

__all__ = ["quotes", "ingest", "handlers"]
