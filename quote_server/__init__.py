"""Quote server: quotations by id over a JSON API and an HTML page."""

__version__ = "0.1.0"
