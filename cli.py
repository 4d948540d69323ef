#!/usr/bin/env python3
"""
Quote Server CLI - Command-line interface for common operations.

Usage:
    python cli.py serve [--init-from FILE]   # Migrate, import, start server
    python cli.py init-db                    # Create and migrate database
    python cli.py import FILE                # Import quotes from a JSON file
    python cli.py health                     # Check database health
    python cli.py stats                      # Show database stats
"""
import argparse
import os
import sys
from pathlib import Path
from typing import Any, Optional

from quote_server.config import get_settings, reload_settings
from quote_server.db.sqlite import check_db_health, init_store
from quote_server.errors import QuoteServerError
from quote_server.log import configure_logging
from quote_server.services.ingest import import_from_file


def print_header(text: str):
    """Print formatted header."""
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print(f"{'=' * 60}\n")


def print_status(key: str, value: Any, indent: int = 0):
    """Print formatted status line."""
    spaces = "  " * indent
    print(f"{spaces}{key:30s}: {value}")


def fail(error: Exception) -> int:
    print(f"quote_server: error: {error}", file=sys.stderr)
    return 1


def apply_overrides(db_uri: Optional[str] = None, **env: Any) -> None:
    """Push CLI options into the environment so Settings picks them up."""
    if db_uri:
        os.environ["DATABASE_URL"] = db_uri
    for key, value in env.items():
        if value is not None:
            os.environ[key] = str(value)
    reload_settings()


def cmd_serve(args: argparse.Namespace) -> int:
    """Initialize the store, run the optional import, then serve."""
    import uvicorn

    apply_overrides(args.db_uri, PORT=args.port, HOST=args.host)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_SQL)

    from quote_server.deps import set_engine
    from quote_server.main import app

    try:
        engine = init_store(settings.DATABASE_URL, settings.migrations_path)
        init_from = args.init_from or settings.INIT_FROM
        if init_from:
            report = import_from_file(engine, init_from)
            print_status("Imported", report.inserted)
            print_status("Skipped (already present)", report.skipped)
            print_status("Failed", report.failed)
    except QuoteServerError as e:
        return fail(e)

    set_engine(engine)
    print(f"Quote server listening on http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create and migrate the database."""
    print_header("Database Initialization")
    apply_overrides(args.db_uri)
    settings = get_settings()

    try:
        engine = init_store(settings.DATABASE_URL, settings.migrations_path)
    except QuoteServerError as e:
        return fail(e)

    health = check_db_health(engine)
    engine.dispose()
    print_status("Database", settings.DATABASE_URL)
    print_status("Schema version", health.get("schema_version"))
    print("✓ Database initialized successfully")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Import quotes from a JSON file."""
    print_header("Importing Quotes")
    apply_overrides(args.db_uri)
    settings = get_settings()

    try:
        engine = init_store(settings.DATABASE_URL, settings.migrations_path)
        try:
            report = import_from_file(engine, args.path)
        finally:
            engine.dispose()
    except QuoteServerError as e:
        return fail(e)

    print_status("Source", args.path)
    print_status("Records", report.total)
    print_status("New Quotes", report.inserted)
    print_status("Skipped (already present)", report.skipped)
    print_status("Failed", report.failed)
    for failure in report.failures:
        print_status(f"Quote {failure.id}", failure.reason, 1)
    print()
    return 0


def cmd_health(args: argparse.Namespace) -> int:
    """Check database health."""
    print_header("System Health Check")
    apply_overrides(args.db_uri)
    settings = get_settings()

    print("Configuration:")
    print_status("Database URL", settings.DATABASE_URL, 1)
    print_status("Migrations", settings.migrations_path, 1)

    print("\nDatabase:")
    try:
        engine = init_store(settings.DATABASE_URL, settings.migrations_path)
    except QuoteServerError as e:
        print_status("Status", f"✗ Unhealthy: {e}", 1)
        return 1

    health = check_db_health(engine)
    engine.dispose()
    if health.get("status") == "healthy":
        print_status("Status", "✓ Healthy", 1)
        print_status("Schema version", health.get("schema_version"), 1)
        print_status("Quotes", health["counts"]["quotes"], 1)
    else:
        print_status("Status", f"✗ Unhealthy: {health.get('error')}", 1)
        return 1
    print()
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Show database statistics."""
    print_header("Database Statistics")
    apply_overrides(args.db_uri)
    settings = get_settings()

    try:
        engine = init_store(settings.DATABASE_URL, settings.migrations_path)
    except QuoteServerError as e:
        return fail(e)

    health = check_db_health(engine)
    engine.dispose()
    if health.get("status") != "healthy":
        print(f"✗ Database error: {health.get('error')}")
        return 1

    print_status("Total Quotes", health["counts"]["quotes"])
    print_status("Schema version", health.get("schema_version"))
    print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quote-server", description="Quote Server CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_db_uri(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--db-uri", help="Database URI (default: $DATABASE_URL)")

    serve = subparsers.add_parser("serve", help="Start the server")
    add_db_uri(serve)
    serve.add_argument("-i", "--init-from", type=Path, help="JSON file to import before serving")
    serve.add_argument("-p", "--port", type=int, help="Port (default: $PORT or 3000)")
    serve.add_argument("--host", help="Bind address (default: $HOST or 127.0.0.1)")
    serve.set_defaults(func=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create and migrate the database")
    add_db_uri(init_db)
    init_db.set_defaults(func=cmd_init_db)

    import_ = subparsers.add_parser("import", help="Import quotes from a JSON file")
    add_db_uri(import_)
    import_.add_argument("path", type=Path, help="JSON array of {id, quote, author}")
    import_.set_defaults(func=cmd_import)

    health = subparsers.add_parser("health", help="Check database health")
    add_db_uri(health)
    health.set_defaults(func=cmd_health)

    stats = subparsers.add_parser("stats", help="Show database statistics")
    add_db_uri(stats)
    stats.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().LOG_LEVEL)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
