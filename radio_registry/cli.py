#!/usr/bin/env python3
"""
radio-registry command line

Purpose:
  Operational helpers that do not go through the HTTP API.

Commands:
  init-db     Create tables and upgrade an existing registry database.
  seed-demo   Insert the demo fleet (existing serial numbers are skipped).
  serve       Run the API with uvicorn.

Examples:
  radio-registry init-db
  DATABASE_URL=sqlite:///./radio_registry.db radio-registry seed-demo
  radio-registry serve --port 5000 --reload

Exit codes:
  0 = success
  1 = handled application error
"""

from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .core.logging import configure_logging
from .core.settings import get_settings
from .db.migrate import run_migrations
from .db.session import Base, build_engine, build_session_factory
from .models import audit_log as _audit_log  # noqa: F401
from .models.radio import Radio
from .services.demo_data import seed_demo_data

logger = logging.getLogger("radio_registry.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="radio-registry", description="Radio Registry maintenance commands.")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("init-db", help="Create tables and run migrations.")
    sub.add_parser("seed-demo", help="Insert demo radios into the registry.")
    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development only).")
    return p.parse_args(argv)


def _prepare_engine():
    engine = build_engine(get_settings().database_url)
    Base.metadata.create_all(bind=engine)
    run_migrations(engine)
    return engine


def cmd_init_db() -> int:
    engine = _prepare_engine()
    try:
        print(f"Database ready: {engine.url.render_as_string(hide_password=True)}")
    finally:
        engine.dispose()
    return 0


def cmd_seed_demo() -> int:
    engine = _prepare_engine()
    session = build_session_factory(engine)()
    try:
        added = seed_demo_data(session)
        total = session.execute(select(func.count()).select_from(Radio)).scalar_one()
    finally:
        session.close()
        engine.dispose()
    print(f"Added {added} demo radios. Total radios in database: {total}")
    return 0


def cmd_serve(host: str | None, port: int | None, reload: bool) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "radio_registry.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()
    try:
        if args.command == "init-db":
            return cmd_init_db()
        if args.command == "seed-demo":
            return cmd_seed_demo()
        return cmd_serve(args.host, args.port, args.reload)
    except SQLAlchemyError as exc:
        logger.error("Database error: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
