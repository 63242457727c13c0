"""Tiny home-grown migrations for databases created by earlier releases."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Simple, idempotent migrations for SQLite.
# We only ADD columns/indexes or rewrite values in place. Nothing is dropped.


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    """Fetch SQLite's description of a table so we know what columns exist."""

    with engine.connect() as conn:
        return conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()


def _column_names(engine: Engine, table: str) -> set[str]:
    return {record["name"] for record in _table_columns(engine, table)}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    """ALTER TABLE ADD COLUMN helper."""
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _normalize_legacy_timestamps(engine: Engine, table: str, columns: Iterable[str]) -> None:
    """Rewrite ``YYYY-MM-DD HH:MM:SS`` values to the ISO form used everywhere else.

    Older databases relied on SQLite's ``CURRENT_TIMESTAMP`` which is UTC but
    has no ``T`` separator or zone suffix; left alone those rows would sort
    before every newer row.
    """

    with engine.begin() as conn:
        for column in columns:
            conn.execute(
                text(
                    f"UPDATE {table} SET {column} = replace({column}, ' ', 'T') || '.000000Z' "
                    f"WHERE {column} IS NOT NULL AND {column} NOT LIKE '%T%'"
                )
            )


def _normalize_serial_numbers(engine: Engine) -> None:
    """Uppercase and trim stored serial numbers so lookups by normalised serial find them.

    A row whose normalised serial is already taken is left untouched and reported.
    """

    with engine.begin() as conn:
        rows = conn.execute(
            text(
                "SELECT id, serial_number FROM radios "
                "WHERE serial_number IS NOT NULL AND serial_number != upper(trim(serial_number))"
            )
        ).all()
        for row in rows:
            target = row.serial_number.strip().upper()
            taken = conn.execute(
                text("SELECT 1 FROM radios WHERE serial_number = :serial"), {"serial": target}
            ).first()
            if taken:
                logger.warning(
                    "Serial number collides after normalisation; left unchanged",
                    extra={"extra_data": {"radio_id": row.id, "serial_number": row.serial_number}},
                )
                continue
            conn.execute(
                text("UPDATE radios SET serial_number = :serial WHERE id = :id"),
                {"serial": target, "id": row.id},
            )


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite schema up-to-date with the expectations of the code."""

    if engine.dialect.name != "sqlite":
        return

    radio_cols = _column_names(engine, "radios")
    if radio_cols:
        # Registries created before radio_id existed.
        if "radio_id" not in radio_cols:
            logger.info("Adding radios.radio_id column")
            _add_column_sqlite(engine, "radios", "radio_id TEXT")
        _normalize_legacy_timestamps(engine, "radios", ("created_at", "updated_at"))
        _normalize_serial_numbers(engine)
        _create_index_if_not_exists(engine, "radios", "ix_radios_created_at", ["created_at"])

    if _column_names(engine, "logs"):
        _normalize_legacy_timestamps(engine, "logs", ("timestamp",))
        _create_index_if_not_exists(engine, "logs", "ix_logs_timestamp", ["timestamp"])
