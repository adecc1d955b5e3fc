"""
Database connection management for the SQLite store.

Connections use WAL mode, enforce foreign keys and return rows as dicts.

Usage:
    from mdsync.core.store.connection import get_connection

    with get_connection(Path(".mdsync/store.db")) as conn:
        for row in conn.execute("SELECT id, slug FROM records"):
            print(row["id"], row["slug"])
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .schema import create_schema, needs_migration


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """
    Row factory that returns rows as dictionaries.

    Args:
        cursor: SQLite cursor
        row: Raw row tuple from database

    Returns:
        Dictionary mapping column names to values
    """
    fields = [column[0] for column in cursor.description]
    return dict(zip(fields, row))


def configure_connection(conn: sqlite3.Connection) -> None:
    """
    Configure a SQLite connection: WAL journal, foreign keys, dict rows.

    Args:
        conn: SQLite connection to configure
    """
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = dict_factory


def init_db(db_path: Path | str) -> None:
    """
    Create the database file and schema if needed.

    Args:
        db_path: Path to the SQLite database file
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        configure_connection(conn)
        if needs_migration(conn):
            create_schema(conn)
    finally:
        conn.close()


@contextmanager
def get_connection(db_path: Path | str) -> Iterator[sqlite3.Connection]:
    """
    Get a database connection as a context manager.

    The database is initialized on first use. The connection is closed
    when the context exits; if an exception occurs, the transaction is
    rolled back.

    Args:
        db_path: Path to the SQLite database file

    Yields:
        Configured SQLite connection
    """
    db_path = Path(db_path)
    if not db_path.exists():
        init_db(db_path)

    conn = sqlite3.connect(str(db_path))
    configure_connection(conn)

    try:
        yield conn
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
