"""
SQLite schema for the default record store.

Schema Design:
- records: one row per synced document (posts, pages...), keyed by an
  integer id and unique GUID; type-specific fields live in a JSON blob
- options: named JSON values, addressed by key paths
- schema_info: version tracking for migrations
"""

import sqlite3

# Schema version for migrations
SCHEMA_VERSION = 1

# Option holding {identifier: fingerprint} for option-kind documents
OPTION_CACHE = "mdsync_option_cache"

SCHEMA_DDL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

-- Synced records
CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    kind TEXT NOT NULL DEFAULT 'post',
    guid TEXT UNIQUE,
    type TEXT NOT NULL DEFAULT 'post',
    slug TEXT,
    title TEXT,
    status TEXT,
    parent INTEGER REFERENCES records(id) ON DELETE SET NULL,

    -- JSON blobs for everything else
    fields JSON NOT NULL DEFAULT '{}',
    meta JSON NOT NULL DEFAULT '{}',

    -- Content fingerprint of the document last synced into this record
    fingerprint TEXT,

    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Named option values
CREATE TABLE IF NOT EXISTS options (
    name TEXT PRIMARY KEY,
    value JSON,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_records_kind ON records(kind);
CREATE INDEX IF NOT EXISTS idx_records_fingerprint ON records(fingerprint);
CREATE INDEX IF NOT EXISTS idx_records_parent ON records(parent);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """
    Create the database schema.

    Idempotent - safe to call multiple times.

    Args:
        conn: SQLite database connection
    """
    conn.executescript(SCHEMA_DDL)
    conn.execute(
        "INSERT OR REPLACE INTO schema_info (version, description) VALUES (?, ?)",
        (SCHEMA_VERSION, "Records and options"),
    )
    conn.commit()


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """
    Get the current schema version from the database.

    Returns:
        Current schema version, or None if schema_info table doesn't exist
    """
    try:
        row = conn.execute("SELECT MAX(version) AS version FROM schema_info").fetchone()
    except sqlite3.OperationalError:
        return None
    if row is None:
        return None
    version = row["version"] if isinstance(row, dict) else row[0]
    return version


def needs_migration(conn: sqlite3.Connection) -> bool:
    """Check if the database needs (re)creating to the current schema version."""
    current_version = get_schema_version(conn)
    return current_version is None or current_version < SCHEMA_VERSION
