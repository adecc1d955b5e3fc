"""
SQLite implementation of the Store protocol.

Commits are synchronous: ``commit`` returns the record identifier
directly. Identifiers of ordinary records are their integer row ids as
strings; option-kind documents use ``@option:<keypath>`` identifiers and
keep their fingerprints in the ``mdsync_option_cache`` option.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from mdsync.core.errors import StoreError
from mdsync.core.sync.tasks import Pending

from .connection import get_connection
from .options import patch, pluck
from .schema import OPTION_CACHE

logger = logging.getLogger(__name__)

# Fields stored in their own columns; everything else goes in the JSON blob
COLUMNS = ("guid", "type", "slug", "title", "status", "parent", "fingerprint")


def _to_json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _row_id(identifier: str) -> int | None:
    try:
        return int(identifier)
    except (TypeError, ValueError):
        return None


class SqliteStore:
    """
    Record store backed by a single SQLite file.

    Example:
        >>> store = SqliteStore(Path(".mdsync/store.db"))
        >>> record_id = store.commit("post", None, {"guid": "urn:uuid:1", "title": "Hi"})
        >>> store.lookup_by_guid("urn:uuid:1") == record_id
        True
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.commits = 0

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with get_connection(self.db_path) as conn:
                yield conn
        except sqlite3.Error as e:
            raise StoreError(f"database error: {e}") from e

    # -- records ------------------------------------------------------------

    def lookup_by_guid(self, guid: str, kind: str = "post") -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id FROM records WHERE guid = ? AND kind = ?", (guid, kind)
            ).fetchone()
        return str(row["id"]) if row else None

    def fetch(self, identifier: str) -> dict[str, Any] | None:
        row_id = _row_id(identifier)
        if row_id is None:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM records WHERE id = ?", (row_id,)).fetchone()
        if row is None:
            return None

        record = {**json.loads(row["fields"]), **{c: row[c] for c in COLUMNS}}
        record["id"] = str(row["id"])
        record["kind"] = row["kind"]
        record["parent"] = str(row["parent"]) if row["parent"] is not None else None
        record["meta"] = json.loads(row["meta"])
        record["created_at"] = row["created_at"]
        record["updated_at"] = row["updated_at"]
        return record

    def query_cached_fingerprints(self, kind: str) -> dict[str, str]:
        if kind == "option":
            cache = self.get_option([OPTION_CACHE]) or {}
            return {fingerprint: identifier for identifier, fingerprint in cache.items()}

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, fingerprint FROM records WHERE kind = ? AND fingerprint IS NOT NULL",
                (kind,),
            ).fetchall()
        return {row["fingerprint"]: str(row["id"]) for row in rows}

    def commit(self, kind: str, identifier: str | None, fields: Mapping[str, Any]) -> str:
        """
        Create or update a record.

        Raises:
            StoreError: If a field is still pending, the record to update
                does not exist, or the database rejects the write
        """
        values = self._resolve(fields)
        if kind == "option":
            return self._commit_option(identifier, values)

        with self._connect() as conn:
            if identifier is None:
                identifier = self._insert(conn, kind, values)
                logger.info(f"Created {kind} record {identifier} ({values.get('guid')})")
            else:
                self._update(conn, identifier, values)
                logger.info(f"Updated {kind} record {identifier}")
            conn.commit()

        self.commits += 1
        return identifier

    @staticmethod
    def _resolve(fields: Mapping[str, Any]) -> dict[str, Any]:
        values = {}
        for name, value in fields.items():
            if isinstance(value, Pending):
                if not value.done:
                    raise StoreError(f"field '{name}' is still pending")
                value = value.result()
            values[name] = value
        return values

    @staticmethod
    def _parent(value: Any) -> int | None:
        if value in (None, ""):
            return None
        row_id = _row_id(value)
        if row_id is None:
            raise StoreError(f"invalid parent identifier {value!r}")
        return row_id

    def _insert(self, conn: sqlite3.Connection, kind: str, values: dict[str, Any]) -> str:
        extra = {k: v for k, v in values.items() if k not in COLUMNS and k != "meta"}
        meta = {k: v for k, v in (values.get("meta") or {}).items() if v is not None}
        cursor = conn.execute(
            """
            INSERT INTO records (kind, guid, type, slug, title, status, parent,
                                 fields, meta, fingerprint)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                kind,
                values.get("guid"),
                values.get("type") or "post",
                values.get("slug"),
                values.get("title"),
                values.get("status"),
                self._parent(values.get("parent")),
                _to_json(extra),
                _to_json(meta),
                values.get("fingerprint"),
            ),
        )
        return str(cursor.lastrowid)

    def _update(self, conn: sqlite3.Connection, identifier: str, values: dict[str, Any]) -> None:
        row_id = _row_id(identifier)
        row = None
        if row_id is not None:
            row = conn.execute(
                "SELECT fields, meta FROM records WHERE id = ?", (row_id,)
            ).fetchone()
        if row is None:
            raise StoreError(f"record {identifier} does not exist")

        stored = json.loads(row["fields"])
        stored.update({k: v for k, v in values.items() if k not in COLUMNS and k != "meta"})

        meta = json.loads(row["meta"])
        for key, value in (values.get("meta") or {}).items():
            if value is None:
                meta.pop(key, None)
            else:
                meta[key] = value

        assignments = {c: values[c] for c in COLUMNS if c in values}
        if "parent" in assignments:
            assignments["parent"] = self._parent(assignments["parent"])
        assignments["fields"] = _to_json(stored)
        assignments["meta"] = _to_json(meta)

        sql = ", ".join(f"{column} = ?" for column in assignments)
        conn.execute(
            f"UPDATE records SET {sql}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (*assignments.values(), row_id),
        )

    def _commit_option(self, identifier: str | None, values: dict[str, Any]) -> str:
        keypath = values.get("keypath")
        if not keypath:
            raise StoreError("option commit needs a key path")
        identifier = identifier or "@option:" + "/".join(keypath)

        self.patch_option(keypath, values.get("value"))
        if fingerprint := values.get("fingerprint"):
            cache = self.get_option([OPTION_CACHE]) or {}
            cache[identifier] = fingerprint
            self.patch_option([OPTION_CACHE], cache)

        self.commits += 1
        logger.info(f"Updated option {'/'.join(keypath)}")
        return identifier

    # -- options ------------------------------------------------------------

    def get_option(self, keypath: Sequence[str]) -> Any:
        if not keypath:
            raise StoreError("empty option key path")
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM options WHERE name = ?", (keypath[0],)).fetchone()
        if row is None or row["value"] is None:
            return None
        return pluck(json.loads(row["value"]), keypath[1:])

    def patch_option(self, keypath: Sequence[str], value: Any) -> None:
        if not keypath:
            raise StoreError("empty option key path")
        name = keypath[0]
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM options WHERE name = ?", (name,)).fetchone()
            current = json.loads(row["value"]) if row and row["value"] is not None else None
            updated = patch(current, keypath[1:], value)
            if updated is None:
                conn.execute("DELETE FROM options WHERE name = ?", (name,))
            else:
                conn.execute(
                    """
                    INSERT INTO options (name, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(name) DO UPDATE SET
                        value = excluded.value, updated_at = CURRENT_TIMESTAMP
                    """,
                    (name, _to_json(updated)),
                )
            conn.commit()
