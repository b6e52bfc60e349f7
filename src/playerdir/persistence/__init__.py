"""Backing tables for player records."""

from __future__ import annotations

import copy
import json
import logging
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Protocol

from playerdir.errors import ConditionFailed, StorageError


logger = logging.getLogger("uvicorn.error")


PRIMARY_KEY = "id"
EMAIL_INDEX = "email-index"

# Secondary indexes each table understands: index name -> key attribute.
INDEXES: Mapping[str, str] = {EMAIL_INDEX: "email"}

_ATTRIBUTES = ("email", "name", "nick_name", "age", "matches")


class PlayerTable(Protocol):
    """Storage contract the directory depends on."""

    def put(self, item: Mapping[str, Any], *, unique_email: bool = False) -> None:
        ...

    def update_set(self, key: str, attribute: str, value: Any) -> dict:
        ...

    def scan_all(self) -> List[dict]:
        ...

    def query_index(self, index_name: str, key_name: str, key_value: Any) -> List[dict]:
        ...


def _index_attribute(index_name: str, key_name: str) -> str:
    attribute = INDEXES.get(index_name)
    if attribute is None:
        raise StorageError(f"Unknown index {index_name!r}")
    if attribute != key_name:
        raise StorageError(f"Index {index_name!r} is keyed on {attribute!r}, not {key_name!r}")
    return attribute


def _check_attribute(attribute: str) -> None:
    if attribute not in _ATTRIBUTES:
        raise StorageError(f"Attribute {attribute!r} cannot be updated")


class MemoryPlayerTable:
    """Dict-backed table.

    Has no atomic email guard, so ``unique_email`` is ignored: two writers
    that both passed the directory's read check will both be stored.
    """

    def __init__(self, items: Mapping[str, Mapping[str, Any]] | None = None):
        self._items: Dict[str, dict] = {key: dict(value) for key, value in (items or {}).items()}

    def __len__(self) -> int:
        return len(self._items)

    def put(self, item: Mapping[str, Any], *, unique_email: bool = False) -> None:
        key = item.get(PRIMARY_KEY)
        if not key:
            raise StorageError("Item is missing its primary key")
        self._items[key] = copy.deepcopy(dict(item))

    def update_set(self, key: str, attribute: str, value: Any) -> dict:
        _check_attribute(attribute)
        existing = self._items.get(key)
        if existing is None:
            raise ConditionFailed(f"No item with {PRIMARY_KEY}={key!r}")
        existing[attribute] = copy.deepcopy(value)
        return copy.deepcopy(existing)

    def scan_all(self) -> List[dict]:
        return [copy.deepcopy(item) for item in self._items.values()]

    def query_index(self, index_name: str, key_name: str, key_value: Any) -> List[dict]:
        attribute = _index_attribute(index_name, key_name)
        return [
            copy.deepcopy(item)
            for item in self._items.values()
            if item.get(attribute) == key_value
        ]


class SQLitePlayerTable:
    """SQLite-backed player table.

    The email index is a plain SQL index. Guarded puts check for another row
    with the same email inside the INSERT statement itself, so the check and
    the write happen in one round trip.
    """

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        try:
            self._ensure_schema()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Could not open player table at %s: %s", self.db_path, exc)
            raise StorageError(f"Could not open player table: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        with closing(self._connect()) as conn:
            with conn:
                yield conn

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL,
                name TEXT NOT NULL,
                nick_name TEXT NOT NULL,
                age INTEGER NOT NULL,
                matches_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS players_email_index ON players (email)")
        conn.commit()

    def put(self, item: Mapping[str, Any], *, unique_email: bool = False) -> None:
        key = item.get(PRIMARY_KEY)
        if not key:
            raise StorageError("Item is missing its primary key")
        now = datetime.now(timezone.utc).isoformat()
        values = (
            key,
            item["email"],
            item.get("name") or "",
            item.get("nick_name") or "",
            int(item.get("age") or 0),
            json.dumps(list(item.get("matches") or [])),
            now,
            now,
        )
        upsert = """
            ON CONFLICT(id) DO UPDATE SET
                email = excluded.email,
                name = excluded.name,
                nick_name = excluded.nick_name,
                age = excluded.age,
                matches_json = excluded.matches_json,
                updated_at = excluded.updated_at
        """
        try:
            with self._session() as conn:
                if unique_email:
                    cursor = conn.execute(
                        """
                        INSERT INTO players (
                            id, email, name, nick_name, age, matches_json,
                            created_at, updated_at
                        )
                        SELECT ?, ?, ?, ?, ?, ?, ?, ?
                        WHERE NOT EXISTS (
                            SELECT 1 FROM players WHERE email = ? AND id != ?
                        )
                        """
                        + upsert,
                        values + (item["email"], key),
                    )
                    if cursor.rowcount == 0:
                        raise ConditionFailed(f"Email {item['email']!r} is already stored")
                else:
                    conn.execute(
                        """
                        INSERT INTO players (
                            id, email, name, nick_name, age, matches_json,
                            created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """
                        + upsert,
                        values,
                    )
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def update_set(self, key: str, attribute: str, value: Any) -> dict:
        _check_attribute(attribute)
        if attribute == "matches":
            column, stored = "matches_json", json.dumps(list(value))
        else:
            column, stored = attribute, value
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._session() as conn:
                cursor = conn.execute(
                    f"UPDATE players SET {column} = ?, updated_at = ? WHERE id = ?",
                    (stored, now, key),
                )
                if cursor.rowcount == 0:
                    raise ConditionFailed(f"No item with {PRIMARY_KEY}={key!r}")
                row = conn.execute("SELECT * FROM players WHERE id = ?", (key,)).fetchone()
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return self._row_to_item(row)

    def scan_all(self) -> List[dict]:
        try:
            with self._session() as conn:
                rows = conn.execute("SELECT * FROM players ORDER BY rowid").fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return [self._row_to_item(row) for row in rows]

    def query_index(self, index_name: str, key_name: str, key_value: Any) -> List[dict]:
        attribute = _index_attribute(index_name, key_name)
        try:
            with self._session() as conn:
                rows = conn.execute(
                    f"SELECT * FROM players WHERE {attribute} = ? ORDER BY rowid",
                    (key_value,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return [self._row_to_item(row) for row in rows]

    def _row_to_item(self, row: sqlite3.Row) -> dict:
        return {
            "id": row["id"],
            "email": row["email"],
            "name": row["name"],
            "nick_name": row["nick_name"],
            "age": row["age"],
            "matches": json.loads(row["matches_json"]),
        }


__all__ = [
    "EMAIL_INDEX",
    "INDEXES",
    "PRIMARY_KEY",
    "MemoryPlayerTable",
    "PlayerTable",
    "SQLitePlayerTable",
]
