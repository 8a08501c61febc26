"""
SQLite database integration and simple migration system.

This module provides connection handling (``get_connection``), the
migration runner applied on application start (``init_db``) and
``UserStore``, the persistence layer for user accounts.  The store is
constructed with a database path and handed to ``UserService``; no
module keeps a global connection.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional


logger = logging.getLogger(__name__)


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    If ``database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the ``account_api`` package.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # account_api/
    return str((base_dir / database_url).resolve())


def get_connection(database_path: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name.
    Timestamps are stored as ISO‑8601 strings and returned unchanged;
    the pydantic schemas parse them.
    """
    conn = sqlite3.connect(database_path)
    # Return rows as dict‑like objects keyed by column name
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(database_path: str) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside a transaction.

    Commits when the block succeeds, rolls back when it raises, and
    always closes the connection.
    """
    conn = get_connection(database_path)
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: List[tuple] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
]


def init_db(database_path: str) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    Path(database_path).parent.mkdir(parents=True, exist_ok=True)
    with transaction(database_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                # executescript commits implicitly, so each migration
                # must be idempotent (CREATE ... IF NOT EXISTS).
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version


class UserStore:
    """Persistence for user accounts in a SQLite database.

    Every method runs in its own short transaction.  Rows returned by
    the ``public`` queries never include ``password_hash``; only
    ``select_credentials`` reads it, for sign‑in.
    """

    PUBLIC_COLUMNS = "id, name, email, role, created_at, updated_at"
    UPDATABLE_COLUMNS = frozenset({"name", "email", "password_hash", "role", "updated_at"})

    def __init__(self, database_path: str) -> None:
        self.database_path = database_path

    def init_schema(self) -> None:
        init_db(self.database_path)

    def insert(self, values: Mapping[str, Any]) -> sqlite3.Row:
        """Insert a row and return its public projection.

        Raises ``sqlite3.IntegrityError`` when the e‑mail is taken.
        """
        with transaction(self.database_path) as cursor:
            cursor.execute(
                "INSERT INTO users (name, email, password_hash, role, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    values["name"],
                    values["email"],
                    values["password_hash"],
                    values["role"],
                    values["created_at"],
                    values["updated_at"],
                ),
            )
            return cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS} FROM users WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()

    def select_all(self) -> List[sqlite3.Row]:
        with transaction(self.database_path) as cursor:
            return cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS} FROM users ORDER BY id"
            ).fetchall()

    def select_by_id(self, user_id: int) -> Optional[sqlite3.Row]:
        with transaction(self.database_path) as cursor:
            return cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()

    def select_credentials(self, email: str) -> Optional[sqlite3.Row]:
        with transaction(self.database_path) as cursor:
            return cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS}, password_hash FROM users WHERE email = ?",
                (email,),
            ).fetchone()

    def update(self, user_id: int, values: Dict[str, Any]) -> Optional[sqlite3.Row]:
        """Apply ``values`` to one row and return the updated projection.

        Returns ``None`` when no row has ``user_id``.  Raises
        ``sqlite3.IntegrityError`` when a new e‑mail is taken.
        """
        unknown = set(values) - self.UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")
        assignments = ", ".join(f"{column} = ?" for column in values)
        with transaction(self.database_path) as cursor:
            cursor.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*values.values(), user_id),
            )
            if cursor.rowcount == 0:
                return None
            return cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()

    def delete(self, user_id: int) -> Optional[sqlite3.Row]:
        """Delete one row and return its projection, or ``None`` if absent."""
        with transaction(self.database_path) as cursor:
            row = cursor.execute(
                f"SELECT {self.PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            if row is None:
                return None
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
            # The SELECT runs before the implicit BEGIN, so a concurrent
            # delete may already have removed the row.
            if cursor.rowcount == 0:
                return None
            return row
