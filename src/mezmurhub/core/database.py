"""
Database connections and schema for the MezmurHub catalog
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, ContextManager, Iterator, Optional, Union

from loguru import logger

from .db_adapter import ConnectionProtocol, get_postgres_connection, is_postgres


# Database schema version for migrations
SCHEMA_VERSION = 3

ConnectionFactory = Callable[[], ContextManager[ConnectionProtocol]]


@contextmanager
def get_db_connection(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Get a SQLite connection with proper cleanup and concurrency support."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    # WAL mode allows reads during writes
    conn.execute("PRAGMA journal_mode=WAL")

    try:
        yield conn
    finally:
        conn.close()


def make_connection_factory(
    db_path: Optional[Path] = None, database_url: Optional[str] = None
) -> ConnectionFactory:
    """Return a zero-argument callable opening a connection to the configured backend.

    A PostgreSQL ``database_url`` wins over ``db_path``.
    """
    if is_postgres(database_url):
        return lambda: get_postgres_connection(database_url)
    if db_path is None:
        raise ValueError("db_path is required when not using PostgreSQL")
    return lambda: get_db_connection(db_path)


def _get_schema_version(conn: Union[sqlite3.Connection, ConnectionProtocol]) -> int:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER NOT NULL
        )
    """
    )
    row = conn.execute("SELECT MAX(version) AS version FROM schema_version").fetchone()
    if row is None or row["version"] is None:
        return 0
    return int(row["version"])


def migrate_database(
    conn: Union[sqlite3.Connection, ConnectionProtocol], current_version: int
) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        # v1: catalog documents (songs, categories) as JSON payloads
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                seq INTEGER NOT NULL,
                data TEXT NOT NULL,
                PRIMARY KEY (collection, id)
            )
        """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_seq ON documents (collection, seq)"
        )

    if current_version < 2:
        # v2: admin accounts
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                uid TEXT PRIMARY KEY,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                is_admin INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """
        )

    if current_version < 3:
        # v3: natural order must be unambiguous across writers
        conn.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_seq_unique ON documents (seq)"
        )


def init_database(connect: ConnectionFactory) -> None:
    """Create or upgrade the schema behind a connection factory."""
    with connect() as conn:
        current_version = _get_schema_version(conn)
        if current_version >= SCHEMA_VERSION:
            return

        logger.info(
            f"Migrating database schema from v{current_version} to v{SCHEMA_VERSION}"
        )
        try:
            migrate_database(conn, current_version)
            conn.execute("DELETE FROM schema_version")
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
