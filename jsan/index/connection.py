"""
Database connection management for the jsan index.

Provides the connection factory, a context manager and transaction
helper over the SQLite index file.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator

from .schema import ensure_schema


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Get the index database file path.

    Checks in order:
    1. JSAN_DB environment variable
    2. config['index']['path'] if provided
    3. Default: ~/.jsan/index.db

    Args:
        config: Optional configuration dictionary

    Returns:
        Path to database file
    """
    if 'JSAN_DB' in os.environ:
        return Path(os.environ['JSAN_DB'])

    if config and 'index' in config and 'path' in config['index']:
        return Path(config['index']['path']).expanduser()

    return Path.home() / '.jsan' / 'index.db'


def get_connection(
    db_path: Optional[Path] = None,
    config: Optional[dict] = None,
) -> sqlite3.Connection:
    """
    Get a database connection.

    Creates the database and applies schema if it doesn't exist. An
    existing file that is not writable is opened read-only, without
    touching its journal mode or schema.

    Args:
        db_path: Optional explicit path to database
        config: Optional configuration dictionary

    Returns:
        SQLite connection
    """
    if db_path is None:
        db_path = get_db_path(config)

    if db_path.exists() and not os.access(db_path, os.W_OK):
        conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        return conn

    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))

    conn.row_factory = sqlite3.Row  # Enable dict-like access
    conn.execute("PRAGMA foreign_keys = ON")

    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    ensure_schema(conn)

    return conn


class Database:
    """
    Database context manager for the jsan index.

    Usage:
        with Database() as db:
            db.execute("SELECT * FROM authors")
            for row in db.fetchall():
                print(row['login'])
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        config: Optional[dict] = None,
    ):
        self.db_path = db_path
        self.config = config
        self._conn: Optional[sqlite3.Connection] = None
        self._cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> 'Database':
        self._conn = get_connection(
            db_path=self.db_path,
            config=self.config,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._cursor:
            self._cursor.close()
        if self._conn:
            if exc_type is None:
                self._conn.commit()
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the underlying connection."""
        if self._conn is None:
            raise RuntimeError("Database not connected. Use 'with Database() as db:'")
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL statement."""
        self._cursor = self.conn.execute(sql, params)
        return self._cursor

    def fetchone(self) -> Optional[sqlite3.Row]:
        """Fetch one row from last query."""
        if self._cursor is None:
            return None
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        """Fetch all rows from last query."""
        if self._cursor is None:
            return []
        return self._cursor.fetchall()

    def commit(self) -> None:
        """Commit current transaction."""
        self.conn.commit()

    def rollback(self) -> None:
        """Rollback current transaction."""
        self.conn.rollback()

    @property
    def lastrowid(self) -> Optional[int]:
        """Get last inserted row ID."""
        if self._cursor is None:
            return None
        return self._cursor.lastrowid


@contextmanager
def transaction(db: Database) -> Generator[None, None, None]:
    """
    Context manager for explicit transactions.

    Usage:
        with Database() as db:
            with transaction(db):
                db.execute("INSERT ...")
                db.execute("UPDATE ...")
                # Commits on success, rolls back on exception
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_database_info(config: Optional[dict] = None, db_path: Optional[Path] = None) -> dict:
    """
    Get information about the index database.

    Returns:
        Dictionary with database stats
    """
    if db_path is None:
        db_path = get_db_path(config)

    if not db_path.exists():
        return {
            'exists': False,
            'path': str(db_path),
        }

    with Database(db_path=db_path) as db:
        counts = {}
        for table in ('authors', 'distributions', 'releases', 'libraries'):
            db.execute(f"SELECT COUNT(*) FROM {table}")
            row = db.fetchone()
            counts[table] = row[0] if row else 0

        db.execute("SELECT MAX(version) FROM _schema_info")
        row = db.fetchone()
        schema_version = row[0] if row else 0

    file_size = db_path.stat().st_size

    return {
        'exists': True,
        'path': str(db_path),
        'size_bytes': file_size,
        'size_human': _human_size(file_size),
        'schema_version': schema_version,
        **counts,
    }


def _human_size(size_bytes: int) -> str:
    """Convert bytes to human-readable size."""
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
