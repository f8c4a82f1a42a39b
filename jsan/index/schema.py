"""
Database schema for the jsan index.

This module defines the SQLite schema and its version tracking.
The index is a local mirror of the JSAN catalogue: it can always be
rebuilt by importing the index dump again.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
CURRENT_VERSION = 1

SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

CREATE TABLE IF NOT EXISTS authors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    login TEXT UNIQUE NOT NULL,  -- Always stored lowercase
    name TEXT,
    email TEXT,
    url TEXT
);

CREATE TABLE IF NOT EXISTS distributions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS releases (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    distribution_id INTEGER NOT NULL,
    author_id INTEGER NOT NULL,
    version TEXT,
    created INTEGER,             -- Epoch seconds
    source TEXT,                 -- Archive path on the mirror
    latest BOOLEAN DEFAULT 0,
    FOREIGN KEY (distribution_id) REFERENCES distributions(id) ON DELETE CASCADE,
    FOREIGN KEY (author_id) REFERENCES authors(id)
);

CREATE TABLE IF NOT EXISTS libraries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    release_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    version TEXT,
    FOREIGN KEY (release_id) REFERENCES releases(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_releases_distribution ON releases(distribution_id);
CREATE INDEX IF NOT EXISTS idx_releases_author ON releases(author_id);
CREATE INDEX IF NOT EXISTS idx_libraries_release ON libraries(release_id);
CREATE INDEX IF NOT EXISTS idx_libraries_name ON libraries(name);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute(
            "SELECT MAX(version) FROM _schema_info"
        )
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def apply_schema(conn: sqlite3.Connection, version: int = CURRENT_VERSION) -> None:
    """
    Apply schema to database.

    The index is a mirror of remote data, so an outdated schema is
    dropped and recreated rather than migrated in place.
    """
    current = get_schema_version(conn)

    if current != 0 and current < version:
        logger.info(f"Index schema {current} -> {version}, rebuilding index")
        conn.executescript("""
            DROP TABLE IF EXISTS libraries;
            DROP TABLE IF EXISTS releases;
            DROP TABLE IF EXISTS distributions;
            DROP TABLE IF EXISTS authors;
            DROP TABLE IF EXISTS _schema_info;
        """)

    conn.executescript(SCHEMA)
    conn.execute(
        "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
        (version, "Initial schema")
    )

    conn.commit()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure database has current schema, rebuilding it if outdated."""
    current = get_schema_version(conn)

    if current < CURRENT_VERSION:
        apply_schema(conn, CURRENT_VERSION)
