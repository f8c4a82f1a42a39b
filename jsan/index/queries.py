"""
Index record operations for jsan.

Lookups by key and by relation over the index tables, mapping
database rows to domain records. Insert helpers are used by the
index loader.
"""

from typing import Any, Dict, List, Optional

from ..domain import Author, Distribution, Release, Library
from .connection import Database


def row_to_author(row) -> Author:
    return Author(
        id=row['id'],
        login=row['login'],
        name=row['name'],
        email=row['email'],
        url=row['url'],
    )


def row_to_distribution(row) -> Distribution:
    return Distribution(id=row['id'], name=row['name'])


def row_to_release(row) -> Release:
    return Release(
        id=row['id'],
        distribution_id=row['distribution_id'],
        author_id=row['author_id'],
        version=row['version'],
        created=row['created'],
        source=row['source'],
    )


def row_to_library(row) -> Library:
    return Library(
        id=row['id'],
        release_id=row['release_id'],
        name=row['name'],
        version=row['version'],
    )


# Lookups

def get_author_by_login(db: Database, login: str) -> Optional[Author]:
    """Get an author by login. Logins are stored lowercase."""
    db.execute("SELECT * FROM authors WHERE login = ?", (login,))
    row = db.fetchone()
    return row_to_author(row) if row else None


def get_author_by_id(db: Database, author_id: int) -> Optional[Author]:
    db.execute("SELECT * FROM authors WHERE id = ?", (author_id,))
    row = db.fetchone()
    return row_to_author(row) if row else None


def get_distribution_by_name(db: Database, name: str) -> Optional[Distribution]:
    db.execute("SELECT * FROM distributions WHERE name = ?", (name,))
    row = db.fetchone()
    return row_to_distribution(row) if row else None


def get_distribution_by_id(db: Database, distribution_id: int) -> Optional[Distribution]:
    db.execute("SELECT * FROM distributions WHERE id = ?", (distribution_id,))
    row = db.fetchone()
    return row_to_distribution(row) if row else None


def get_release_by_id(db: Database, release_id: int) -> Optional[Release]:
    db.execute("SELECT * FROM releases WHERE id = ?", (release_id,))
    row = db.fetchone()
    return row_to_release(row) if row else None


def get_latest_release(db: Database, distribution_id: int) -> Optional[Release]:
    """
    Get the latest release of a distribution.

    Prefers the release flagged ``latest``; falls back to the most
    recently created one for indexes that don't carry the flag.
    """
    db.execute("""
        SELECT * FROM releases
        WHERE distribution_id = ?
        ORDER BY latest DESC, created DESC, id DESC
        LIMIT 1
    """, (distribution_id,))
    row = db.fetchone()
    return row_to_release(row) if row else None


def get_library_by_name(db: Database, name: str) -> Optional[Library]:
    """
    Get a library by name.

    The same library name can appear in several releases; the copy
    from the latest release wins.
    """
    db.execute("""
        SELECT l.*
        FROM libraries l
        JOIN releases r ON r.id = l.release_id
        WHERE l.name = ?
        ORDER BY r.latest DESC, r.created DESC, l.id DESC
        LIMIT 1
    """, (name,))
    row = db.fetchone()
    return row_to_library(row) if row else None


def get_libraries_by_release(db: Database, release_id: int) -> List[Library]:
    """Get all libraries shipped in a release, in storage order."""
    db.execute("SELECT * FROM libraries WHERE release_id = ?", (release_id,))
    return [row_to_library(row) for row in db.fetchall()]


def search_records(db: Database, substring: str) -> Dict[str, list]:
    """
    Case-insensitive substring search across the index.

    Matches author logins and names, distribution names and the
    names of libraries in latest releases.

    Returns:
        Dict with 'authors', 'distributions' and 'libraries' lists
    """
    pattern = f"%{_escape_like(substring.lower())}%"

    db.execute("""
        SELECT * FROM authors
        WHERE lower(login) LIKE ? ESCAPE '\\' OR lower(name) LIKE ? ESCAPE '\\'
        ORDER BY login
    """, (pattern, pattern))
    authors = [row_to_author(row) for row in db.fetchall()]

    db.execute("""
        SELECT * FROM distributions
        WHERE lower(name) LIKE ? ESCAPE '\\'
        ORDER BY name
    """, (pattern,))
    distributions = [row_to_distribution(row) for row in db.fetchall()]

    db.execute("""
        SELECT l.*
        FROM libraries l
        JOIN releases r ON r.id = l.release_id
        WHERE r.latest = 1 AND lower(l.name) LIKE ? ESCAPE '\\'
        ORDER BY l.name
    """, (pattern,))
    libraries = [row_to_library(row) for row in db.fetchall()]

    return {
        'authors': authors,
        'distributions': distributions,
        'libraries': libraries,
    }


def _escape_like(text: str) -> str:
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


# Inserts (used by the loader)

def insert_author(db: Database, record: Dict[str, Any]) -> int:
    db.execute(
        "INSERT INTO authors (login, name, email, url) VALUES (?, ?, ?, ?)",
        (
            str(record['login']).lower(),
            record.get('name'),
            record.get('email'),
            record.get('url'),
        )
    )
    return db.lastrowid or 0


def insert_distribution(db: Database, name: str) -> int:
    db.execute("INSERT INTO distributions (name) VALUES (?)", (name,))
    return db.lastrowid or 0


def insert_release(
    db: Database,
    distribution_id: int,
    author_id: int,
    record: Dict[str, Any],
) -> int:
    db.execute(
        """INSERT INTO releases (distribution_id, author_id, version, created, source, latest)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (
            distribution_id,
            author_id,
            record.get('version'),
            record.get('created'),
            record.get('source'),
            bool(record.get('latest', False)),
        )
    )
    return db.lastrowid or 0


def insert_library(db: Database, release_id: int, record: Dict[str, Any]) -> int:
    db.execute(
        "INSERT INTO libraries (release_id, name, version) VALUES (?, ?, ?)",
        (release_id, record['name'], record.get('version'))
    )
    return db.lastrowid or 0
