"""
Index backend for the jsan shell.

``IndexBackend`` is the query surface the shell commands depend on.
``SQLiteIndex`` implements it over the local index database; any
``sqlite3.Error`` raised by a query surfaces as ``BackendError``.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Generator, List, Optional, Protocol

from ..domain import Author, Distribution, Release, Library
from ..exit_codes import BackendError, FatalError, CONFIG_ERROR
from . import queries
from .connection import Database, get_db_path

logger = logging.getLogger(__name__)


class IndexBackend(Protocol):
    """Lookup-by-key and search-by-relation over the package index."""

    def get_author_by_login(self, login: str) -> Optional[Author]: ...

    def get_distribution_by_name(self, name: str) -> Optional[Distribution]: ...

    def get_library_by_name(self, name: str) -> Optional[Library]: ...

    def list_libraries_by_release(self, release_id: int) -> List[Library]: ...

    def get_author(self, author_id: int) -> Optional[Author]: ...

    def get_distribution(self, distribution_id: int) -> Optional[Distribution]: ...

    def get_release(self, release_id: int) -> Optional[Release]: ...

    def get_latest_release(self, distribution_id: int) -> Optional[Release]: ...

    def search(self, substring: str) -> Dict[str, list]: ...


class SQLiteIndex:
    """
    ``IndexBackend`` over the SQLite index file.

    The connection is opened once, when the shell starts, and held for
    the session. Failing to open it is fatal.
    """

    def __init__(self, db_path: Optional[Path] = None, config: Optional[dict] = None):
        self.db_path = db_path if db_path is not None else get_db_path(config)
        existed = self.db_path.exists()
        self._db = Database(db_path=self.db_path)
        try:
            self._db.__enter__()
            self._db.execute("SELECT COUNT(*) FROM authors")
            authors = self._db.fetchone()[0]
        except (sqlite3.Error, OSError) as e:
            raise FatalError(f"Cannot open index {self.db_path}: {e}", CONFIG_ERROR) from e
        logger.debug(f"Opened index {self.db_path}")

        if not existed:
            logger.warning(
                f"Created a new empty index at {self.db_path}. "
                f"Run 'jsan index import DUMP' to populate it"
            )
        elif authors == 0:
            logger.warning(f"Index {self.db_path} is empty. Run 'jsan index import DUMP' to populate it")

    def close(self) -> None:
        self._db.__exit__(None, None, None)

    def __enter__(self) -> 'SQLiteIndex':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @contextmanager
    def _query(self, what: str) -> Generator[Database, None, None]:
        try:
            yield self._db
        except sqlite3.Error as e:
            raise BackendError(f"Index query failed ({what}): {e}") from e

    def get_author_by_login(self, login: str) -> Optional[Author]:
        with self._query('author') as db:
            return queries.get_author_by_login(db, login)

    def get_distribution_by_name(self, name: str) -> Optional[Distribution]:
        with self._query('distribution') as db:
            return queries.get_distribution_by_name(db, name)

    def get_library_by_name(self, name: str) -> Optional[Library]:
        with self._query('library') as db:
            return queries.get_library_by_name(db, name)

    def list_libraries_by_release(self, release_id: int) -> List[Library]:
        with self._query('release libraries') as db:
            return queries.get_libraries_by_release(db, release_id)

    def get_author(self, author_id: int) -> Optional[Author]:
        with self._query('author') as db:
            return queries.get_author_by_id(db, author_id)

    def get_distribution(self, distribution_id: int) -> Optional[Distribution]:
        with self._query('distribution') as db:
            return queries.get_distribution_by_id(db, distribution_id)

    def get_release(self, release_id: int) -> Optional[Release]:
        with self._query('release') as db:
            return queries.get_release_by_id(db, release_id)

    def get_latest_release(self, distribution_id: int) -> Optional[Release]:
        with self._query('latest release') as db:
            return queries.get_latest_release(db, distribution_id)

    def search(self, substring: str) -> Dict[str, list]:
        with self._query('search') as db:
            return queries.search_records(db, substring)
