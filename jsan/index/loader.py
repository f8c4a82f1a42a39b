"""
Index dump import for jsan.

Loads a JSON dump of the JSAN catalogue into the local index database,
replacing whatever was there before. The dump looks like:

    {
      "authors": [
        {"login": "adamk", "name": "Adam Kennedy",
         "email": "adam@ali.as", "url": "http://ali.as/"}
      ],
      "distributions": [
        {"name": "Display.Swap",
         "releases": [
           {"version": "0.01", "created": 1120000000, "author": "adamk",
            "source": "/dist/a/ad/adamk/Display.Swap-0.01.tar.gz",
            "latest": true,
            "libraries": [{"name": "Display.Swap", "version": "0.01"}]}
         ]}
      ]
    }

When no release of a distribution is flagged ``latest``, the most
recently created one is.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .connection import Database, transaction
from .queries import insert_author, insert_distribution, insert_release, insert_library

logger = logging.getLogger(__name__)


def load_index_file(path: Path, db_path: Optional[Path] = None, config: Optional[dict] = None) -> Dict[str, int]:
    """
    Import a JSON index dump.

    Args:
        path: Path to the dump file
        db_path: Optional explicit index database path
        config: Optional configuration dictionary

    Returns:
        Counts of imported records per table

    Raises:
        ValueError: If the dump is malformed
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: index dump must be a JSON object")

    with Database(db_path=db_path, config=config) as db:
        with transaction(db):
            counts = load_index_data(db, data)

    logger.debug(
        f"Imported {counts['authors']} authors, {counts['distributions']} distributions, "
        f"{counts['releases']} releases, {counts['libraries']} libraries"
    )
    return counts


def _records(container: Dict[str, Any], key: str, where: str) -> List[Dict[str, Any]]:
    """The list of objects under ``key``, or ValueError."""
    records = container.get(key, [])
    if not isinstance(records, list):
        raise ValueError(f"{where}: '{key}' must be a list")
    for record in records:
        if not isinstance(record, dict):
            raise ValueError(f"{where}: '{key}' entries must be objects, got {record!r}")
    return records


def _check_created(release: Dict[str, Any], where: str) -> None:
    created = release.get('created')
    # bool is an int subclass but never a timestamp
    if created is not None and (isinstance(created, bool) or not isinstance(created, int)):
        raise ValueError(f"{where}: 'created' must be epoch seconds, got {created!r}")


def load_index_data(db: Database, data: Dict[str, Any]) -> Dict[str, int]:
    """Replace the index contents with ``data``. Caller owns the transaction."""
    for table in ('libraries', 'releases', 'distributions', 'authors'):
        db.execute(f"DELETE FROM {table}")

    counts = {'authors': 0, 'distributions': 0, 'releases': 0, 'libraries': 0}
    author_ids: Dict[str, int] = {}

    for author in _records(data, 'authors', 'index dump'):
        if not author.get('login'):
            raise ValueError("author record without a login")
        author_ids[str(author['login']).lower()] = insert_author(db, author)
        counts['authors'] += 1

    for dist in _records(data, 'distributions', 'index dump'):
        if not dist.get('name'):
            raise ValueError("distribution record without a name")
        dist_id = insert_distribution(db, dist['name'])
        counts['distributions'] += 1

        releases = _records(dist, 'releases', f"distribution {dist['name']}")
        for release in releases:
            _check_created(release, f"release {dist['name']} {release.get('version')}")
        if releases and not any(r.get('latest') for r in releases):
            newest = max(releases, key=lambda r: r.get('created') or 0)
            releases = [dict(r, latest=(r is newest)) for r in releases]

        for release in releases:
            where = f"release {dist['name']} {release.get('version')}"
            login = str(release.get('author', '')).lower()
            if login not in author_ids:
                raise ValueError(f"{where} refers to unknown author '{login}'")
            release_id = insert_release(db, dist_id, author_ids[login], release)
            counts['releases'] += 1

            for library in _records(release, 'libraries', where):
                if not library.get('name'):
                    raise ValueError(f"library without a name in {dist['name']}")
                insert_library(db, release_id, library)
                counts['libraries'] += 1

    return counts
