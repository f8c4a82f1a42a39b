"""
Rendering functions for jsan shell output.

The ``format_*`` functions are pure: they turn index records into the
lines of text the shell shows. ``show_lines`` prints them framed by a
leading and a trailing blank line.
"""

import time
from typing import Iterable, List, Optional, Sequence

from rich.console import Console

from .domain import Author, Distribution, Release, Library

console = Console()


def _text(value) -> str:
    """Render an optional field; missing values become empty strings."""
    return "" if value is None else str(value)


def format_created(created: Optional[int]) -> str:
    """Render an epoch timestamp in ctime form, e.g. 'Tue Jun 28 23:06:40 2005'."""
    if created is None:
        return ""
    try:
        return time.ctime(int(created))
    except (TypeError, ValueError, OverflowError, OSError):
        return ""


def format_author(author: Author) -> List[str]:
    return [
        "Author ID = " + _text(author.login),
        "    Name:    " + _text(author.name),
        "    Email:   " + _text(author.email),
        "    Website: " + _text(author.url),
    ]


def format_library_listing(libraries: Iterable[Library]) -> List[str]:
    """
    Render the libraries of a release as aligned rows.

    Rows are sorted by name (ordinal comparison) and the name column is
    padded to the longest name in this listing.
    """
    ordered = sorted(libraries, key=lambda library: library.name)
    width = max((len(library.name) for library in ordered), default=0)
    return [
        f"    Library:  {library.name:<{width}}  {_text(library.version)}"
        for library in ordered
    ]


def _format_release(release: Release, author: Optional[Author]) -> List[str]:
    author = author or Author(id=0, login="")
    return [
        "    Version:  " + _text(release.version),
        "    Created:  " + format_created(release.created),
        "    Author:   " + _text(author.login),
        "        Name:    " + _text(author.name),
        "        Email:   " + _text(author.email),
        "        Website: " + _text(author.url),
    ]


def format_distribution(
    dist: Distribution,
    release: Release,
    author: Optional[Author],
    libraries: Sequence[Library],
) -> List[str]:
    return [
        "Distribution   = " + _text(dist.name),
        "Latest Release = " + _text(release.source),
        *_format_release(release, author),
        *format_library_listing(libraries),
    ]


def format_library(
    library: Library,
    dist: Optional[Distribution],
    release: Release,
    author: Optional[Author],
    libraries: Sequence[Library],
) -> List[str]:
    return [
        "Library          = " + _text(library.name),
        "    Version: " + _text(library.version),
        "In Distribution  = " + _text(dist.name if dist else None),
        "Latest Release   = " + _text(release.source),
        *_format_release(release, author),
        *format_library_listing(libraries),
    ]


def format_search_results(substring: str, results: dict) -> List[str]:
    """Render ``find`` matches grouped by record type."""
    lines: List[str] = []
    for author in results.get('authors', []):
        lines.append(f"Author:        {author.login} ({_text(author.name)})")
    for dist in results.get('distributions', []):
        lines.append(f"Distribution:  {dist.name}")
    for library in results.get('libraries', []):
        lines.append(f"Library:       {library.name}")
    if not lines:
        return [f"No matches for '{substring}'"]
    return lines


def print_lines(lines: Iterable[str], out: Optional[Console] = None) -> None:
    """Print lines verbatim, one per line."""
    out = out or console
    for line in lines:
        # Verbatim output keeps the columns aligned
        out.print(line.rstrip("\n"), markup=False, highlight=False, emoji=False, soft_wrap=True)


def show_lines(lines: Iterable[str], out: Optional[Console] = None) -> None:
    """Print lines with a leading and a trailing blank line."""
    print_lines(["", *lines, ""], out)
