"""
Domain layer for jsan.

Contains pure domain objects with no I/O or side effects:
- Author: A JSAN account that publishes releases
- Distribution: A named distribution with a latest release
- Release: One published version of a distribution
- Library: A library shipped in a release

These are read-only projections of index records.
"""

from .records import Author, Distribution, Release, Library

__all__ = [
    'Author',
    'Distribution',
    'Release',
    'Library',
]
