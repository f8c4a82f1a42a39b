"""
Index record domain objects for jsan.

Records are immutable views of rows in the JSAN index. They are fetched
on demand for a single command and never cached.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class Author:
    """A JSAN author. ``login`` is the lowercase lookup key."""
    id: int
    login: str
    name: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Distribution:
    """A named distribution."""
    id: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Release:
    """
    A published version of a distribution.

    Attributes:
        id: Row id
        distribution_id: Owning distribution
        author_id: Author who uploaded the release
        version: Release version string
        created: Upload time as epoch seconds
        source: Path of the release archive on the mirror
    """
    id: int
    distribution_id: int
    author_id: int
    version: Optional[str] = None
    created: Optional[int] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Library:
    """A library (JavaScript namespace) shipped in a release."""
    id: int
    release_id: int
    name: str
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
