"""
jsan - JavaScript Archive Network (JSAN) shell.

jsan provides an interactive shell for exploring a JSAN package index
(authors, distributions, libraries and releases) and for fetching and
installing distributions from it.

Quick Start:
    $ jsan index import index.json
    $ jsan
    jsan> author adamk
    jsan> dist Display.Swap
    jsan> library Display.Swap
    jsan> install Display.Swap

Programmatic use:
    from jsan.shell import JSANShell

    shell = JSANShell.from_config()
    result = shell.execute("dist Display.Swap")
    for line in result.lines:
        print(line)

Domain Objects:
    Author - A JSAN author account
    Distribution - A named distribution
    Release - A published version of a distribution
    Library - A library shipped in a release
"""

__version__ = "2.0.1"

from .domain import Author, Distribution, Release, Library

__all__ = [
    '__version__',
    'Author',
    'Distribution',
    'Release',
    'Library',
]
