"""
Index module for jsan.

Provides the SQLite-backed JSAN package index the shell queries.

Key components:
- connection: Database connection management
- schema: Table definitions and schema versioning
- queries: Record lookups and inserts
- loader: JSON index dump import
- backend: The IndexBackend protocol and its SQLite implementation
"""

from .connection import (
    get_connection,
    get_db_path,
    Database,
    get_database_info,
    transaction,
)
from .schema import CURRENT_VERSION, ensure_schema
from .loader import load_index_file, load_index_data
from .backend import IndexBackend, SQLiteIndex

__all__ = [
    # Connection
    'get_connection',
    'get_db_path',
    'Database',
    'get_database_info',
    'transaction',
    # Schema
    'ensure_schema',
    'CURRENT_VERSION',
    # Loader
    'load_index_file',
    'load_index_data',
    # Backend
    'IndexBackend',
    'SQLiteIndex',
]
