"""
baum_db.db

Database backend abstraction layer for Baum DB.

This package provides:

- A backend-agnostic connection abstraction:
      * DBConnection
      * DBPool

- Helper functions for safe SQL execution and row mapping:
      * safe_execute
      * safe_fetch_all
      * safe_fetch_one
      * safe_executemany
      * row_to_dict

- Concrete database backend implementations:
      * SQLiteBackend   (local installs + tests)
      * PostgresBackend (networked relational store)

- Backend contracts:
      * DBBackend
      * BackendLike
      * ensure_backend
"""

from .connection import DBConnection, DBPool
from .sqlite_backend import SQLiteBackend
from .postgres_backend import PostgresBackend
from .backend_base import DBBackend, BackendLike, ensure_backend
from .helpers import (
    safe_execute,
    safe_executemany,
    safe_fetch_all,
    safe_fetch_one,
    row_to_dict,
)

__all__ = [
    # Connection / Pool
    "DBConnection",
    "DBPool",

    # Backends
    "SQLiteBackend",
    "PostgresBackend",
    "DBBackend",
    "BackendLike",
    "ensure_backend",

    # Helpers
    "safe_execute",
    "safe_executemany",
    "safe_fetch_all",
    "safe_fetch_one",
    "row_to_dict",
]
