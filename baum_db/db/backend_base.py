"""
Backend base interfaces for Baum DB.

This module defines the minimal contracts that all database backends
(SQLite, Postgres) must satisfy.

It does NOT depend on any specific DB driver. It only encodes the
structural requirements assumed by:
      * baum_db.db.connection.DBPool
      * baum_db.db.helpers
      * the registry layer

Backends must expose:

    backend.connect()     -> raw_connection
    backend.helpers       -> module with:
                               - safe_execute(conn, query, params)
                               - safe_fetch_all(conn, query, params)
                               - safe_fetch_one(conn, query, params)
                               - safe_executemany(conn, query, seq)
                               - row_to_dict(row)
    backend.placeholder   -> DB-API parameter marker ("?" or "%s")

    backend.init_schema(conn)  # optional
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Abstract Base Backend
# ---------------------------------------------------------------------------

class DBBackend(ABC):
    """
    Abstract base class for a Baum DB backend.

    Concrete subclasses may define any constructor signature they want
    (e.g. SQLiteBackend(db_path), PostgresBackend(dsn)).

    Registries write their SQL with "?" markers; DBConnection rewrites
    them to the backend's ``placeholder`` before execution.
    """

    placeholder: str = "?"

    @property
    @abstractmethod
    def helpers(self) -> Any:
        """
        Return the helper module associated with this backend.

        Normally this is baum_db.db.helpers, but test backends may
        provide compatible modules.
        """
        raise NotImplementedError

    @abstractmethod
    def connect(self) -> Any:
        """
        Acquire and return a new raw DB-API 2.0 connection.
        """
        raise NotImplementedError

    def init_schema(self, conn: Any) -> None:
        """
        Optional schema bootstrap. Default: no-op.
        """
        return None


# ---------------------------------------------------------------------------
# Structural Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class BackendLike(Protocol):
    """
    Structural protocol for objects usable as a Baum DB backend.
    """

    helpers: Any
    placeholder: str

    def connect(self) -> Any:
        ...

    def init_schema(self, conn: Any) -> None:
        ...


# ---------------------------------------------------------------------------
# Runtime Guard
# ---------------------------------------------------------------------------

def ensure_backend(backend: Any) -> BackendLike:
    """
    Validate that an object behaves like a Baum DB backend.

    Raises:
        TypeError if required attributes are missing.
    """
    if not isinstance(backend, BackendLike):
        missing = [
            attr
            for attr in ("connect", "helpers", "init_schema", "placeholder")
            if not hasattr(backend, attr)
        ]

        if missing:
            raise TypeError(
                f"Invalid Baum DB backend {backend!r}: missing attributes {missing}"
            )

    return backend  # type: ignore[return-value]


__all__ = [
    "DBBackend",
    "BackendLike",
    "ensure_backend",
]
