"""
Unified database connection abstraction for Baum DB.

This file defines:
- DBConnection: a wrapper around a live database handle
- DBPool: simple pool/manager to allocate backend connections

Backends must expose:
    backend.connect()   -> raw connection
    backend.placeholder -> parameter marker used by the driver
    backend.helpers     -> module with:
        safe_execute
        safe_executemany
        safe_fetch_all
        safe_fetch_one
        row_to_dict
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class DBConnection:
    """
    Thin wrapper around a raw DB-API 2.0 connection.

    Responsibilities:
        - Provide a stable API for SQL execution (execute, fetch, insert)
        - Translate "?" markers into the backend's placeholder
        - Normalize rows across backends (return Python dicts)
        - Leave transaction handling to the caller

    Notes:
        - Caller must commit() after mutating operations
        - Safe to close() multiple times
    """

    def __init__(self, raw_conn: Any, helpers: Any, placeholder: str = "?"):
        self.raw = raw_conn
        self.helpers = helpers
        self.placeholder = placeholder

    def _sql(self, query: str) -> str:
        if self.placeholder == "?":
            return query
        return query.replace("?", self.placeholder)

    # ------------------------------------------------------------------
    # SQL execution wrappers
    # ------------------------------------------------------------------

    def execute(self, query: str, params: Optional[tuple] = None):
        """
        Execute a single SQL statement.
        Returns the underlying cursor.
        """
        return self.helpers.safe_execute(self.raw, self._sql(query), params)

    def executemany(self, query: str, seq: Iterable[tuple]):
        """
        Bulk-execute the same SQL statement with a sequence of parameters.
        Returns the underlying cursor.
        """
        return self.helpers.safe_executemany(self.raw, self._sql(query), seq)

    def fetch_all(self, query: str, params: Optional[tuple] = None):
        """
        Execute a SELECT statement and return a list of dict rows.
        """
        rows = self.helpers.safe_fetch_all(self.raw, self._sql(query), params)
        return [self.helpers.row_to_dict(r) for r in rows]

    def fetch_one(self, query: str, params: Optional[tuple] = None):
        """
        Execute a SELECT statement and return a single dict row or None.
        """
        row = self.helpers.safe_fetch_one(self.raw, self._sql(query), params)
        return self.helpers.row_to_dict(row) if row else None

    def insert(self, query: str, params: Optional[tuple] = None) -> int:
        """
        Execute an ``INSERT ... RETURNING id`` statement and return the
        id assigned by the store.

        Raises PersistenceError when the store hands back no id.
        """
        # fetch_all drains the cursor so the statement is finished before commit
        rows = self.fetch_all(query, params)
        row = rows[0] if rows else None
        if not row or row.get("id") is None:
            raise PersistenceError(
                f"Insert returned no id | Query: {query!r} | Params: {params!r}"
            )
        return int(row["id"])

    # ------------------------------------------------------------------
    # Transaction and connection lifecycle
    # ------------------------------------------------------------------

    def commit(self) -> None:
        """
        Commit the current transaction.
        """
        try:
            self.raw.commit()
        except Exception as e:
            raise PersistenceError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """
        try:
            self.raw.rollback()
        except Exception:
            # Some backends auto-handle rollback; this is best-effort only.
            logger.debug("Rollback failed", exc_info=True)

    def close(self) -> None:
        """
        Close the underlying connection safely.
        """
        try:
            self.raw.close()
        except Exception:
            # Allow double-close or backend errors w/out propagating
            logger.debug("Close failed", exc_info=True)


# ----------------------------------------------------------------------
# DB Pool
# ----------------------------------------------------------------------

class DBPool:
    """
    Simple database connection factory.

    The backend must provide:
        - connect()    -> raw DB-API connection
        - helpers      -> module with DB helper functions
        - placeholder  -> parameter marker
    """

    def __init__(self, backend: Any):
        self.backend = backend

    def get(self) -> DBConnection:
        """
        Acquire a new DBConnection wrapper.
        """
        try:
            raw = self.backend.connect()
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not connect to the store: {e}") from e
        return DBConnection(
            raw,
            self.backend.helpers,
            getattr(self.backend, "placeholder", "?"),
        )

    # ------------------------------------------------------------------
    # Context manager syntax:
    #     with db_pool.connection() as conn:
    #         ...
    # ------------------------------------------------------------------

    def connection(self):
        return _ConnectionContext(self)


class _ConnectionContext:
    """
    Internal context manager for DBConnection.
    """

    def __init__(self, pool: DBPool):
        self.pool = pool
        self.conn: Optional[DBConnection] = None

    def __enter__(self) -> DBConnection:
        self.conn = self.pool.get()
        return self.conn

    def __exit__(self, exc_type, exc, tb):
        if self.conn is None:
            return False

        # Rollback on error
        if exc_type is not None:
            self.conn.rollback()

        # Always close
        self.conn.close()

        # Propagate exceptions
        return False
