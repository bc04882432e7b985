"""
Shared plumbing for the DB-backed registries.

A registry owns one snapshot: the in-memory list of records mirroring a
table of the backing store. The snapshot is seeded by ``load_all()`` and
adjusted only after a store write has committed, so a failed write never
leaves it half-updated.

Every store write and its paired snapshot change run under the registry's
own lock; snapshot reads take the same lock.

Registries that hold records of another registry subscribe to it with
``on_change()``. Listeners run after the publishing registry has released
its lock, whenever existing records were replaced (reload, update).
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Sequence, TypeVar

from .delete_guard import guard_delete
from .search import filter_snapshot, like_pattern, name_clause
from ..db.connection import DBPool
from ..errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def require_text(value: Any, field: str) -> str:
    """
    Reject missing or blank text input with ValidationError.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    return value


class EntityRegistry(Generic[T]):
    """
    Base class for a snapshot-backed registry over one table.

    Subclasses set:
        table           – table name
        dependents      – plural name of rows that may reference this
                          table (None when nothing does)
        search_columns  – columns matched by search()

    and implement ``_row_to_rec(row)`` returning a record, or None when the
    row's references cannot be resolved.
    """

    table: str = ""
    dependents: Optional[str] = None
    search_columns: Sequence[str] = ("name",)

    def __init__(self, pool: DBPool):
        self.pool = pool
        self._items: List[T] = []
        self._lock = threading.RLock()
        # Rows skipped by the last load_all() because a reference did not resolve
        self.dangling: List[Dict[str, Any]] = []
        self._listeners: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def on_change(self, callback: Callable[[], None]) -> None:
        """
        Register ``callback`` to run after cached records were replaced.
        """
        self._listeners.append(callback)

    def _notify_changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[T]:
        """A copy of the current snapshot, in insertion order."""
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __contains__(self, entity: object) -> bool:
        ent_id = getattr(entity, "id", None)
        return ent_id is not None and self.find_by_id(ent_id) is not None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_all(self) -> List[T]:
        """
        Fetch every row of the table and replace the snapshot.

        Rows whose references do not resolve are not cached; they are
        logged and kept in ``self.dangling``.
        """
        with self._lock:
            with self.pool.connection() as conn:
                rows = conn.fetch_all(f"SELECT * FROM {self.table} ORDER BY id")

            records: List[T] = []
            dangling: List[Dict[str, Any]] = []
            for row in rows:
                rec = self._row_to_rec(row)
                if rec is None:
                    logger.warning(
                        "Data integrity: %s row %s has an unresolved reference: %s",
                        self.table, row.get("id"), row,
                    )
                    dangling.append(row)
                    continue
                records.append(rec)

            self._items = records
            self.dangling = dangling

        logger.info(
            "Loaded %d %s rows (%d dangling)", len(records), self.table, len(dangling)
        )
        self._notify_changed()
        return list(records)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, ent_id: Any) -> Optional[T]:
        with self._lock:
            for rec in self._items:
                if rec.id == ent_id:  # type: ignore[attr-defined]
                    return rec
        return None

    def find_by_name(self, name: str) -> Optional[T]:
        with self._lock:
            for rec in self._items:
                if rec.name == name:  # type: ignore[attr-defined]
                    return rec
        return None

    def find_id_by_name(self, name: str) -> Optional[int]:
        rec = self.find_by_name(name)
        return rec.id if rec is not None else None  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, term: str) -> List[T]:
        """
        Case-insensitive substring search, queried against the store.

        The result is a fresh list; it never enters the snapshot.
        """
        where = name_clause(self.search_columns)
        params = tuple(like_pattern(term) for _ in self.search_columns)
        with self.pool.connection() as conn:
            rows = conn.fetch_all(
                f"SELECT * FROM {self.table} WHERE {where} ORDER BY id",
                params,
            )

        results: List[T] = []
        for row in rows:
            rec = self._row_to_rec(row)
            if rec is None:
                logger.warning(
                    "Search skipped %s row %s with an unresolved reference",
                    self.table, row.get("id"),
                )
                continue
            results.append(rec)
        return results

    def filter(self, term: str) -> List[T]:
        """
        Same match as search(), applied to the current snapshot.
        """
        with self._lock:
            return filter_snapshot(self._items, term, self._search_fields())

    def _search_fields(self) -> List[Callable[[T], Optional[str]]]:
        return [
            (lambda rec, col=col: getattr(rec, col, None))
            for col in self.search_columns
        ]

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, entity: Optional[T]) -> None:
        """
        Delete ``entity`` from the store, then from the snapshot.

        A no-op when ``entity`` is None or not in the snapshot. A refused
        delete raises EntityInUseError (dependents exist) or
        PersistenceError; the snapshot is left as it was.
        """
        if entity is None:
            return

        ent_id = entity.id  # type: ignore[attr-defined]
        with self._lock:
            index = self._index_of(ent_id)
            if index is None:
                return

            try:
                with self.pool.connection() as conn:
                    conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (ent_id,))
                    conn.commit()
            except PersistenceError as e:
                if self.dependents is None:
                    logger.error("Delete of %s %s failed: %s", self.table, ent_id, e)
                    raise
                raise guard_delete(e, entity, self.dependents) from e

            del self._items[index]

        logger.debug("Removed %s %s", self.table, ent_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _insert(self, query: str, params: tuple) -> int:
        """
        Run an ``INSERT ... RETURNING id`` and commit. Returns the new id.
        """
        try:
            with self.pool.connection() as conn:
                new_id = conn.insert(query, params)
                conn.commit()
        except PersistenceError as e:
            logger.error("Insert into %s failed: %s", self.table, e)
            raise
        return new_id

    def _update(self, query: str, params: tuple, ent_id: int) -> None:
        """
        Run an UPDATE for one row and commit. A missing row is an error.
        """
        try:
            with self.pool.connection() as conn:
                cur = conn.execute(query, params)
                if cur.rowcount == 0:
                    raise PersistenceError(f"No {self.table} row with id {ent_id}")
                conn.commit()
        except PersistenceError as e:
            logger.error("Update of %s %s failed: %s", self.table, ent_id, e)
            raise

    def _index_of(self, ent_id: Any) -> Optional[int]:
        for i, rec in enumerate(self._items):
            if rec.id == ent_id:  # type: ignore[attr-defined]
                return i
        return None

    def _replace_cached(self, rec: T) -> bool:
        """
        Replace the cached record with the same id, keeping its position.

        Returns False when the id is not cached; the caller then reloads
        the snapshot once it has released the lock.
        """
        index = self._index_of(rec.id)  # type: ignore[attr-defined]
        if index is None:
            logger.warning(
                "%s %s not in cache after update; reloading",
                self.table, rec.id,  # type: ignore[attr-defined]
            )
            return False
        self._items[index] = rec
        return True

    def _row_to_rec(self, row: Dict[str, Any]) -> Optional[T]:
        raise NotImplementedError


class LeafRegistry(EntityRegistry[T]):
    """
    Registry for a table with a single ``name`` column and no outgoing
    references (rooms, companies).
    """

    record_type: Callable[..., T]

    def add(self, name: str) -> T:
        """
        Insert a new row and append the resulting record to the snapshot.
        """
        require_text(name, "name")
        with self._lock:
            new_id = self._insert(
                f"INSERT INTO {self.table} (name) VALUES (?) RETURNING id",
                (name,),
            )
            rec = self.record_type(id=new_id, name=name)
            self._items.append(rec)

        logger.debug("Added %s %s (%r)", self.table, new_id, name)
        return rec

    def _row_to_rec(self, row: Dict[str, Any]) -> Optional[T]:
        return self.record_type(id=row["id"], name=row["name"])


__all__ = [
    "EntityRegistry",
    "LeafRegistry",
    "require_text",
]
