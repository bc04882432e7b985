"""
Referential delete guard.

When the store refuses a DELETE, the registries ask this module whether
the refusal came from a foreign-key constraint (other rows still point at
the row being deleted) or from anything else. The first case becomes an
EntityInUseError the UI can show next to the table; everything else is a
PersistenceError.

The check defers entirely to the store's own constraint graph. No
dependents are counted in Python.
"""

from __future__ import annotations

import enum
import logging
import sqlite3
from typing import Any, Iterator, Optional

from psycopg2 import errors as pg_errors

from ..errors import BaumDBError, EntityInUseError, PersistenceError

logger = logging.getLogger(__name__)

# SQLSTATE for foreign_key_violation
PG_FOREIGN_KEY_VIOLATION = "23503"

# MySQL ER_ROW_IS_REFERENCED / ER_ROW_IS_REFERENCED_2
MYSQL_ROW_IS_REFERENCED = (1217, 1451)


class DeleteFailure(enum.Enum):
    IN_USE = "in_use"
    OTHER = "other"


def _chain(failure: Optional[BaseException]) -> Iterator[BaseException]:
    seen = set()
    while failure is not None and id(failure) not in seen:
        seen.add(id(failure))
        yield failure
        failure = failure.__cause__ or failure.__context__


def _is_fk_violation(exc: BaseException) -> bool:
    if isinstance(exc, pg_errors.ForeignKeyViolation):
        return True
    if getattr(exc, "pgcode", None) == PG_FOREIGN_KEY_VIOLATION:
        return True

    if isinstance(exc, sqlite3.IntegrityError):
        return "foreign key" in str(exc).lower()

    args: Any = getattr(exc, "args", ())
    if args and args[0] in MYSQL_ROW_IS_REFERENCED:
        return True
    return "cannot delete or update a parent row" in str(exc).lower()


def classify(failure: BaseException) -> DeleteFailure:
    """
    Decide whether a failed delete was caused by a referential constraint.

    Walks the exception and everything chained to it, so a PersistenceError
    raised by the DB helpers is classified by the driver error it wraps.
    """
    for exc in _chain(failure):
        if _is_fk_violation(exc):
            return DeleteFailure.IN_USE
    return DeleteFailure.OTHER


def guard_delete(
    failure: BaseException,
    entity: Any,
    dependents: str,
) -> BaumDBError:
    """
    Translate a failed delete into the error the registry should raise
    (``raise guard_delete(e, entity, "courses") from e``).

    Parameters
    ----------
    failure:
        Exception raised while deleting ``entity``.
    entity:
        The record the caller tried to remove.
    dependents:
        Plural name of the rows that may reference it, e.g. "courses".
    """
    if classify(failure) is DeleteFailure.IN_USE:
        logger.info(
            "Delete of %s %s refused: has associated %s",
            type(entity).__name__, getattr(entity, "id", "?"), dependents,
        )
        return EntityInUseError(entity, dependents)

    logger.error(
        "Delete of %s %s failed: %s",
        type(entity).__name__, getattr(entity, "id", "?"), failure,
    )
    return PersistenceError(
        f"Could not delete {type(entity).__name__} "
        f"{getattr(entity, 'id', '?')}: {failure}"
    )


__all__ = [
    "DeleteFailure",
    "classify",
    "guard_delete",
]
