"""Tests for classifying refused deletes."""

import sqlite3

import pytest
from psycopg2 import errors as pg_errors

from baum_db import EntityInUseError, PersistenceError
from baum_db.registry import DeleteFailure, Room, classify, guard_delete


class FakePgError(Exception):
    pgcode = "23503"


def wrapped(cause: BaseException) -> PersistenceError:
    """Return a PersistenceError chained to ``cause`` like the DB helpers raise it."""
    try:
        try:
            raise cause
        except Exception as e:
            raise PersistenceError(f"DB execute failed: {e}") from e
    except PersistenceError as outer:
        return outer


class TestClassify:
    def test_sqlite_foreign_key(self):
        err = sqlite3.IntegrityError("FOREIGN KEY constraint failed")
        assert classify(err) is DeleteFailure.IN_USE

    def test_sqlite_other_integrity_error(self):
        err = sqlite3.IntegrityError("UNIQUE constraint failed: room.name")
        assert classify(err) is DeleteFailure.OTHER

    def test_postgres_sqlstate(self):
        assert classify(FakePgError("violates foreign key")) is DeleteFailure.IN_USE

    def test_postgres_error_class(self):
        assert issubclass(pg_errors.ForeignKeyViolation, Exception)
        assert pg_errors.lookup("23503") is pg_errors.ForeignKeyViolation

    def test_mysql_parent_row(self):
        err = Exception(1451, "Cannot delete or update a parent row: a foreign key constraint fails")
        assert classify(err) is DeleteFailure.IN_USE

    def test_cause_chain_is_followed(self):
        err = wrapped(sqlite3.IntegrityError("FOREIGN KEY constraint failed"))
        assert classify(err) is DeleteFailure.IN_USE

    def test_connectivity_is_other(self):
        err = wrapped(sqlite3.OperationalError("unable to open database file"))
        assert classify(err) is DeleteFailure.OTHER


class TestGuardDelete:
    def test_in_use_error(self):
        room = Room(id=1, name="Lab 1")
        err = guard_delete(
            wrapped(sqlite3.IntegrityError("FOREIGN KEY constraint failed")),
            room,
            "courses",
        )
        assert isinstance(err, EntityInUseError)
        assert err.entity == room
        assert str(err) == "Room 'Lab 1' has associated courses"

    def test_other_failure(self):
        room = Room(id=1, name="Lab 1")
        err = guard_delete(RuntimeError("connection reset"), room, "courses")
        assert isinstance(err, PersistenceError)
        assert "connection reset" in str(err)

    @pytest.mark.parametrize("dependents", ["students", "courses"])
    def test_reason_names_dependents(self, dependents):
        err = guard_delete(FakePgError(), Room(id=1, name="Lab 1"), dependents)
        assert err.reason == f"has associated {dependents}"
