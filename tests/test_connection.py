"""Tests for the connection wrapper, pool and backend contract."""

import sqlite3

import pytest

from baum_db import PersistenceError
from baum_db.db import DBConnection, DBPool, ensure_backend, helpers


class RecordingCursor:
    def __init__(self, log):
        self.log = log
        self.rowcount = 1

    def execute(self, query, params):
        self.log.append((query, params))

    def fetchall(self):
        return [{"id": 7}]


class RecordingConn:
    def __init__(self):
        self.log = []
        self.closed = False
        self.rolled_back = False

    def cursor(self):
        return RecordingCursor(self.log)

    def commit(self):
        pass

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class BrokenBackend:
    helpers = helpers
    placeholder = "?"

    def connect(self):
        raise OSError("connection refused")

    def init_schema(self, conn):
        return None


class TestDBConnection:
    def test_placeholder_translation(self):
        raw = RecordingConn()
        conn = DBConnection(raw, helpers, placeholder="%s")
        conn.execute("DELETE FROM room WHERE id = ?", (3,))
        assert raw.log == [("DELETE FROM room WHERE id = %s", (3,))]

    def test_insert_returns_id(self):
        conn = DBConnection(RecordingConn(), helpers)
        assert conn.insert("INSERT INTO room (name) VALUES (?) RETURNING id", ("A",)) == 7

    def test_execute_error_is_wrapped(self, tmp_path):
        raw = sqlite3.connect(str(tmp_path / "x.db"))
        conn = DBConnection(raw, helpers)
        with pytest.raises(PersistenceError) as excinfo:
            conn.execute("SELECT * FROM missing_table")
        assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
        conn.close()


class TestDBPool:
    def test_connect_failure_is_persistence_error(self):
        pool = DBPool(BrokenBackend())
        with pytest.raises(PersistenceError, match="connection refused"):
            pool.get()

    def test_context_rolls_back_and_closes(self):
        raw = RecordingConn()

        class Backend(BrokenBackend):
            def connect(self):
                return raw

        with pytest.raises(RuntimeError):
            with DBPool(Backend()).connection():
                raise RuntimeError("boom")
        assert raw.rolled_back
        assert raw.closed


class TestEnsureBackend:
    def test_valid(self):
        backend = BrokenBackend()
        assert ensure_backend(backend) is backend

    def test_missing_attributes(self):
        with pytest.raises(TypeError, match="connect"):
            ensure_backend(object())
