"""
SQLite backend for Baum DB.

Used for:
    - local development
    - tests
    - single-workstation installs

Implements:
    - connect()
    - helpers      (required by DBBackend abstract interface)
    - init_schema()

Foreign keys are switched on per connection so the store itself rejects
deletes of referenced rooms, courses and companies.
"""

from __future__ import annotations
import sqlite3
from pathlib import Path

from . import helpers
from .backend_base import DBBackend


# ----------------------------------------------------------------------
# Canonical Schema
# ----------------------------------------------------------------------

SQL_SCHEMA = """
-- ------------------------------------------------------------
-- Rooms
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS room (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    name   VARCHAR(50) NOT NULL
);

-- ------------------------------------------------------------
-- Companies
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS company (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    name   VARCHAR(50) NOT NULL
);

-- ------------------------------------------------------------
-- Courses (each held in one room)
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS course (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    name     VARCHAR(50) NOT NULL,
    room_id  INTEGER NOT NULL,
    FOREIGN KEY (room_id) REFERENCES room(id) ON DELETE RESTRICT
);

CREATE INDEX IF NOT EXISTS idx_course_room
    ON course(room_id);

-- ------------------------------------------------------------
-- Students (each in one course, placed with one company)
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS student (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        VARCHAR(50) NOT NULL,
    surname     VARCHAR(50) NOT NULL,
    javaskills  INTEGER NOT NULL DEFAULT 0,
    course_id   INTEGER NOT NULL,
    company_id  INTEGER NOT NULL,
    FOREIGN KEY (course_id) REFERENCES course(id) ON DELETE RESTRICT,
    FOREIGN KEY (company_id) REFERENCES company(id) ON DELETE RESTRICT
);

CREATE INDEX IF NOT EXISTS idx_student_course
    ON student(course_id);

CREATE INDEX IF NOT EXISTS idx_student_company
    ON student(company_id);
"""


# ----------------------------------------------------------------------
# Backend implementation
# ----------------------------------------------------------------------

class SQLiteBackend(DBBackend):
    """
    Minimal SQLite backend.

    Parameters
    ----------
    db_path : str
        Path to the SQLite database file.
    timeout : float
        Seconds to wait on a locked database before failing.
    """

    placeholder = "?"

    def __init__(self, db_path: str, timeout: float = 10.0):
        self.path = Path(db_path)
        self.timeout = timeout
        self._helpers = helpers

    @property
    def helpers(self):
        return self._helpers

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """
        Open a SQLite3 connection with row_factory=dict-like access.

        Also ensures foreign keys are enforced.
        """
        conn = sqlite3.connect(str(self.path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # ------------------------------------------------------------------
    # Schema initializer
    # ------------------------------------------------------------------

    def init_schema(self, conn) -> None:
        """
        Create tables and indices if they do not exist.

        Idempotent – safe to call multiple times.
        """
        cur = conn.cursor()
        cur.executescript(SQL_SCHEMA)
        conn.commit()
