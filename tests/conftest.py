"""Shared fixtures: a BaumDB over a throw-away SQLite file."""

import pytest

from baum_db import BaumDB, BaumDBConfig


def make_config(path) -> BaumDBConfig:
    return BaumDBConfig(db_backend="sqlite", db_uri=str(path), timeout=5.0)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "baum.db"


@pytest.fixture
def db(db_path):
    """Empty, schema-initialised store with loaded (empty) registries."""
    return BaumDB.from_config(make_config(db_path))


@pytest.fixture
def reopen(db_path):
    """Build a fresh BaumDB over the same file, seeded from the store."""
    def _reopen() -> BaumDB:
        return BaumDB.from_config(make_config(db_path))
    return _reopen


@pytest.fixture
def seeded(db):
    """One room, one company, one course and one student."""
    room = db.rooms.add("Lab 1")
    company = db.companies.add("Acme GmbH")
    course = db.courses.add("Algorithms", room.id)
    student = db.students.add("Ada", "Lovelace", 80, course.id, company.id)
    return {
        "db": db,
        "room": room,
        "company": company,
        "course": course,
        "student": student,
    }


def count_rows(db: BaumDB, table: str) -> int:
    with db.db_pool.connection() as conn:
        row = conn.fetch_one(f"SELECT COUNT(*) AS n FROM {table}")
    return row["n"]


@pytest.fixture
def row_count():
    return count_rows
