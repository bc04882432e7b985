"""
Core façade for the Baum DB subsystem.

BaumDB is the single, high-level entrypoint used by the UI layer. It wraps:

    - DB backend + pool
    - the four registries (rooms, companies, courses, students), wired to
      each other by constructor injection

and seeds them in dependency order: Room, Company, Course (needs rooms),
Student (needs courses and companies).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import BaumDBConfig, load_config
from .db import DBPool, SQLiteBackend, PostgresBackend
from .registry.room_registry import RoomRegistry
from .registry.company_registry import CompanyRegistry
from .registry.course_registry import CourseRegistry
from .registry.student_registry import StudentRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# BaumDB façade
# ---------------------------------------------------------------------------

@dataclass
class BaumDB:
    """
    High-level façade over the Baum DB registries.

    Attributes
    ----------
    config:
        BaumDBConfig used to construct this instance.

    db_pool:
        DBPool that provides DBConnection objects on-demand.

    rooms, companies, courses, students:
        The registries. Their snapshots are what the UI renders.
    """

    config: BaumDBConfig
    db_pool: DBPool
    rooms: RoomRegistry
    companies: CompanyRegistry
    courses: CourseRegistry
    students: StudentRegistry

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Optional[BaumDBConfig] = None,
        *,
        init_schema: bool = True,
        load: bool = True,
    ) -> "BaumDB":
        """
        Construct a BaumDB instance from a BaumDBConfig.

        This:
            - selects the DB backend (sqlite/postgres),
            - optionally bootstraps the schema,
            - wires up the registries,
            - optionally seeds them from the store.
        """
        cfg = config or load_config()

        if cfg.enable_logging:
            logging.basicConfig(level=logging.INFO)
            logger.info("Initializing BaumDB with backend %s", cfg.db_backend)

        backend = _create_backend_from_config(cfg)
        db_pool = DBPool(backend)

        if init_schema:
            with db_pool.connection() as conn:
                backend.init_schema(conn.raw)

        rooms = RoomRegistry(db_pool)
        companies = CompanyRegistry(db_pool)
        courses = CourseRegistry(db_pool, rooms, companies)
        students = StudentRegistry(db_pool, courses, companies)

        db = cls(
            config=cfg,
            db_pool=db_pool,
            rooms=rooms,
            companies=companies,
            courses=courses,
            students=students,
        )
        if load:
            db.reload()
        return db

    @classmethod
    def from_env(cls, *, init_schema: bool = True) -> "BaumDB":
        """Construct BaumDB using environment variables."""
        return cls.from_config(load_config(), init_schema=init_schema)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """
        Reseed every registry from the store, leaves first.
        """
        self.rooms.load_all()
        self.companies.load_all()
        self.courses.load_all()
        self.students.load_all()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _create_backend_from_config(config: BaumDBConfig):
    """
    Instantiate the appropriate DB backend for a given configuration.
    """
    name = (config.db_backend or "").lower()

    if name == "sqlite":
        return SQLiteBackend(config.dsn(), timeout=config.timeout)

    if name in ("postgres", "postgresql", "psql"):
        return PostgresBackend(config.dsn(), timeout=config.timeout)

    raise ValueError(f"Unsupported Baum DB backend: {config.db_backend!r}")


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

def create_baum_db(
    config: Optional[BaumDBConfig] = None,
    *,
    init_schema: bool = True,
) -> BaumDB:
    """
    Convenience constructor used by the UI entry point and scripts.
    """
    return BaumDB.from_config(config, init_schema=init_schema)


__all__ = [
    "BaumDB",
    "create_baum_db",
]
