"""
baum_db

Top-level package for the training-organisation records registries.

Submodules include:
    - registry/   (rooms, companies, courses, students, delete guard, search)
    - db/         (backends, connection pool, SQL helpers)
    - config      (BaumDBConfig, load_config)
    - errors      (error taxonomy)
    - core        (BaumDB façade)
"""

from .config import BaumDBConfig, load_config
from .core import BaumDB, create_baum_db
from .errors import (
    BaumDBError,
    EntityInUseError,
    InvalidReferenceError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "BaumDBConfig",
    "load_config",
    "BaumDB",
    "create_baum_db",
    "BaumDBError",
    "EntityInUseError",
    "InvalidReferenceError",
    "PersistenceError",
    "ValidationError",
]
