"""
Baum DB - Registry package.

This package provides:
    - Data model records (Room, Company, Course, Student)
    - Snapshot-backed registry implementations:
          * RoomRegistry
          * CompanyRegistry
          * CourseRegistry   (resolves rooms)
          * StudentRegistry  (resolves courses and companies)
    - The referential delete guard and the shared search helpers

Each registry keeps an in-memory snapshot of one table, seeded by
load_all() and adjusted after every successful store write.
"""

from .models import Room, Company, Course, Student
from .base import EntityRegistry, LeafRegistry
from .room_registry import RoomRegistry
from .company_registry import CompanyRegistry
from .course_registry import CourseRegistry
from .student_registry import StudentRegistry
from .delete_guard import DeleteFailure, classify, guard_delete
from .search import filter_snapshot, like_pattern, name_clause

__all__ = [
    # Data model records
    "Room",
    "Company",
    "Course",
    "Student",

    # Registries
    "EntityRegistry",
    "LeafRegistry",
    "RoomRegistry",
    "CompanyRegistry",
    "CourseRegistry",
    "StudentRegistry",

    # Delete guard
    "DeleteFailure",
    "classify",
    "guard_delete",

    # Search
    "filter_snapshot",
    "like_pattern",
    "name_clause",
]
