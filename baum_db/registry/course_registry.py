"""
DB-backed Course Registry.

Each course is held in one room. Room references are resolved through the
Room Registry's snapshot whenever a course record is built, so every cached
course points at a room that is cached too.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .base import EntityRegistry, require_text
from .company_registry import CompanyRegistry
from .models import Course, Room, Student
from .room_registry import RoomRegistry
from ..db.connection import DBPool
from ..errors import InvalidReferenceError

logger = logging.getLogger(__name__)


class CourseRegistry(EntityRegistry[Course]):
    """
    Snapshot of the ``course`` table.

    Schema (canonical):
        course(
            id      INTEGER PRIMARY KEY,
            name    VARCHAR(50) NOT NULL,
            room_id INTEGER NOT NULL REFERENCES room(id)
        )

    Parameters
    ----------
    pool:
        Connection factory for the backing store.
    rooms:
        Registry used to resolve ``room_id``.
    companies:
        Registry used to rebuild students in get_course_student_list().
    """

    table = "course"
    dependents = "students"

    def __init__(
        self,
        pool: DBPool,
        rooms: RoomRegistry,
        companies: Optional[CompanyRegistry] = None,
    ):
        super().__init__(pool)
        self.room_registry = rooms
        self.company_registry = companies
        rooms.on_change(self.relink_rooms)

    @property
    def rooms(self) -> List[Room]:
        """Rooms a course can be assigned to."""
        return self.room_registry.items

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def add(self, name: str, room_id: int) -> Course:
        """
        Insert a course held in room ``room_id``.

        Raises InvalidReferenceError, before touching the store, when the
        room is not in the Room Registry.
        """
        require_text(name, "name")
        room = self._resolve_room(room_id)

        with self._lock:
            new_id = self._insert(
                "INSERT INTO course (name, room_id) VALUES (?, ?) RETURNING id",
                (name, room.id),
            )
            course = Course(id=new_id, name=name, room=room)
            self._items.append(course)

        logger.debug("Added course %s (%r) in room %s", new_id, name, room.id)
        return course

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, course: Course) -> Course:
        """
        Overwrite name and room of ``course.id`` in the store, then swap
        the cached entry in place.

        Subscribers (the Student Registry) are told afterwards, so cached
        students point at the new record.
        """
        require_text(course.name, "name")
        room_id = course.room.id if course.room is not None else None
        room = self._resolve_room(room_id)
        course = replace(course, room=room)

        with self._lock:
            self._update(
                "UPDATE course SET name = ?, room_id = ? WHERE id = ?",
                (course.name, room.id, course.id),
                course.id,
            )
            cached = self._replace_cached(course)

        if cached:
            self._notify_changed()
        else:
            self.load_all()
        return course

    def relink_rooms(self) -> None:
        """
        Point every cached course at the room record currently in the
        Room Registry. Courses whose room has left it keep the old record.
        """
        rooms = {room.id: room for room in self.room_registry.items}
        changed = False
        with self._lock:
            for i, course in enumerate(self._items):
                room = rooms.get(course.room.id)
                if room is None:
                    logger.warning(
                        "Course %s references room %s, which is no longer cached",
                        course.id, course.room.id,
                    )
                    continue
                if room is not course.room:
                    self._items[i] = replace(course, room=room)
                    changed = True
        if changed:
            self._notify_changed()

    # ------------------------------------------------------------------
    # Students of a course
    # ------------------------------------------------------------------

    def get_course_student_list(self, course: Optional[Course]) -> List[Student]:
        """
        Query the store for the students enrolled in ``course``.

        This is a live query, not a cache read. Students whose company
        cannot be resolved are skipped.
        """
        if course is None:
            return []
        if self.company_registry is None:
            raise RuntimeError("CourseRegistry was built without a CompanyRegistry")

        with self.pool.connection() as conn:
            rows = conn.fetch_all(
                "SELECT * FROM student WHERE course_id = ? ORDER BY id",
                (course.id,),
            )

        students: List[Student] = []
        for row in rows:
            company = self.company_registry.find_by_id(row["company_id"])
            if company is None:
                logger.warning(
                    "Student %s references unknown company %s",
                    row["id"], row["company_id"],
                )
                continue
            students.append(
                Student(
                    id=row["id"],
                    name=row["name"],
                    surname=row["surname"],
                    skill_level=row["javaskills"],
                    course=course,
                    company=company,
                )
            )
        return students

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_room(self, room_id: Any) -> Room:
        room = self.room_registry.find_by_id(room_id) if room_id is not None else None
        if room is None:
            raise InvalidReferenceError("room", room_id)
        return room

    def _row_to_rec(self, row: Dict[str, Any]) -> Optional[Course]:
        room = self.room_registry.find_by_id(row["room_id"])
        if room is None:
            return None
        return Course(id=row["id"], name=row["name"], room=room)
