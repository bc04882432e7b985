"""
DB-backed Student Registry.

Each student is enrolled in one course and placed with one company. Both
references are resolved through the Course and Company registries when a
student record is built. Nothing references a student, so deletes are
never refused for referential reasons.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .base import EntityRegistry, require_text
from .company_registry import CompanyRegistry
from .course_registry import CourseRegistry
from .models import Company, Course, Student
from ..db.connection import DBPool
from ..errors import InvalidReferenceError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

SKILL_MIN = 0
SKILL_MAX = 100


def check_skill_level(value: Any) -> int:
    """
    Reject skill levels that are not integers in [SKILL_MIN, SKILL_MAX].
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"skill_level must be an integer, got {value!r}")
    if not SKILL_MIN <= value <= SKILL_MAX:
        raise ValidationError(
            f"skill_level must be between {SKILL_MIN} and {SKILL_MAX}, got {value}"
        )
    return value


class StudentRegistry(EntityRegistry[Student]):
    """
    Snapshot of the ``student`` table.

    Schema (canonical):
        student(
            id         INTEGER PRIMARY KEY,
            name       VARCHAR(50) NOT NULL,
            surname    VARCHAR(50) NOT NULL,
            javaskills INTEGER NOT NULL,
            course_id  INTEGER NOT NULL REFERENCES course(id),
            company_id INTEGER NOT NULL REFERENCES company(id)
        )
    """

    table = "student"
    dependents = None
    search_columns = ("name", "surname")

    def __init__(
        self,
        pool: DBPool,
        courses: CourseRegistry,
        companies: CompanyRegistry,
    ):
        super().__init__(pool)
        self.course_registry = courses
        self.company_registry = companies
        courses.on_change(self.relink)
        companies.on_change(self.relink)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def add(
        self,
        name: str,
        surname: str,
        skill_level: int,
        course_id: int,
        company_id: int,
    ) -> Student:
        """
        Insert a student and append it to the snapshot.

        Both references are checked before the store is touched.
        """
        require_text(name, "name")
        require_text(surname, "surname")
        check_skill_level(skill_level)
        course = self._resolve_course(course_id)
        company = self._resolve_company(company_id)

        with self._lock:
            new_id = self._insert(
                """
                INSERT INTO student (name, surname, javaskills, course_id, company_id)
                VALUES (?, ?, ?, ?, ?)
                RETURNING id
                """,
                (name, surname, skill_level, course.id, company.id),
            )
            student = Student(
                id=new_id,
                name=name,
                surname=surname,
                skill_level=skill_level,
                course=course,
                company=company,
            )
            self._items.append(student)

        logger.debug("Added student %s (%s)", new_id, student.full_name)
        return student

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_many(self, students: Iterable[Optional[Student]]) -> None:
        """
        Delete several students as one batch.

        The batch is atomic: if the store rejects any row, the whole
        transaction is rolled back, PersistenceError is raised and the
        snapshot keeps every student. Students not in the snapshot are
        ignored.
        """
        with self._lock:
            ids: List[int] = []
            for student in students:
                if student is None or student.id in ids:
                    continue
                if self._index_of(student.id) is not None:
                    ids.append(student.id)
            if not ids:
                return

            try:
                with self.pool.connection() as conn:
                    cur = conn.executemany(
                        "DELETE FROM student WHERE id = ?",
                        [(student_id,) for student_id in ids],
                    )
                    conn.commit()
            except PersistenceError as e:
                logger.error("Batch delete of students %s failed: %s", ids, e)
                raise

            if 0 <= cur.rowcount < len(ids):
                logger.warning(
                    "Batch delete removed %d of %d students; the rest were already gone",
                    cur.rowcount, len(ids),
                )

            removed = set(ids)
            self._items = [s for s in self._items if s.id not in removed]

        logger.debug("Removed students %s", ids)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, student: Student) -> Student:
        """
        Persist every field of ``student``.

        Callers usually edit the cached instance and pass it back; a
        different instance with the same id replaces the cached one.
        """
        require_text(student.name, "name")
        require_text(student.surname, "surname")
        check_skill_level(student.skill_level)
        course = self._resolve_course(
            student.course.id if student.course is not None else None
        )
        company = self._resolve_company(
            student.company.id if student.company is not None else None
        )

        with self._lock:
            self._update(
                """
                UPDATE student
                SET name = ?, surname = ?, javaskills = ?, course_id = ?, company_id = ?
                WHERE id = ?
                """,
                (
                    student.name,
                    student.surname,
                    student.skill_level,
                    course.id,
                    company.id,
                    student.id,
                ),
                student.id,
            )
            # point at the currently cached course/company records
            student.course = course
            student.company = company
            cached = self._replace_cached(student)

        if not cached:
            self.load_all()
        return student

    def relink(self) -> None:
        """
        Point every cached student at the course and company records
        currently held by the Course and Company registries.

        Runs after those registries reload or replace a record. Students
        whose course or company has left the cache keep the old record.
        """
        courses = {course.id: course for course in self.course_registry.items}
        companies = {company.id: company for company in self.company_registry.items}
        with self._lock:
            for student in self._items:
                if student.course is not None:
                    course = courses.get(student.course.id)
                    if course is None:
                        logger.warning(
                            "Student %s references course %s, which is no longer cached",
                            student.id, student.course.id,
                        )
                    else:
                        student.course = course
                if student.company is not None:
                    company = companies.get(student.company.id)
                    if company is None:
                        logger.warning(
                            "Student %s references company %s, which is no longer cached",
                            student.id, student.company.id,
                        )
                    else:
                        student.company = company

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_course(self, course_id: Any) -> Course:
        course = self.course_registry.find_by_id(course_id) if course_id is not None else None
        if course is None:
            raise InvalidReferenceError("course", course_id)
        return course

    def _resolve_company(self, company_id: Any) -> Company:
        company = self.company_registry.find_by_id(company_id) if company_id is not None else None
        if company is None:
            raise InvalidReferenceError("company", company_id)
        return company

    def _row_to_rec(self, row: Dict[str, Any]) -> Optional[Student]:
        course = self.course_registry.find_by_id(row["course_id"])
        company = self.company_registry.find_by_id(row["company_id"])
        if course is None or company is None:
            return None
        return Student(
            id=row["id"],
            name=row["name"],
            surname=row["surname"],
            skill_level=row["javaskills"],
            course=course,
            company=company,
        )
