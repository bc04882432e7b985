"""Tests for the Student registry and the cross-registry delete scenario."""

import pytest

from baum_db import EntityInUseError, InvalidReferenceError, PersistenceError, ValidationError
from baum_db.registry import Student


@pytest.fixture
def refs(db):
    room = db.rooms.add("Lab 1")
    return {
        "room": room,
        "course": db.courses.add("Algorithms", room.id),
        "company": db.companies.add("Acme GmbH"),
    }


def add_student(db, refs, name="Ada", surname="Lovelace", skill=80):
    return db.students.add(name, surname, skill, refs["course"].id, refs["company"].id)


# ─── ADD ──────────────────────────────────────────────────────────────────────

class TestAddStudent:
    def test_references_resolved(self, db, refs):
        student = add_student(db, refs)
        assert isinstance(student, Student)
        assert student.course == refs["course"]
        assert student.company == refs["company"]
        assert student.course_name == "Algorithms"
        assert student.company_name == "Acme GmbH"
        assert db.students.find_by_id(student.id) == student

    def test_loaded_after_reload(self, db, refs, reopen):
        student = add_student(db, refs)
        fresh = reopen()
        assert fresh.students.items == [student]

    @pytest.mark.parametrize("field", ["course", "company"])
    def test_unknown_reference(self, db, refs, row_count, field):
        ids = {"course": refs["course"].id, "company": refs["company"].id}
        ids[field] = 999
        with pytest.raises(InvalidReferenceError) as excinfo:
            db.students.add("Ada", "Lovelace", 80, ids["course"], ids["company"])
        assert excinfo.value.kind == field
        assert row_count(db, "student") == 0

    @pytest.mark.parametrize("skill", [-1, 101, True, "80", 50.5])
    def test_bad_skill_level(self, db, refs, skill):
        with pytest.raises(ValidationError):
            add_student(db, refs, skill=skill)
        assert len(db.students) == 0

    @pytest.mark.parametrize("skill", [0, 100])
    def test_skill_bounds_inclusive(self, db, refs, skill):
        assert add_student(db, refs, skill=skill).skill_level == skill

    def test_empty_surname(self, db, refs):
        with pytest.raises(ValidationError):
            add_student(db, refs, surname="")


# ─── REMOVE ───────────────────────────────────────────────────────────────────

class TestRemoveStudent:
    def test_remove(self, db, refs, row_count):
        student = add_student(db, refs)
        db.students.remove(student)
        db.students.remove(student)
        assert len(db.students) == 0
        assert row_count(db, "student") == 0

    def test_remove_many(self, db, refs, row_count):
        s1 = add_student(db, refs, "Ada", "Lovelace")
        s2 = add_student(db, refs, "Grace", "Hopper")
        s3 = add_student(db, refs, "Alan", "Turing")
        db.students.remove_many([s1, s3, s1, None])
        assert db.students.items == [s2]
        assert row_count(db, "student") == 1

    def test_remove_many_empty(self, db, refs):
        student = add_student(db, refs)
        db.students.remove_many([])
        assert db.students.items == [student]

    def test_remove_many_is_atomic(self, db, refs, row_count):
        s1 = add_student(db, refs, "Ada", "Lovelace")
        s2 = add_student(db, refs, "Grace", "Hopper")
        with db.db_pool.connection() as conn:
            conn.execute(
                f"""
                CREATE TRIGGER keep_student BEFORE DELETE ON student
                WHEN OLD.id = {s2.id}
                BEGIN
                    SELECT RAISE(ABORT, 'student is locked');
                END
                """
            )
            conn.commit()

        with pytest.raises(PersistenceError):
            db.students.remove_many([s1, s2])

        assert db.students.items == [s1, s2]
        assert row_count(db, "student") == 2


# ─── UPDATE ───────────────────────────────────────────────────────────────────

class TestUpdateStudent:
    def test_in_place_edit_is_persisted(self, db, refs, reopen):
        student = add_student(db, refs)
        student.name = "Augusta"
        student.skill_level = 95
        db.students.update(student)

        assert db.students.find_by_id(student.id) is student
        stored = reopen().students.find_by_id(student.id)
        assert stored.name == "Augusta"
        assert stored.skill_level == 95

    def test_move_to_other_course(self, db, refs, reopen):
        student = add_student(db, refs)
        other = db.courses.add("Databases", refs["room"].id)
        student.course = other
        db.students.update(student)
        assert reopen().students.find_by_id(student.id).course == other

    def test_detached_copy_replaces_cached(self, db, refs):
        student = add_student(db, refs)
        copy = Student(
            id=student.id,
            name="Ada",
            surname="King",
            skill_level=student.skill_level,
            course=student.course,
            company=student.company,
        )
        db.students.update(copy)
        assert db.students.find_by_id(student.id) is copy

    def test_missing_company_rejected(self, db, refs):
        student = add_student(db, refs)
        student.company = None
        with pytest.raises(InvalidReferenceError):
            db.students.update(student)


# ─── SEARCH ───────────────────────────────────────────────────────────────────

class TestSearchStudents:
    def test_name_or_surname(self, db, refs):
        ada = add_student(db, refs, "Ada", "Lovelace")
        grace = add_student(db, refs, "Grace", "Hopper")
        assert db.students.search("LOVE") == [ada]
        assert db.students.search("a") == [ada, grace]
        assert db.students.search("zzz") == []

    def test_filter_snapshot(self, db, refs):
        ada = add_student(db, refs, "Ada", "Lovelace")
        add_student(db, refs, "Grace", "Hopper")
        assert db.students.filter("lace") == [ada]


# ─── CROSS-REGISTRY SCENARIO ──────────────────────────────────────────────────

class TestReferentialChain:
    def test_room_of_enrolled_course_cannot_be_removed(self, db):
        room = db.rooms.add("Lab 1")
        company = db.companies.add("Acme GmbH")
        course = db.courses.add("Algorithms", room.id)
        assert course.room == room

        student = db.students.add("Ada", "Lovelace", 80, course.id, company.id)
        assert student.course == course

        with pytest.raises(EntityInUseError):
            db.rooms.remove(room)
        assert room in db.rooms
        assert course in db.courses
        assert student in db.students
