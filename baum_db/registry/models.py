from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ----------------------------------------------------------------------
# Room
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Room:
    id: int
    name: str

    def __str__(self) -> str:
        return self.name


# ----------------------------------------------------------------------
# Company
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Company:
    id: int
    name: str

    def __str__(self) -> str:
        return self.name


# ----------------------------------------------------------------------
# Course
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Course:
    id: int
    name: str
    room: Room

    @property
    def room_name(self) -> str:
        return self.room.name if self.room is not None else ""

    def __str__(self) -> str:
        return self.name


# ----------------------------------------------------------------------
# Student
# ----------------------------------------------------------------------

@dataclass
class Student:
    """
    Mutable: edit forms change the cached instance, then hand it to
    StudentRegistry.update() to persist.
    """

    id: int
    name: str
    surname: str
    skill_level: int
    course: Optional[Course]
    company: Optional[Company]

    @property
    def course_name(self) -> str:
        return self.course.name if self.course is not None else ""

    @property
    def company_name(self) -> str:
        return self.company.name if self.company is not None else ""

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"
