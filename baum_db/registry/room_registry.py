"""
DB-backed Room Registry.

Rooms are leaf records; courses reference them through course.room_id.
"""

from __future__ import annotations

from .base import LeafRegistry
from .models import Room


class RoomRegistry(LeafRegistry[Room]):
    """
    Snapshot of the ``room`` table.

    Schema (canonical):
        room(
            id   INTEGER PRIMARY KEY,
            name VARCHAR(50) NOT NULL
        )

    Deleting a room that still hosts a course is refused by the store and
    surfaces as EntityInUseError("has associated courses").
    """

    table = "room"
    dependents = "courses"
    record_type = Room
