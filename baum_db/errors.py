"""
Error taxonomy for the Baum DB registries.

Every registry failure reaches the caller as one of these exceptions:

    ValidationError        – caller-supplied input is structurally invalid
    InvalidReferenceError  – a foreign id does not resolve in its registry
    EntityInUseError       – a delete was rejected because dependents exist
    PersistenceError       – the backing store failed for any other reason

The first three are meant to be shown next to the offending form control;
PersistenceError indicates the store itself is unreachable or misbehaving.
"""

from __future__ import annotations

from typing import Any, Optional


class BaumDBError(Exception):
    """Base class for all registry errors."""


class ValidationError(BaumDBError):
    """Raised when a name is empty or a field is out of range."""


class InvalidReferenceError(BaumDBError):
    """Raised when a room, course or company id does not resolve."""

    def __init__(self, kind: str, ref_id: Any, message: Optional[str] = None):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(message or f"Unknown {kind} id: {ref_id!r}")


class EntityInUseError(BaumDBError):
    """
    Raised when the store refuses a delete because other rows still
    reference the entity.

    Attributes
    ----------
    entity:
        The record whose deletion was refused.
    dependents:
        Plural name of the dependent kind, e.g. "students".
    """

    def __init__(self, entity: Any, dependents: str):
        self.entity = entity
        self.dependents = dependents
        kind = type(entity).__name__
        name = getattr(entity, "name", None)
        label = f"{kind} {name!r}" if name is not None else kind
        super().__init__(f"{label} has associated {dependents}")

    @property
    def reason(self) -> str:
        return f"has associated {self.dependents}"


class PersistenceError(BaumDBError):
    """Raised when the backing store fails (connectivity, timeout, SQL error)."""


__all__ = [
    "BaumDBError",
    "ValidationError",
    "InvalidReferenceError",
    "EntityInUseError",
    "PersistenceError",
]
