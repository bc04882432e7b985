"""
DB-backed Company Registry.
"""

from __future__ import annotations

from .base import LeafRegistry
from .models import Company


class CompanyRegistry(LeafRegistry[Company]):
    """
    Snapshot of the ``company`` table.

    Students reference companies through student.company_id, so a company
    with placed students cannot be removed.
    """

    table = "company"
    dependents = "students"
    record_type = Company
