"""Public domain model surface."""

from __future__ import annotations

from crmenrich.domain.model.crm import Company, Contact, normalize_company_name
from crmenrich.domain.model.entity import Entity, new_id
from crmenrich.domain.model.profile import CandidateMatch, EpsProfile

__all__ = [
    "CandidateMatch",
    "Company",
    "Contact",
    "Entity",
    "EpsProfile",
    "new_id",
    "normalize_company_name",
]
