"""Pydantic schema definitions shared by the engine and its callers."""

from __future__ import annotations

from .job import BoardType, IndustryCategory, JobConstraints
from .result import (
    EligibilityResult,
    ItemError,
    MatchStatus,
    MatchSummary,
    VisaMatchingReport,
)
from .visa import ATTRIBUTE_LABELS, VisaAttributes, VisaCategory, VisaProfile

__all__ = [
    "ATTRIBUTE_LABELS",
    "BoardType",
    "EligibilityResult",
    "IndustryCategory",
    "ItemError",
    "JobConstraints",
    "MatchStatus",
    "MatchSummary",
    "VisaAttributes",
    "VisaCategory",
    "VisaMatchingReport",
    "VisaProfile",
]
