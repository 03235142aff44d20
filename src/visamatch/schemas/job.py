"""Job-side constraint schema consumed by the eligibility engine."""

from __future__ import annotations

import hashlib
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .visa import normalize_visa_code

VISA_CODE_PATTERN = re.compile(r"^[A-Z]{1,2}-\d{1,2}(-\d{1,2})?$")


class BoardType(str, Enum):
    """Job board a posting belongs to."""

    PART_TIME = "PART_TIME"
    FULL_TIME = "FULL_TIME"


class IndustryCategory:
    """Industry category values the default rule set keys on."""

    SPECIAL_PERMIT_REQUIRED = "SPECIAL_PERMIT_REQUIRED"
    SIMPLE_LABOR = "SIMPLE_LABOR"
    ENTERTAINMENT = "ENTERTAINMENT"
    MANUFACTURING = "MANUFACTURING"
    CONSTRUCTION = "CONSTRUCTION"
    AGRICULTURE = "AGRICULTURE"
    FISHERY = "FISHERY"
    FOOD_SERVICE = "FOOD_SERVICE"
    HOSPITALITY = "HOSPITALITY"
    RETAIL = "RETAIL"
    OFFICE = "OFFICE"
    IT = "IT"


class JobConstraints(BaseModel):
    """Employment-side facts a posting exposes to the engine."""

    job_id: str | None = None
    allowed_visa_codes: list[str] = Field(default_factory=list)
    board_type: BoardType = BoardType.FULL_TIME
    weekly_hours: float | None = Field(default=None, ge=0, le=168)
    industry_category: str | None = None
    requires_sponsorship: bool | None = None
    has_weekday_shift: bool | None = None
    is_depopulation_area: bool = False

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("allowed_visa_codes", mode="before")
    @classmethod
    def _parse_allowed_codes(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items: list[Any] = value.split(",")
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            raise ValueError("allowedVisaCodes must be a list or a comma-separated string")

        codes: list[str] = []
        for item in items:
            if not isinstance(item, str):
                raise ValueError(f"visa code must be a string, got {type(item).__name__}")
            code = normalize_visa_code(item)
            if not code:
                continue
            if not VISA_CODE_PATTERN.match(code):
                raise ValueError(f"unparseable visa code: {item!r}")
            if code not in codes:
                codes.append(code)
        return codes

    @field_validator("industry_category", mode="before")
    @classmethod
    def _normalize_industry(cls, value: Any) -> Any:
        if isinstance(value, str):
            stripped = value.strip().upper()
            return stripped or None
        return value

    def fingerprint(self) -> str:
        """Stable hash over the constraint-relevant fields."""
        encoded = self.model_dump_json(exclude={"job_id"})
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()

    def input_summary(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"job_id"})
