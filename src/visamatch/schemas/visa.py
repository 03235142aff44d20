"""Visa-side schemas: catalog categories and worker profiles."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:  # pragma: no cover
    from ..core.catalog import VisaCatalog


ATTRIBUTE_LABELS: dict[str, str] = {
    "max_weekly_hours": "maximum weekly work hours",
    "permitted_industries": "permitted industries",
    "requires_sponsorship": "employer sponsorship requirement",
    "required_permit": "required work permit",
    "max_workplaces": "maximum concurrent workplaces",
    "topik_level": "TOPIK level",
    "nationality": "nationality",
}


def normalize_visa_code(value: str) -> str:
    return value.strip().upper()


class VisaAttributes(BaseModel):
    """Facts about a visa that rules may key on.

    ``None`` on a provided attribute means "unrestricted". An attribute that was
    never supplied is absent, and rules needing it cannot decide on their own.
    """

    max_weekly_hours: int | None = Field(default=None, ge=0)
    permitted_industries: list[str] | None = None
    requires_sponsorship: bool = False
    required_permit: str | None = None
    max_workplaces: int | None = Field(default=None, ge=1)
    topik_level: int | None = Field(default=None, ge=0, le=6)
    nationality: str | None = None

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("permitted_industries")
    @classmethod
    def _normalize_industries(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [item.strip().upper() for item in value if item and item.strip()]

    def provided(self) -> frozenset[str]:
        """Names of attributes explicitly supplied for this profile."""
        return frozenset(self.model_fields_set)

    def missing(self, names: tuple[str, ...] | list[str]) -> list[str]:
        provided = self.provided()
        return [name for name in names if name not in provided]


class VisaCategory(BaseModel):
    """Catalog entry describing one visa category."""

    code: str
    name: str = ""
    name_en: str = ""
    classes: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        code = normalize_visa_code(value)
        if not code:
            raise ValueError("visa code must not be empty")
        return code

    @field_validator("attributes")
    @classmethod
    def _known_attributes(cls, value: dict[str, Any]) -> dict[str, Any]:
        # Reject typos early; defaults are validated again when a profile is built.
        VisaAttributes.model_validate(value)
        return value

    def default_attributes(self) -> VisaAttributes:
        """Return attributes with every field explicitly provided."""
        values = VisaAttributes.model_validate(self.attributes).model_dump()
        return VisaAttributes(**values)


class VisaProfile(BaseModel):
    """A worker's immigration status as seen by the eligibility engine."""

    visa_code: str = Field(min_length=1)
    attributes: VisaAttributes = Field(default_factory=VisaAttributes)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("visa_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return normalize_visa_code(value)

    @classmethod
    def synthesize(cls, visa_code: str) -> "VisaProfile":
        """Build an attribute-less profile carrying only the visa code."""
        return cls(visa_code=visa_code)

    @classmethod
    def from_catalog(
        cls,
        visa_code: str,
        catalog: "VisaCatalog",
        **overrides: Any,
    ) -> "VisaProfile":
        """Build a fully specified profile from catalog defaults plus overrides."""
        category = catalog.get(visa_code)
        values = category.default_attributes().model_dump()
        values.update(overrides)
        return cls(visa_code=category.code, attributes=VisaAttributes(**values))

    def fingerprint(self) -> str:
        payload = {
            "visa_code": self.visa_code,
            "attributes": self.attributes.model_dump(mode="json", exclude_unset=True),
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
