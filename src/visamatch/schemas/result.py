"""Result schemas returned to presentation callers."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

MatchStatus = Literal["eligible", "conditional", "blocked"]

_RESULT_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class EligibilityResult(BaseModel):
    """Explainable verdict for one (visa, job) pair."""

    eligible: bool
    visa_code: str
    restrictions: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    documents_required: list[str] = Field(default_factory=list)
    block_reasons: list[str] = Field(default_factory=list)
    applied_rules: list[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> MatchStatus:
        if not self.eligible:
            return "blocked"
        if self.restrictions:
            return "conditional"
        return "eligible"

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class MatchSummary(BaseModel):
    """Badge counts over a batch of match entries."""

    total_eligible: int = 0
    total_conditional: int = 0
    total_blocked: int = 0
    total_errors: int = 0

    model_config = _RESULT_CONFIG

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_evaluated(self) -> int:
        return self.total_eligible + self.total_conditional + self.total_blocked


class ItemError(BaseModel):
    """A batch item that could not be evaluated."""

    subject: str | None
    error_type: str
    message: str

    model_config = _RESULT_CONFIG


class VisaMatchingReport(BaseModel):
    """Visas for one posting, grouped by badge state."""

    job_id: str | None = None
    eligible: list[EligibilityResult] = Field(default_factory=list)
    conditional: list[EligibilityResult] = Field(default_factory=list)
    blocked: list[EligibilityResult] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)
    summary: MatchSummary = Field(default_factory=MatchSummary)
    matched_at: str
    ruleset_version: int
    input_summary: dict[str, Any] = Field(default_factory=dict)

    model_config = _RESULT_CONFIG

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
