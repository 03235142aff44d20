"""Eligibility rule implementations."""

from __future__ import annotations

from typing import Iterable

from ..catalog import VisaCatalog
from .base import EligibilityRule, OutcomeKind, RuleLayer, RuleOutcome, RuleScope, ScopedRule
from .job_category import (
    DepopulationAreaRule,
    RestrictedVenueRule,
    SimpleLaborExceptionRule,
    SpecialPermitRule,
)
from .universal import AllowedVisaCodesRule, EmptyAllowedPolicy, NonWorkingVisaRule
from .visa_class import (
    PermittedIndustryRule,
    SponsorshipRule,
    StudentWeekdayShiftRule,
    WeeklyHoursCapRule,
    WorkPermitRule,
)


def default_rules(
    catalog: VisaCatalog,
    *,
    empty_allowed_codes: EmptyAllowedPolicy = "unrestricted",
    special_permit_categories: Iterable[str] | None = None,
) -> list[EligibilityRule]:
    """Build the standard rule set, wiring visa classes from the catalog."""

    special_permit = (
        SpecialPermitRule(special_permit_categories)
        if special_permit_categories is not None
        else SpecialPermitRule()
    )
    return [
        AllowedVisaCodesRule(empty_policy=empty_allowed_codes),
        NonWorkingVisaRule(catalog.codes_in_class("non_working")),
        WeeklyHoursCapRule(catalog.codes_in_class("hour_capped")),
        StudentWeekdayShiftRule(catalog.codes_in_class("student")),
        WorkPermitRule(catalog.codes_in_class("permit_holder")),
        SponsorshipRule(catalog.codes_in_class("sponsored")),
        PermittedIndustryRule(catalog.codes_in_class("industry_restricted")),
        special_permit,
        SimpleLaborExceptionRule(catalog.codes_in_class("simple_labor_restricted")),
        RestrictedVenueRule(catalog.codes_in_class("unrestricted")),
        DepopulationAreaRule(catalog.codes_in_class("regional")),
    ]


__all__ = [
    "AllowedVisaCodesRule",
    "DepopulationAreaRule",
    "EligibilityRule",
    "EmptyAllowedPolicy",
    "NonWorkingVisaRule",
    "OutcomeKind",
    "PermittedIndustryRule",
    "RestrictedVenueRule",
    "RuleLayer",
    "RuleOutcome",
    "RuleScope",
    "ScopedRule",
    "SimpleLaborExceptionRule",
    "SpecialPermitRule",
    "SponsorshipRule",
    "StudentWeekdayShiftRule",
    "WeeklyHoursCapRule",
    "WorkPermitRule",
    "default_rules",
]
