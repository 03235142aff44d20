"""Rules selected by the posting's industry category."""

from __future__ import annotations

from typing import Iterable

from ...schemas import IndustryCategory, JobConstraints, VisaProfile
from .base import RuleOutcome, RuleScope, ScopedRule


class SpecialPermitRule(ScopedRule):
    """Industries that need an employer permit regardless of visa."""

    rule_id = "job_category.special_permit"
    layer = "job_category"

    def __init__(
        self,
        categories: Iterable[str] = (IndustryCategory.SPECIAL_PERMIT_REQUIRED,),
        *,
        reason: str = "permit required",
        documents: Iterable[str] = ("employer permit",),
    ) -> None:
        self.reason = reason
        self.documents = tuple(documents)
        self.scope = RuleScope.build(industry_categories=categories)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        return RuleOutcome.conditional(self.reason, documents=self.documents)


class SimpleLaborExceptionRule(ScopedRule):
    """Simple labor needs an exception-occupation check for some visas."""

    rule_id = "job_category.simple_labor_exception"
    layer = "job_category"

    def __init__(
        self,
        visa_codes: Iterable[str],
        categories: Iterable[str] = (IndustryCategory.SIMPLE_LABOR,),
    ) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes, industry_categories=categories)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        return RuleOutcome.conditional(
            f"simple labor: confirm the occupation is an exception allowed for {visa.visa_code}"
        )


class RestrictedVenueRule(ScopedRule):
    """Adult entertainment venues are closed to all but resident visas."""

    rule_id = "job_category.restricted_venue"
    layer = "job_category"

    def __init__(
        self,
        exempt_visa_codes: Iterable[str],
        categories: Iterable[str] = (IndustryCategory.ENTERTAINMENT,),
    ) -> None:
        self.scope = RuleScope.build(
            industry_categories=categories,
            excluded_visa_codes=exempt_visa_codes,
        )

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        return RuleOutcome.block(
            f"{visa.visa_code} may not be employed in {job.industry_category} venues"
        )


class DepopulationAreaRule(ScopedRule):
    """Advisory note for postings located in depopulation areas."""

    rule_id = "job_category.depopulation_area"
    layer = "job_category"

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        if not job.is_depopulation_area:
            return RuleOutcome.passed()
        return RuleOutcome.passed(
            notes=[f"depopulation area: regional employment exemptions may apply to {visa.visa_code}"]
        )
