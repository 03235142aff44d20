"""Rules selected by the worker's visa class."""

from __future__ import annotations

from typing import Iterable

from ...schemas import ATTRIBUTE_LABELS, BoardType, JobConstraints, VisaProfile
from .base import RuleOutcome, RuleScope, ScopedRule


def _format_hours(value: float) -> str:
    return f"{value:g}"


class WeeklyHoursCapRule(ScopedRule):
    """Enforce a visa's weekly hour cap on part-time postings.

    The cap is checked for any profile that states one. Hour-capped visa
    classes must state it; for them an absent cap resolves to CONDITIONAL.
    """

    rule_id = "visa_class.weekly_hours_cap"
    layer = "visa_class"

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.capped_codes = frozenset(visa_codes)
        self.scope = RuleScope.build(board_types=[BoardType.PART_TIME])

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        attributes = visa.attributes
        provided = attributes.provided()
        if "max_weekly_hours" not in provided:
            if visa.visa_code in self.capped_codes:
                label = ATTRIBUTE_LABELS["max_weekly_hours"]
                return RuleOutcome.conditional(f"confirm {label} for {visa.visa_code}")
            return RuleOutcome.passed()

        notes: list[str] = []
        if "max_workplaces" in provided and attributes.max_workplaces is not None:
            notes.append(
                f"{visa.visa_code} allows at most {attributes.max_workplaces} concurrent workplaces"
            )

        cap = attributes.max_weekly_hours
        if cap is None:
            return RuleOutcome.passed(notes=notes)
        if job.weekly_hours is None:
            return RuleOutcome.conditional(
                f"confirm weekly hours do not exceed {cap}",
                notes=notes,
            )
        if job.weekly_hours > cap:
            return RuleOutcome.block(
                f"{_format_hours(job.weekly_hours)} weekly hours exceed the "
                f"{cap}-hour cap for {visa.visa_code}",
                notes=notes,
            )
        return RuleOutcome.passed(notes=notes)


class StudentWeekdayShiftRule(ScopedRule):
    """Students may work weekdays only with sufficient Korean proficiency."""

    rule_id = "visa_class.student_weekday_shift"
    layer = "visa_class"
    required_attributes = ("topik_level",)

    def __init__(self, visa_codes: Iterable[str], *, min_topik_level: int = 3) -> None:
        self.min_topik_level = min_topik_level
        self.scope = RuleScope.build(
            visa_codes=visa_codes,
            board_types=[BoardType.PART_TIME],
        )

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        if job.has_weekday_shift is False:
            return RuleOutcome.passed()
        level = visa.attributes.topik_level or 0
        if level >= self.min_topik_level:
            return RuleOutcome.passed()
        if job.has_weekday_shift is None:
            return RuleOutcome.conditional(
                f"weekend shifts only unless TOPIK level {self.min_topik_level} or higher"
            )
        return RuleOutcome.block(
            f"weekday shifts require TOPIK level {self.min_topik_level} or higher"
        )


class WorkPermitRule(ScopedRule):
    """Visas that need a separate permit before work starts."""

    rule_id = "visa_class.work_permit"
    layer = "visa_class"
    required_attributes = ("required_permit",)

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        permit = visa.attributes.required_permit
        if not permit:
            return RuleOutcome.passed()
        return RuleOutcome.conditional(
            f"{permit} required before starting work",
            documents=[permit],
        )


class SponsorshipRule(ScopedRule):
    """Sponsored visas need an employer that files the sponsorship."""

    rule_id = "visa_class.employer_sponsorship"
    layer = "visa_class"
    required_attributes = ("requires_sponsorship",)

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        if not visa.attributes.requires_sponsorship:
            return RuleOutcome.passed()
        if job.requires_sponsorship is True:
            return RuleOutcome.passed()
        if job.requires_sponsorship is False:
            return RuleOutcome.block("employer does not sponsor work visas")
        return RuleOutcome.passed(
            notes=[f"confirm the employer will sponsor the {visa.visa_code} work visa"]
        )


class PermittedIndustryRule(ScopedRule):
    """Industry-restricted visas may only work in listed industries."""

    rule_id = "visa_class.permitted_industry"
    layer = "visa_class"
    required_attributes = ("permitted_industries",)

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        permitted = visa.attributes.permitted_industries
        if permitted is None:
            return RuleOutcome.passed()
        if job.industry_category is None:
            return RuleOutcome.passed(
                notes=[f"confirm the industry category is open to {visa.visa_code}"]
            )
        if job.industry_category in permitted:
            return RuleOutcome.passed()
        return RuleOutcome.block(
            f"{visa.visa_code} is not permitted in the {job.industry_category} industry"
        )
