from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from visamatch.core import (
    EligibilityEvaluator,
    MalformedJobConstraintsError,
    RuleRegistry,
    UnknownVisaCodeError,
    VerdictCache,
    VisaCatalog,
    build_default_registry,
    load_catalog,
)
from visamatch.core.rules import (
    AllowedVisaCodesRule,
    RuleOutcome,
    RuleScope,
    ScopedRule,
    WeeklyHoursCapRule,
)
from visamatch.schemas import BoardType, JobConstraints, VisaAttributes, VisaCategory, VisaProfile


@dataclass(eq=False)
class StubRule(ScopedRule):
    rule_id: str
    outcome: RuleOutcome
    required_attributes: tuple[str, ...] = ()
    layer: str = "universal"
    scope: RuleScope = field(default_factory=RuleScope)
    calls: int = 0

    def evaluate(self, visa, job):
        self.calls += 1
        return self.outcome


def fixture_catalog() -> VisaCatalog:
    return VisaCatalog(
        [
            VisaCategory(code="E-9", attributes={"maxWeeklyHours": 25}),
            VisaCategory(code="H-2"),
        ]
    )


def stub_evaluator(*rules) -> EligibilityEvaluator:
    return EligibilityEvaluator(RuleRegistry(fixture_catalog(), rules))


def default_evaluator(**kwargs) -> EligibilityEvaluator:
    return EligibilityEvaluator(build_default_registry(load_catalog()), **kwargs)


def test_part_time_job_within_hour_cap_is_eligible():
    registry = RuleRegistry(
        fixture_catalog(),
        [AllowedVisaCodesRule(), WeeklyHoursCapRule(["E-9"])],
    )
    evaluator = EligibilityEvaluator(registry)
    visa = VisaProfile(visa_code="E-9", attributes=VisaAttributes(max_weekly_hours=25))
    job = JobConstraints(
        allowed_visa_codes=["E-9", "H-2"],
        board_type=BoardType.PART_TIME,
        weekly_hours=20,
    )

    result = evaluator.evaluate(visa, job)

    assert result.eligible is True
    assert result.restrictions == []
    assert result.status == "eligible"
    assert result.applied_rules == ["universal.allowed_visa_codes", "visa_class.weekly_hours_cap"]


def test_hour_capped_profile_on_default_rules_is_eligible():
    visa = VisaProfile.from_catalog("E-9", load_catalog(), max_weekly_hours=25)
    job = JobConstraints(
        allowed_visa_codes=["E-9", "H-2"],
        board_type=BoardType.PART_TIME,
        weekly_hours=20,
    )

    result = default_evaluator().evaluate(visa, job)

    assert result.eligible is True
    assert result.restrictions == []
    assert "visa_class.weekly_hours_cap" in result.applied_rules


def test_stated_cap_blocks_longer_part_time_hours():
    visa = VisaProfile.from_catalog("E-9", load_catalog(), max_weekly_hours=25)
    job = JobConstraints(
        allowed_visa_codes=["E-9"],
        board_type=BoardType.PART_TIME,
        weekly_hours=30,
    )

    result = default_evaluator().evaluate(visa, job)

    assert result.eligible is False
    assert result.block_reasons == ["30 weekly hours exceed the 25-hour cap for E-9"]


def test_blocked_verdict_keeps_conditional_documents():
    visa = VisaProfile.from_catalog("D-2", load_catalog(), topik_level=4)
    job = JobConstraints(
        board_type=BoardType.PART_TIME,
        weekly_hours=40,
        has_weekday_shift=False,
    )

    result = default_evaluator().evaluate(visa, job)

    assert result.eligible is False
    assert result.restrictions == []
    assert result.documents_required == ["part-time work permit"]
    assert result.block_reasons == ["40 weekly hours exceed the 30-hour cap for D-2"]


def test_visa_not_listed_is_blocked_without_restrictions():
    result = default_evaluator().evaluate(
        VisaProfile.synthesize("D-2"),
        JobConstraints(allowed_visa_codes=["E-9"]),
    )

    assert result.eligible is False
    assert result.restrictions == []
    assert result.documents_required == []
    assert result.block_reasons == ["D-2 is not among the visas accepted by this posting"]
    assert result.status == "blocked"


def test_special_permit_industry_is_conditional():
    result = default_evaluator().evaluate(
        VisaProfile.synthesize("F-4"),
        JobConstraints(industry_category="SPECIAL_PERMIT_REQUIRED"),
    )

    assert result.eligible is True
    assert result.restrictions == ["permit required"]
    assert result.documents_required == ["employer permit"]
    assert result.status == "conditional"


def test_unknown_visa_code_raises_with_suggestion():
    evaluator = default_evaluator()

    with pytest.raises(UnknownVisaCodeError) as excinfo:
        evaluator.evaluate(VisaProfile.synthesize("X-0"), JobConstraints())
    assert excinfo.value.visa_code == "X-0"

    with pytest.raises(UnknownVisaCodeError) as excinfo:
        evaluator.evaluate(VisaProfile.synthesize("E9"), JobConstraints())
    assert excinfo.value.suggestion == "E-9"


def test_evaluation_is_deterministic():
    evaluator = default_evaluator()
    visa = VisaProfile.from_catalog("D-2", load_catalog(), topik_level=2)
    job = JobConstraints(
        board_type=BoardType.PART_TIME,
        weekly_hours=28,
        has_weekday_shift=True,
        industry_category="FOOD_SERVICE",
    )

    first = evaluator.evaluate(visa, job)
    second = evaluator.evaluate(visa, job)

    assert first == second
    assert first.to_payload() == second.to_payload()


def test_block_suppresses_restrictions_but_keeps_documents_and_notes():
    blocker = StubRule("stub.block", RuleOutcome.block("blocked", notes=["note from blocker"]))
    conditional = StubRule(
        "stub.conditional",
        RuleOutcome.conditional("restricted", documents=["doc"], notes=["note from conditional"]),
    )
    evaluator = stub_evaluator(blocker, conditional)

    result = evaluator.evaluate(VisaProfile.synthesize("E-9"), JobConstraints())

    assert result.eligible is False
    assert result.restrictions == []
    assert result.documents_required == ["doc"]
    assert result.block_reasons == ["blocked"]
    assert result.notes == ["note from blocker", "note from conditional"]
    assert conditional.calls == 1


def test_restrictions_and_documents_are_ordered_and_unique():
    rules = [
        StubRule("stub.a", RuleOutcome.conditional("first", documents=["passport", "permit"])),
        StubRule("stub.b", RuleOutcome.conditional("second", documents=["permit", "contract"])),
        StubRule("stub.c", RuleOutcome.conditional("first")),
        StubRule("stub.d", RuleOutcome.passed(notes=["fyi", "fyi"])),
    ]

    result = stub_evaluator(*rules).evaluate(VisaProfile.synthesize("E-9"), JobConstraints())

    assert result.restrictions == ["first", "second"]
    assert result.documents_required == ["passport", "permit", "contract"]
    assert result.notes == ["fyi"]


def test_missing_attribute_resolves_to_conditional_without_calling_rule():
    rule = StubRule(
        "stub.needs_hours",
        RuleOutcome.block("should not be reached"),
        required_attributes=("max_weekly_hours",),
    )

    result = stub_evaluator(rule).evaluate(VisaProfile.synthesize("E-9"), JobConstraints())

    assert rule.calls == 0
    assert result.eligible is True
    assert result.restrictions == ["confirm maximum weekly work hours for E-9"]


def test_explicit_none_attribute_counts_as_provided():
    rule = StubRule(
        "stub.needs_hours",
        RuleOutcome.passed(),
        required_attributes=("max_weekly_hours",),
    )
    visa = VisaProfile(visa_code="E-9", attributes=VisaAttributes(max_weekly_hours=None))

    result = stub_evaluator(rule).evaluate(visa, JobConstraints())

    assert rule.calls == 1
    assert result.status == "eligible"


def test_scope_limits_which_rules_run():
    part_time_only = StubRule(
        "stub.part_time",
        RuleOutcome.block("part time only"),
        scope=RuleScope.build(board_types=[BoardType.PART_TIME]),
    )
    evaluator = stub_evaluator(part_time_only)

    full_time = evaluator.evaluate(VisaProfile.synthesize("E-9"), JobConstraints())
    part_time = evaluator.evaluate(
        VisaProfile.synthesize("E-9"), JobConstraints(board_type=BoardType.PART_TIME)
    )

    assert full_time.eligible is True
    assert full_time.applied_rules == []
    assert part_time.eligible is False


def test_mapping_inputs_are_validated():
    evaluator = default_evaluator()

    result = evaluator.evaluate(
        {"visaCode": "f-4"},
        {"jobId": "J-7", "allowedVisaCodes": "F-4,F-5", "boardType": "PART_TIME"},
    )

    assert result.visa_code == "F-4"
    assert result.eligible is True


@pytest.mark.parametrize(
    "job",
    [
        {"jobId": "J-9", "allowedVisaCodes": "E-9,??"},
        {"jobId": "J-9", "weeklyHours": -3},
        {"jobId": "J-9", "boardType": "CONTRACT"},
        ["E-9"],
    ],
)
def test_malformed_job_raises(job):
    with pytest.raises(MalformedJobConstraintsError) as excinfo:
        default_evaluator().evaluate(VisaProfile.synthesize("E-9"), job)

    assert excinfo.value.errors


def test_cache_reuses_verdicts_until_ruleset_changes():
    cache = VerdictCache(max_size=8)
    registry = RuleRegistry(fixture_catalog(), [AllowedVisaCodesRule()])
    evaluator = EligibilityEvaluator(registry, cache=cache)
    visa = VisaProfile.synthesize("E-9")
    job = JobConstraints(job_id="J-1", allowed_visa_codes=["E-9"])

    first = evaluator.evaluate(visa, job)
    second = evaluator.evaluate(visa, job.model_copy(update={"job_id": "J-2"}))

    assert first is second
    assert cache.hits == 1

    registry.register(StubRule("stub.late", RuleOutcome.block("late rule")))
    third = evaluator.evaluate(visa, job)

    assert third.eligible is False
    assert len(cache) == 1
