from __future__ import annotations

import pytest

from visamatch.core import (
    DuplicateRuleIdError,
    RuleRegistry,
    VisaCatalog,
    build_default_registry,
    load_catalog,
)
from visamatch.core.rules import (
    AllowedVisaCodesRule,
    NonWorkingVisaRule,
    SpecialPermitRule,
    WeeklyHoursCapRule,
)
from visamatch.schemas import BoardType, VisaCategory


def build_catalog(*codes: str) -> VisaCatalog:
    return VisaCatalog(VisaCategory(code=code) for code in codes)


def test_register_rejects_duplicate_rule_id():
    registry = RuleRegistry(build_catalog("F-4"))
    registry.register(AllowedVisaCodesRule())

    with pytest.raises(DuplicateRuleIdError) as exc:
        registry.register(AllowedVisaCodesRule(empty_policy="none"))
    assert exc.value.rule_id == "universal.allowed_visa_codes"


def test_version_bumps_on_each_registration():
    registry = RuleRegistry(build_catalog("F-4"))
    assert registry.version == 0

    registry.register(AllowedVisaCodesRule())
    registry.register(SpecialPermitRule())

    assert registry.version == 2


def test_rules_for_keeps_registration_order_and_filters():
    registry = RuleRegistry(
        build_catalog("D-2", "F-4", "C-3"),
        [
            SpecialPermitRule(),
            AllowedVisaCodesRule(),
            WeeklyHoursCapRule(["D-2"]),
            NonWorkingVisaRule(["C-3"]),
        ],
    )

    part_time = registry.rules_for("D-2", BoardType.PART_TIME, "SPECIAL_PERMIT_REQUIRED")
    full_time = registry.rules_for("D-2", BoardType.FULL_TIME, None)
    short_visit = registry.rules_for("C-3", BoardType.FULL_TIME, None)

    assert [rule.rule_id for rule in part_time] == [
        "job_category.special_permit",
        "universal.allowed_visa_codes",
        "visa_class.weekly_hours_cap",
    ]
    assert [rule.rule_id for rule in full_time] == ["universal.allowed_visa_codes"]
    assert [rule.rule_id for rule in short_visit] == [
        "universal.allowed_visa_codes",
        "universal.non_working_visa",
    ]


def test_known_visa_codes_follow_catalog_order():
    registry = RuleRegistry(build_catalog("F-5", "E-9", "D-2"))

    assert registry.known_visa_codes() == ("F-5", "E-9", "D-2")
    assert registry.is_known("e-9")
    assert not registry.is_known("X-0")


def test_catalog_rejects_duplicate_codes():
    with pytest.raises(ValueError):
        build_catalog("F-4", "f-4")


def test_packaged_catalog_loads():
    catalog = load_catalog()

    assert catalog.codes()[:3] == ("F-5", "F-6", "F-2")
    assert set(catalog.codes_in_class("non_working")) == {"C-3", "B-1", "B-2"}
    assert catalog.get("e-9").name_en == "Non-professional Employment"
    assert catalog.suggest("E9") == "E-9"


def test_catalog_loads_custom_yaml(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "visas:\n  - code: F-5\n    classes: [unrestricted]\n  - code: Z-1\n",
        encoding="utf-8",
    )

    catalog = load_catalog(path)

    assert catalog.codes() == ("F-5", "Z-1")


def test_default_registry_rule_set():
    registry = build_default_registry(load_catalog())

    assert registry.rule_ids() == [
        "universal.allowed_visa_codes",
        "universal.non_working_visa",
        "visa_class.weekly_hours_cap",
        "visa_class.student_weekday_shift",
        "visa_class.work_permit",
        "visa_class.employer_sponsorship",
        "visa_class.permitted_industry",
        "job_category.special_permit",
        "job_category.simple_labor_exception",
        "job_category.restricted_venue",
        "job_category.depopulation_area",
    ]


def test_default_registry_disabling_rules():
    registry = build_default_registry(
        load_catalog(),
        disabled_rules=["job_category.depopulation_area"],
    )

    assert "job_category.depopulation_area" not in registry.rule_ids()
    with pytest.raises(ValueError):
        build_default_registry(load_catalog(), disabled_rules=["no.such_rule"])
