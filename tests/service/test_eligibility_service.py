from __future__ import annotations

import pytest

from visamatch.core import (
    BatchMatcher,
    EligibilityEvaluator,
    PostingNotFoundError,
    UnknownVisaCodeError,
    build_default_registry,
    load_catalog,
)
from visamatch.schemas import BoardType, JobConstraints
from visamatch.service import (
    CatalogVerificationSource,
    EligibilityService,
    InMemoryPostingRepository,
    JobFilters,
    PostingRepository,
    VisaVerificationSource,
)


def build_service(postings, overrides=None) -> EligibilityService:
    catalog = load_catalog()
    matcher = BatchMatcher(EligibilityEvaluator(build_default_registry(catalog)))
    return EligibilityService(
        matcher=matcher,
        postings=InMemoryPostingRepository(postings),
        verifications=CatalogVerificationSource(catalog, overrides),
    )


def postings() -> list[JobConstraints]:
    return [
        JobConstraints(
            job_id="J-1",
            board_type=BoardType.PART_TIME,
            allowed_visa_codes=["D-2", "F-4"],
            weekly_hours=20,
            industry_category="FOOD_SERVICE",
            has_weekday_shift=False,
        ),
        JobConstraints(
            job_id="J-2",
            board_type=BoardType.PART_TIME,
            allowed_visa_codes=["D-2"],
            weekly_hours=35,
            industry_category="RETAIL",
        ),
        JobConstraints(job_id="J-3", allowed_visa_codes=["F-4"], industry_category="OFFICE"),
        JobConstraints(job_id="J-4", board_type=BoardType.PART_TIME, industry_category="RETAIL"),
    ]


def test_collaborators_satisfy_protocols():
    catalog = load_catalog()

    assert isinstance(InMemoryPostingRepository(), PostingRepository)
    assert isinstance(CatalogVerificationSource(catalog), VisaVerificationSource)


def test_evaluate_uses_verified_profile():
    service = build_service(postings(), overrides={"D-2": {"topik_level": 4}})

    result = service.evaluate("d-2", "J-1")

    assert result.eligible is True
    assert result.restrictions == ["part-time work permit required before starting work"]
    assert result.documents_required == ["part-time work permit"]
    assert result.notes == ["D-2 allows at most 2 concurrent workplaces"]


def test_evaluate_unknown_inputs():
    service = build_service(postings())

    with pytest.raises(PostingNotFoundError):
        service.evaluate("F-4", "J-404")
    with pytest.raises(UnknownVisaCodeError):
        service.evaluate("X-0", "J-1")


def test_list_eligible_jobs_filters_and_pages():
    service = build_service(postings(), overrides={"D-2": {"topik_level": 4}})

    page = service.list_eligible_jobs("D-2", JobFilters(include_blocked=False), page=1, page_size=1)

    assert [entry.subject_id for entry in page.items] == ["J-1"]
    assert page.total == 2
    assert page.has_next is True
    assert page.summary.total_blocked == 2
    assert page.summary.total_conditional == 2

    second = service.list_eligible_jobs("D-2", JobFilters(include_blocked=False), page=2, page_size=1)
    assert [entry.subject_id for entry in second.items] == ["J-4"]
    assert second.has_next is False


def test_list_eligible_jobs_by_board_and_industry():
    service = build_service(postings())

    page = service.list_eligible_jobs(
        "F-4",
        JobFilters(board_type=BoardType.PART_TIME, industry_category="retail"),
    )

    assert [entry.subject_id for entry in page.items] == ["J-2", "J-4"]
    assert [entry.status for entry in page.items] == ["blocked", "eligible"]


def test_list_eligible_jobs_rejects_bad_page():
    with pytest.raises(ValueError):
        build_service(postings()).list_eligible_jobs("F-4", page=0)


def test_list_matching_visas_report():
    service = build_service(postings())

    report = service.list_matching_visas("J-3", ["F-4", "D-2", "Q-9"])

    assert [result.visa_code for result in report.eligible] == ["F-4"]
    assert [result.visa_code for result in report.blocked] == ["D-2"]
    assert [error.subject for error in report.errors] == ["Q-9"]
    assert report.summary.total_errors == 1
    assert report.job_id == "J-3"


def test_repository_requires_job_id():
    with pytest.raises(ValueError):
        InMemoryPostingRepository([JobConstraints()])
