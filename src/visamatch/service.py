"""Caller-facing eligibility service over posting and visa collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Mapping, Protocol, TypeVar, runtime_checkable

from .core import (
    BatchMatcher,
    MatchEntry,
    PostingNotFoundError,
    VisaCatalog,
    summarize,
)
from .schemas import BoardType, EligibilityResult, JobConstraints, MatchSummary, VisaMatchingReport, VisaProfile

_T = TypeVar("_T")


@runtime_checkable
class PostingRepository(Protocol):
    """Source of posting constraints (the listings collaborator)."""

    def get(self, job_id: str) -> JobConstraints:
        """Return constraints for ``job_id`` or raise PostingNotFoundError."""

    def all(self) -> Iterable[JobConstraints]:
        """Return every posting in listing order."""


@runtime_checkable
class VisaVerificationSource(Protocol):
    """Source of verified visa profiles (the verification collaborator)."""

    def profile_for(self, visa_code: str) -> VisaProfile:
        """Return the verified profile for a visa code."""


class InMemoryPostingRepository:
    """Posting repository backed by a dict, preserving insertion order."""

    def __init__(self, postings: Iterable[JobConstraints] = ()):
        self._postings: dict[str, JobConstraints] = {}
        for posting in postings:
            self.add(posting)

    def add(self, posting: JobConstraints) -> None:
        if not posting.job_id:
            raise ValueError("Postings stored in a repository need a job_id")
        self._postings[posting.job_id] = posting

    def get(self, job_id: str) -> JobConstraints:
        try:
            return self._postings[job_id]
        except KeyError:
            raise PostingNotFoundError(job_id) from None

    def all(self) -> list[JobConstraints]:
        return list(self._postings.values())


class CatalogVerificationSource:
    """Profiles from catalog defaults, with optional per-code overrides."""

    def __init__(
        self,
        catalog: VisaCatalog,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        self._catalog = catalog
        self._overrides = {code.upper(): dict(values) for code, values in (overrides or {}).items()}

    def profile_for(self, visa_code: str) -> VisaProfile:
        code = visa_code.strip().upper()
        return VisaProfile.from_catalog(code, self._catalog, **self._overrides.get(code, {}))


@dataclass(frozen=True, slots=True)
class JobFilters:
    """Listing filters for the "jobs I qualify for" view."""

    board_type: BoardType | None = None
    industry_category: str | None = None
    include_conditional: bool = True
    include_blocked: bool = True
    include_errors: bool = False

    def accepts_job(self, job: JobConstraints) -> bool:
        if self.board_type is not None and job.board_type != self.board_type:
            return False
        if self.industry_category is not None and job.industry_category != self.industry_category.upper():
            return False
        return True

    def accepts_entry(self, entry: MatchEntry) -> bool:
        status = entry.status
        if status == "error":
            return self.include_errors
        if status == "conditional":
            return self.include_conditional
        if status == "blocked":
            return self.include_blocked
        return True


@dataclass(frozen=True, slots=True)
class PagedList(Generic[_T]):
    items: list[_T]
    page: int
    page_size: int
    total: int
    summary: MatchSummary = field(default_factory=MatchSummary)

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total


class EligibilityService:
    """The call shapes presentation pages use."""

    def __init__(
        self,
        *,
        matcher: BatchMatcher,
        postings: PostingRepository,
        verifications: VisaVerificationSource,
    ) -> None:
        self._matcher = matcher
        self._postings = postings
        self._verifications = verifications

    def evaluate(self, visa_code: str, job_id: str) -> EligibilityResult:
        """Single-job detail page verdict."""
        profile = self._verifications.profile_for(visa_code)
        job = self._postings.get(job_id)
        return self._matcher.evaluator.evaluate(profile, job)

    def list_eligible_jobs(
        self,
        visa_code: str,
        filters: JobFilters | None = None,
        *,
        page: int = 1,
        page_size: int = 20,
    ) -> PagedList[MatchEntry]:
        """Paged "jobs I qualify for" listing.

        The summary counts every posting that passed the job filters, before
        status filtering and paging.
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")
        filters = filters or JobFilters()
        profile = self._verifications.profile_for(visa_code)
        jobs = [job for job in self._postings.all() if filters.accepts_job(job)]
        entries = self._matcher.jobs_eligible_for(profile, jobs)
        visible = [entry for entry in entries if filters.accepts_entry(entry)]
        start = (page - 1) * page_size
        return PagedList(
            items=visible[start : start + page_size],
            page=page,
            page_size=page_size,
            total=len(visible),
            summary=summarize(entries),
        )

    def list_matching_visas(
        self,
        job_id: str,
        visa_codes: Iterable[str] | None = None,
    ) -> VisaMatchingReport:
        """Employer-side compatibility widget payload."""
        job = self._postings.get(job_id)
        entries = self._matcher.visas_matching_job(job, visa_codes)
        return self._matcher.group_by_status(entries, job)
