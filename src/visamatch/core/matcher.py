"""Bulk matching in both directions, built on the evaluator."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence, TypeVar

import pendulum
import structlog
from pydantic import ValidationError

from ..schemas import (
    EligibilityResult,
    ItemError,
    JobConstraints,
    MatchSummary,
    VisaMatchingReport,
    VisaProfile,
)
from .errors import MalformedJobConstraintsError, UnknownVisaCodeError, VisaMatchError
from .evaluator import EligibilityEvaluator

EntryStatus = Literal["eligible", "conditional", "blocked", "error"]
JobInput = JobConstraints | Mapping[str, Any]

_T = TypeVar("_T")


@dataclass(frozen=True, slots=True)
class MatchEntry:
    """One batch item: the subject plus its verdict or its error."""

    subject: Any
    result: EligibilityResult | None = None
    error: VisaMatchError | None = None

    @property
    def status(self) -> EntryStatus:
        if self.result is None:
            return "error"
        return self.result.status

    @property
    def subject_id(self) -> str | None:
        if isinstance(self.subject, str):
            return self.subject
        if isinstance(self.subject, JobConstraints):
            return self.subject.job_id
        if isinstance(self.subject, Mapping):
            value = self.subject.get("jobId") or self.subject.get("job_id")
            return str(value) if value is not None else None
        return None

    def to_item_error(self) -> ItemError:
        if self.error is None:
            raise ValueError("entry has no error")
        return ItemError(
            subject=self.subject_id,
            error_type=type(self.error).__name__,
            message=str(self.error),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"subject": self.subject_id, "status": self.status}
        if self.result is not None:
            payload["result"] = self.result.to_payload()
        if self.error is not None:
            payload["error"] = self.to_item_error().model_dump(mode="json", by_alias=True)
        return payload


class BatchMatcher:
    """Answer "jobs for this visa" and "visas for this job" queries.

    Every per-pair decision goes through the same evaluator, so both
    directions agree on any pair they share.
    """

    def __init__(
        self,
        evaluator: EligibilityEvaluator,
        *,
        max_workers: int | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._max_workers = max_workers
        self._logger = structlog.get_logger(__name__)

    @property
    def evaluator(self) -> EligibilityEvaluator:
        return self._evaluator

    def jobs_eligible_for(
        self,
        visa: VisaProfile,
        jobs: Iterable[JobInput],
    ) -> list[MatchEntry]:
        """Evaluate ``visa`` against each job, keeping input order and every row."""
        return self._dispatch(list(jobs), lambda job: self._match(job, visa, job))

    def visas_matching_job(
        self,
        job: JobInput,
        visa_codes: Iterable[str] | None = None,
    ) -> list[MatchEntry]:
        """Evaluate synthesized attribute-less profiles against ``job``.

        Rules that need an attribute such a profile lacks resolve to
        CONDITIONAL, so this view is never more confident than a real
        worker's profile would allow.
        """
        codes = (
            list(visa_codes)
            if visa_codes is not None
            else list(self._evaluator.registry.known_visa_codes())
        )
        return self._dispatch(codes, lambda code: self._match(code, code, job))

    def _match(self, subject: Any, visa: VisaProfile | str, job: JobInput) -> MatchEntry:
        try:
            profile = visa if isinstance(visa, VisaProfile) else self._synthesize(visa)
            result = self._evaluator.evaluate(profile, job)
        except (UnknownVisaCodeError, MalformedJobConstraintsError) as exc:
            entry = MatchEntry(subject=subject, error=exc)
            self._logger.warning(
                "matcher.item_failed",
                subject=entry.subject_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return entry
        return MatchEntry(subject=subject, result=result)

    @staticmethod
    def _synthesize(visa_code: str) -> VisaProfile:
        if not isinstance(visa_code, str) or not visa_code.strip():
            raise UnknownVisaCodeError(str(visa_code))
        return VisaProfile.synthesize(visa_code)

    def _dispatch(self, items: Sequence[_T], func: Callable[[_T], MatchEntry]) -> list[MatchEntry]:
        if self._max_workers and self._max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                return list(pool.map(func, items))
        return [func(item) for item in items]

    def group_by_status(
        self,
        entries: Sequence[MatchEntry],
        job: JobInput,
        *,
        matched_at: str | None = None,
    ) -> VisaMatchingReport:
        """Shape ``visas_matching_job`` output into the grouped report payload."""
        groups: dict[str, list[EligibilityResult]] = {
            "eligible": [],
            "conditional": [],
            "blocked": [],
        }
        errors: list[ItemError] = []
        for entry in entries:
            if entry.result is None:
                errors.append(entry.to_item_error())
            else:
                groups[entry.result.status].append(entry.result)

        try:
            constraints = (
                job if isinstance(job, JobConstraints) else JobConstraints.model_validate(dict(job))
            )
        except ValidationError:
            raw_id = job.get("jobId") or job.get("job_id")
            job_id = str(raw_id) if raw_id is not None else None
            input_summary: dict[str, Any] = {}
        else:
            job_id = constraints.job_id
            input_summary = constraints.input_summary()

        return VisaMatchingReport(
            job_id=job_id,
            eligible=groups["eligible"],
            conditional=groups["conditional"],
            blocked=groups["blocked"],
            errors=errors,
            summary=summarize(entries),
            matched_at=matched_at or pendulum.now("UTC").to_iso8601_string(),
            ruleset_version=self._evaluator.registry.version,
            input_summary=input_summary,
        )


def summarize(entries: Iterable[MatchEntry]) -> MatchSummary:
    """Count entries per badge state; errors are counted apart from blocked."""
    counts = {"eligible": 0, "conditional": 0, "blocked": 0, "error": 0}
    for entry in entries:
        counts[entry.status] += 1
    return MatchSummary(
        total_eligible=counts["eligible"],
        total_conditional=counts["conditional"],
        total_blocked=counts["blocked"],
        total_errors=counts["error"],
    )
