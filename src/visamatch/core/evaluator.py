"""The single authoritative eligibility decision function."""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from ..schemas import ATTRIBUTE_LABELS, EligibilityResult, JobConstraints, VisaProfile
from .cache import VerdictCache
from .errors import MalformedJobConstraintsError, UnknownVisaCodeError
from .registry import RuleRegistry
from .rules import EligibilityRule, OutcomeKind, RuleOutcome


class EligibilityEvaluator:
    """Turn a (visa, job) pair into an explainable verdict.

    Precedence: any BLOCK makes the pair ineligible and suppresses
    restrictions; otherwise CONDITIONAL reasons become restrictions.
    Documents and notes are collected from every rule regardless.
    """

    def __init__(self, registry: RuleRegistry, *, cache: VerdictCache | None = None) -> None:
        self._registry = registry
        self._cache = cache
        self._logger = structlog.get_logger(__name__)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    def evaluate(
        self,
        visa: VisaProfile | Mapping[str, Any],
        job: JobConstraints | Mapping[str, Any],
    ) -> EligibilityResult:
        profile = self._coerce_visa(visa)
        constraints = self._coerce_job(job)
        if not self._registry.is_known(profile.visa_code):
            raise UnknownVisaCodeError(
                profile.visa_code,
                suggestion=self._registry.catalog.suggest(profile.visa_code),
            )

        cache_key = None
        if self._cache is not None:
            cache_key = (profile.fingerprint(), constraints.fingerprint(), self._registry.version)
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        result = self._evaluate_rules(profile, constraints)
        if self._cache is not None and cache_key is not None:
            self._cache.put(cache_key, result)

        self._logger.debug(
            "eligibility.evaluated",
            visa_code=profile.visa_code,
            job_id=constraints.job_id,
            status=result.status,
            applied_rules=result.applied_rules,
        )
        return result

    def _evaluate_rules(self, visa: VisaProfile, job: JobConstraints) -> EligibilityResult:
        rules = self._registry.rules_for(visa.visa_code, job.board_type, job.industry_category)

        blockers: list[RuleOutcome] = []
        conditionals: list[RuleOutcome] = []
        notes: list[str] = []

        for rule in rules:
            outcome = self._run_rule(rule, visa, job)
            notes.extend(outcome.notes)
            if outcome.kind is OutcomeKind.BLOCK:
                blockers.append(outcome)
            elif outcome.kind is OutcomeKind.CONDITIONAL:
                conditionals.append(outcome)

        eligible = not blockers
        restrictions = (
            _ordered_unique(outcome.reason for outcome in conditionals) if eligible else []
        )
        documents = _ordered_unique(
            document
            for outcome in conditionals
            for document in outcome.required_documents
        )

        return EligibilityResult(
            eligible=eligible,
            visa_code=visa.visa_code,
            restrictions=restrictions,
            notes=_ordered_unique(notes),
            documents_required=documents,
            block_reasons=_ordered_unique(outcome.reason for outcome in blockers),
            applied_rules=[rule.rule_id for rule in rules],
        )

    @staticmethod
    def _run_rule(rule: EligibilityRule, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        missing = visa.attributes.missing(rule.required_attributes)
        if missing:
            labels = ", ".join(ATTRIBUTE_LABELS.get(name, name) for name in missing)
            return RuleOutcome.conditional(f"confirm {labels} for {visa.visa_code}")
        return rule.evaluate(visa, job)

    @staticmethod
    def _coerce_visa(visa: VisaProfile | Mapping[str, Any]) -> VisaProfile:
        if isinstance(visa, VisaProfile):
            return visa
        return VisaProfile.model_validate(visa)

    @staticmethod
    def _coerce_job(job: JobConstraints | Mapping[str, Any]) -> JobConstraints:
        if isinstance(job, JobConstraints):
            return job
        if not isinstance(job, Mapping):
            raise MalformedJobConstraintsError(
                [f"expected a mapping, got {type(job).__name__}"]
            )
        job_id = job.get("jobId") or job.get("job_id")
        try:
            return JobConstraints.model_validate(dict(job))
        except ValidationError as exc:
            raise MalformedJobConstraintsError.from_validation(
                exc,
                job_id=str(job_id) if job_id is not None else None,
            ) from exc


def _ordered_unique(values: Any) -> list[str]:
    return list(dict.fromkeys(value for value in values if value))
