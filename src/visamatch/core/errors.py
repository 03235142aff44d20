"""Error taxonomy for eligibility evaluation."""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import ValidationError


class VisaMatchError(Exception):
    """Base class for engine errors."""


class UnknownVisaCodeError(VisaMatchError, LookupError):
    """Raised when a visa code is not part of the catalog."""

    def __init__(self, visa_code: str, *, suggestion: str | None = None):
        self.visa_code = visa_code
        self.suggestion = suggestion
        message = f"Unknown visa code: {visa_code!r}"
        if suggestion:
            message += f" (did you mean {suggestion!r}?)"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class MalformedJobConstraintsError(VisaMatchError, ValueError):
    """Raised when posting constraints cannot be evaluated."""

    def __init__(self, errors: Iterable[str], *, job_id: str | None = None):
        self.errors = list(errors)
        self.job_id = job_id
        label = f"job {job_id!r}" if job_id else "job"
        super().__init__(f"Malformed constraints for {label}: {'; '.join(self.errors)}")

    @classmethod
    def from_validation(
        cls,
        exc: ValidationError,
        *,
        job_id: str | None = None,
    ) -> "MalformedJobConstraintsError":
        errors = []
        for item in exc.errors():
            location = ".".join(str(part) for part in item.get("loc", ())) or "job"
            errors.append(f"{location}: {item.get('msg')}")
        return cls(errors, job_id=job_id)


class DuplicateRuleIdError(VisaMatchError, ValueError):
    """Raised when two rules share an identifier."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule already registered: {rule_id!r}")


class PostingNotFoundError(VisaMatchError, LookupError):
    """Raised when a posting id is not known to the repository."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Posting not found: {job_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class PostingLoadError(VisaMatchError, ValueError):
    """Raised when posting loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Any]):
        super().__init__("Posting loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Posting loading failed: {self.errors}"
