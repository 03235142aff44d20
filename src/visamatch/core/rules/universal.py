"""Rules that apply to every visa and every posting."""

from __future__ import annotations

from typing import Iterable, Literal

from ...schemas import JobConstraints, VisaProfile
from .base import RuleOutcome, RuleScope, ScopedRule

EmptyAllowedPolicy = Literal["unrestricted", "none"]


class AllowedVisaCodesRule(ScopedRule):
    """Block visas the posting does not list.

    An empty list is resolved by ``empty_policy``: ``"unrestricted"`` accepts
    every catalog code, ``"none"`` accepts no code at all.
    """

    rule_id = "universal.allowed_visa_codes"
    layer = "universal"

    def __init__(self, *, empty_policy: EmptyAllowedPolicy = "unrestricted") -> None:
        if empty_policy not in ("unrestricted", "none"):
            raise ValueError(f"Unsupported empty allowed-codes policy: {empty_policy!r}")
        self.empty_policy = empty_policy
        self.scope = RuleScope()

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        allowed = job.allowed_visa_codes
        if not allowed:
            if self.empty_policy == "unrestricted":
                return RuleOutcome.passed()
            return RuleOutcome.block("posting does not accept any visa code")
        if visa.visa_code in allowed:
            return RuleOutcome.passed()
        return RuleOutcome.block(f"{visa.visa_code} is not among the visas accepted by this posting")


class NonWorkingVisaRule(ScopedRule):
    """Block visa categories that carry no work authorization."""

    rule_id = "universal.non_working_visa"
    layer = "universal"

    def __init__(self, visa_codes: Iterable[str]) -> None:
        self.scope = RuleScope.build(visa_codes=visa_codes)

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        return RuleOutcome.block(f"{visa.visa_code} does not permit employment")
