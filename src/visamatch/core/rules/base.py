"""Rule model shared by every eligibility rule."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Literal, Protocol, runtime_checkable

from ...schemas import BoardType, JobConstraints, VisaProfile

RuleLayer = Literal["universal", "visa_class", "job_category"]


class OutcomeKind(str, Enum):
    PASS = "PASS"
    CONDITIONAL = "CONDITIONAL"
    BLOCK = "BLOCK"


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """Result of applying one rule to a (visa, job) pair.

    ``notes`` are advisory and never change the verdict.
    """

    kind: OutcomeKind
    reason: str | None = None
    required_documents: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    @classmethod
    def passed(cls, *, notes: Iterable[str] = ()) -> "RuleOutcome":
        return cls(OutcomeKind.PASS, notes=tuple(notes))

    @classmethod
    def conditional(
        cls,
        reason: str,
        *,
        documents: Iterable[str] = (),
        notes: Iterable[str] = (),
    ) -> "RuleOutcome":
        return cls(
            OutcomeKind.CONDITIONAL,
            reason=reason,
            required_documents=tuple(documents),
            notes=tuple(notes),
        )

    @classmethod
    def block(cls, reason: str, *, notes: Iterable[str] = ()) -> "RuleOutcome":
        return cls(OutcomeKind.BLOCK, reason=reason, notes=tuple(notes))


@dataclass(frozen=True, slots=True)
class RuleScope:
    """Selects the (visa, board, industry) combinations a rule considers.

    ``None`` on any axis matches everything.
    """

    visa_codes: frozenset[str] | None = None
    board_types: frozenset[BoardType] | None = None
    industry_categories: frozenset[str] | None = None
    excluded_visa_codes: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        *,
        visa_codes: Iterable[str] | None = None,
        board_types: Iterable[BoardType] | None = None,
        industry_categories: Iterable[str] | None = None,
        excluded_visa_codes: Iterable[str] = (),
    ) -> "RuleScope":
        return cls(
            visa_codes=frozenset(visa_codes) if visa_codes is not None else None,
            board_types=frozenset(board_types) if board_types is not None else None,
            industry_categories=(
                frozenset(item.upper() for item in industry_categories)
                if industry_categories is not None
                else None
            ),
            excluded_visa_codes=frozenset(excluded_visa_codes),
        )

    def matches(
        self,
        visa_code: str,
        board_type: BoardType,
        industry_category: str | None,
    ) -> bool:
        if visa_code in self.excluded_visa_codes:
            return False
        if self.visa_codes is not None and visa_code not in self.visa_codes:
            return False
        if self.board_types is not None and board_type not in self.board_types:
            return False
        if self.industry_categories is not None and industry_category not in self.industry_categories:
            return False
        return True


@runtime_checkable
class EligibilityRule(Protocol):
    """Contract for a single unit of eligibility policy."""

    rule_id: str
    layer: RuleLayer
    required_attributes: tuple[str, ...]

    def applies_to(
        self,
        visa_code: str,
        board_type: BoardType,
        industry_category: str | None,
    ) -> bool:
        """Return True when the rule should be considered for the pair."""

    def evaluate(self, visa: VisaProfile, job: JobConstraints) -> RuleOutcome:
        """Return the rule's outcome. Must be pure."""


class ScopedRule:
    """Mixin delegating ``applies_to`` to a :class:`RuleScope`."""

    rule_id: str
    layer: RuleLayer
    required_attributes: tuple[str, ...] = ()
    scope: RuleScope

    def applies_to(
        self,
        visa_code: str,
        board_type: BoardType,
        industry_category: str | None,
    ) -> bool:
        return self.scope.matches(visa_code, board_type, industry_category)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule_id={self.rule_id!r})"
