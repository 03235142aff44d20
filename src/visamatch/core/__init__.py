"""Core eligibility engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .cache import VerdictCache, create_cache
from .catalog import VisaCatalog, load_catalog
from .errors import (
    DuplicateRuleIdError,
    MalformedJobConstraintsError,
    PostingLoadError,
    PostingNotFoundError,
    UnknownVisaCodeError,
    VisaMatchError,
)
from .evaluator import EligibilityEvaluator
from .matcher import BatchMatcher, MatchEntry, summarize
from .registry import RuleRegistry, build_default_registry
from .rules import EligibilityRule, OutcomeKind, RuleOutcome, RuleScope

__all__ = [
    "BatchMatcher",
    "DuplicateRuleIdError",
    "EligibilityEvaluator",
    "EligibilityRule",
    "MalformedJobConstraintsError",
    "MatchEntry",
    "OutcomeKind",
    "PostingLoadError",
    "PostingNotFoundError",
    "RuleOutcome",
    "RuleRegistry",
    "RuleScope",
    "UnknownVisaCodeError",
    "VerdictCache",
    "VisaCatalog",
    "VisaMatchError",
    "build_default_registry",
    "create_cache",
    "load_catalog",
    "summarize",
]
