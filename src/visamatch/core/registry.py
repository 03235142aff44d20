"""Rule registry: the ordered table of eligibility rules."""

from __future__ import annotations

import threading
from typing import Iterable

import structlog

from ..schemas import BoardType
from .catalog import VisaCatalog
from .errors import DuplicateRuleIdError
from .rules import EligibilityRule, EmptyAllowedPolicy, default_rules


class RuleRegistry:
    """Owns the visa catalog and the rules, in registration order."""

    def __init__(self, catalog: VisaCatalog, rules: Iterable[EligibilityRule] = ()) -> None:
        self._catalog = catalog
        self._rules: dict[str, EligibilityRule] = {}
        self._version = 0
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)
        for rule in rules:
            self.register(rule)

    @property
    def catalog(self) -> VisaCatalog:
        return self._catalog

    @property
    def version(self) -> int:
        """Ruleset version; bumped on every registration."""
        return self._version

    def register(self, rule: EligibilityRule) -> None:
        with self._lock:
            if rule.rule_id in self._rules:
                raise DuplicateRuleIdError(rule.rule_id)
            self._rules[rule.rule_id] = rule
            self._version += 1
        self._logger.debug(
            "registry.rule_registered",
            rule_id=rule.rule_id,
            layer=rule.layer,
            version=self._version,
        )

    def rules(self) -> list[EligibilityRule]:
        return list(self._rules.values())

    def rule_ids(self) -> list[str]:
        return list(self._rules)

    def rules_for(
        self,
        visa_code: str,
        board_type: BoardType,
        industry_category: str | None,
    ) -> list[EligibilityRule]:
        return [
            rule
            for rule in self._rules.values()
            if rule.applies_to(visa_code, board_type, industry_category)
        ]

    def known_visa_codes(self) -> tuple[str, ...]:
        """Catalog codes, in catalog order."""
        return self._catalog.codes()

    def is_known(self, visa_code: str) -> bool:
        return visa_code in self._catalog


def build_default_registry(
    catalog: VisaCatalog,
    *,
    empty_allowed_codes: EmptyAllowedPolicy | None = None,
    special_permit_categories: Iterable[str] | None = None,
    disabled_rules: Iterable[str] | None = None,
) -> RuleRegistry:
    """Registry holding the standard rule set minus ``disabled_rules``."""

    disabled = set(disabled_rules or ())
    rules = default_rules(
        catalog,
        empty_allowed_codes=empty_allowed_codes or "unrestricted",
        special_permit_categories=special_permit_categories,
    )
    unknown = disabled - {rule.rule_id for rule in rules}
    if unknown:
        raise ValueError(f"Cannot disable unknown rules: {sorted(unknown)}")
    return RuleRegistry(catalog, [rule for rule in rules if rule.rule_id not in disabled])
