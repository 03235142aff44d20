"""Dependency injection container for the matching engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .adapters import AdapterRegistry, AlbaPostingAdapter, FulltimePostingAdapter
from .core import (
    BatchMatcher,
    EligibilityEvaluator,
    build_default_registry,
    create_cache,
    load_catalog,
)
from .pipeline import MatchingPipeline
from .service import CatalogVerificationSource, EligibilityService, InMemoryPostingRepository


class MatchingContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    catalog = providers.Singleton(load_catalog, path=config.catalog.path)

    rule_registry = providers.Singleton(
        build_default_registry,
        catalog=catalog,
        empty_allowed_codes=config.rules.empty_allowed_codes,
        special_permit_categories=config.rules.special_permit_categories,
        disabled_rules=config.rules.disabled_rules,
    )

    verdict_cache = providers.Singleton(create_cache, max_size=config.matcher.cache_size)

    evaluator = providers.Singleton(
        EligibilityEvaluator,
        registry=rule_registry,
        cache=verdict_cache,
    )

    matcher = providers.Singleton(
        BatchMatcher,
        evaluator=evaluator,
        max_workers=config.matcher.max_workers,
    )

    alba_adapter = providers.Singleton(AlbaPostingAdapter)
    fulltime_adapter = providers.Singleton(FulltimePostingAdapter)

    adapter_registry = providers.Singleton(
        AdapterRegistry,
        adapters=providers.List(alba_adapter, fulltime_adapter),
    )

    verifications = providers.Singleton(CatalogVerificationSource, catalog=catalog)

    postings = providers.Singleton(InMemoryPostingRepository)

    service = providers.Factory(
        EligibilityService,
        matcher=matcher,
        postings=postings,
        verifications=verifications,
    )

    pipeline = providers.Factory(
        MatchingPipeline,
        matcher=matcher,
        registry=adapter_registry,
        verifications=verifications,
    )


def create_container(*, settings: dict | None = None) -> MatchingContainer:
    """Instantiate container with optional overrides."""

    container = MatchingContainer()

    if not settings or not isinstance(settings, dict):
        return container

    container.config.from_dict(settings)

    matcher_settings = settings.get("matcher", {})
    if matcher_settings.get("cache_size") == 0:
        container.verdict_cache.override(providers.Object(None))

    return container
