"""
Builds collaborators from configuration.

Services accept their collaborators as constructor arguments; these
helpers wire the production ones.
"""

import os
from pathlib import Path

from routeopt.core.approval.store import ApprovalBatchStore
from routeopt.core.catalog import RoutingTables, load_tables
from routeopt.core.config.models import RouteoptConfig
from routeopt.core.discovery.classifier import GeminiClassifier
from routeopt.core.discovery.service import DiscoveryService
from routeopt.core.discovery.taxonomy import TaxonomyStore
from routeopt.core.notify.messenger import CliNotifier
from routeopt.core.optimizer.models import Constraints
from routeopt.core.pricing.cache import PricingCache
from routeopt.core.pricing.service import PricingService
from routeopt.core.pricing.sources import get_all_sources, get_source

PRICING_CACHE_DIR = "pricing-cache"


def build_tables(config: RouteoptConfig) -> RoutingTables:
    return load_tables(Path(config.tables_path).expanduser() if config.tables_path else None)


def build_constraints(config: RouteoptConfig) -> Constraints:
    opt = config.optimizer
    return Constraints(
        min_quality=opt.min_quality,
        max_cost=opt.max_cost,
        preferred_providers=list(opt.preferred_providers),
        allowed_models=list(opt.allowed_models) if opt.allowed_models is not None else None,
        allow_all_models=opt.allow_all_models,
        pins=dict(opt.pins),
        quality_weight=opt.quality_weight,
        cache_hit_probability=opt.cache_hit_probability,
    )


def build_pricing_service(config: RouteoptConfig, providers: list[str] | None = None) -> PricingService:
    """
    PricingService over the enabled providers.

    Args:
        config: Loaded configuration
        providers: Restrict to these provider names (overrides configuration)

    Raises:
        ValueError: If a provider name is not registered
    """
    timeout = config.pricing.timeout_seconds
    names = providers or config.pricing.enabled_providers
    if names:
        sources = [get_source(name, timeout=timeout) for name in names]
    else:
        sources = get_all_sources(timeout=timeout)
    cache = PricingCache(config.data_path / PRICING_CACHE_DIR, ttl_hours=config.pricing.cache_ttl_hours)
    return PricingService(sources, cache=cache, timeout_seconds=timeout)


def build_store(config: RouteoptConfig) -> ApprovalBatchStore:
    return ApprovalBatchStore(config.data_path)


def build_discovery_service(config: RouteoptConfig, tables: RoutingTables) -> DiscoveryService:
    settings = config.discovery
    classifier = GeminiClassifier(
        api_key=os.environ.get(settings.api_key_env),
        model=settings.classifier_model,
    )
    return DiscoveryService(
        tables,
        TaxonomyStore(config.data_path),
        classifier,
        confidence_threshold=settings.confidence_threshold,
    )


def build_notifier(config: RouteoptConfig) -> CliNotifier:
    settings = config.notify
    return CliNotifier(
        target=settings.target,
        channel=settings.channel,
        command=settings.command,
        message_limit=settings.message_limit,
    )
