"""
Provider pricing.

Price lists come from registered sources (scraped pages with built-in
fallbacks, or static tables), cached per provider for 24 hours and
aggregated by PricingService.
"""

from routeopt.core.pricing.cache import PricingCache
from routeopt.core.pricing.exceptions import NoPricingDataError, PricingError, ProviderError
from routeopt.core.pricing.models import PriceEntry, PricingSummary
from routeopt.core.pricing.service import PricingService
from routeopt.core.pricing.sources import get_all_sources, get_source, list_sources

__all__ = [
    "NoPricingDataError",
    "PriceEntry",
    "PricingCache",
    "PricingError",
    "PricingService",
    "PricingSummary",
    "ProviderError",
    "get_all_sources",
    "get_source",
    "list_sources",
]
