"""
Pricing service.

Fetches every provider's price list concurrently. Each provider is bounded
by the same timeout and isolated from the others: a provider that raises
or does not finish in time contributes an empty list and a warning. Only
when every provider comes back empty does the service fail.

Example:
    cache = PricingCache(Path("data/pricing-cache"))
    service = PricingService(get_all_sources(timeout=20.0), cache=cache)
    pricing = service.fetch_all_pricing()
    models = service.flatten(pricing)
"""

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, wait

from routeopt.core.pricing.cache import PricingCache
from routeopt.core.pricing.exceptions import NoPricingDataError
from routeopt.core.pricing.models import PriceEntry, PricingSummary
from routeopt.core.pricing.sources.base import PricingSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


class PricingService:
    """
    Aggregates price lists across providers.

    Attributes:
        sources: Providers to query
        cache: Optional per-provider cache; fresh records skip the network
        timeout_seconds: Time box applied to every provider
    """

    def __init__(
        self,
        sources: Sequence[PricingSource],
        cache: PricingCache | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.sources = list(sources)
        self.cache = cache
        self.timeout_seconds = timeout_seconds

    def _fetch_one(self, source: PricingSource) -> list[PriceEntry]:
        cacheable = self.cache is not None and getattr(source, "cacheable", False)

        if cacheable:
            record = self.cache.read(source.name)
            if record is not None:
                logger.info(f"Using cached {source.name} pricing ({record.source})")
                return [entry.model_copy(update={"provider": source.name}) for entry in record.data]

        entries = [
            entry.model_copy(update={"provider": source.name}) for entry in source.fetch_prices()
        ]
        if cacheable and entries:
            self.cache.write(source.name, entries, getattr(source, "origin", source.name))
        return entries

    def fetch_all_pricing(self) -> dict[str, list[PriceEntry]]:
        """
        Fetch every provider concurrently.

        Returns:
            Mapping of provider name -> price list, in source order.
            Failed or timed-out providers map to an empty list.

        Raises:
            NoPricingDataError: If no provider returned any model
        """
        names = [source.name for source in self.sources]
        results: dict[str, list[PriceEntry]] = {name: [] for name in names}
        if not self.sources:
            raise NoPricingDataError(names)

        executor = ThreadPoolExecutor(max_workers=len(self.sources), thread_name_prefix="pricing")
        try:
            futures = {executor.submit(self._fetch_one, source): source.name for source in self.sources}
            _, not_done = wait(futures, timeout=self.timeout_seconds)

            for future, name in futures.items():
                if future in not_done:
                    logger.warning(f"Pricing fetch for {name} timed out after {self.timeout_seconds}s")
                    continue
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.warning(f"Pricing fetch for {name} failed: {e}")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        summary = self.summarize(results)
        if summary.total == 0:
            raise NoPricingDataError(names)

        logger.info(f"Loaded {summary.total} priced model(s): {', '.join(summary.parts)}")
        return results

    def get_model_pricing(
        self,
        model_id: str,
        pricing: Mapping[str, list[PriceEntry]] | None = None,
    ) -> PriceEntry | None:
        """Find one model's price, fetching all providers when pricing is not given."""
        pricing = pricing if pricing is not None else self.fetch_all_pricing()
        for provider, entries in pricing.items():
            for entry in entries:
                if entry.model == model_id:
                    return entry.model_copy(update={"provider": entry.provider or provider})
        return None

    @staticmethod
    def flatten(pricing: Mapping[str, list[PriceEntry]]) -> list[PriceEntry]:
        """Every entry across providers, tagged with its provider."""
        return [
            entry.model_copy(update={"provider": entry.provider or provider})
            for provider, entries in pricing.items()
            for entry in entries
        ]

    @staticmethod
    def summarize(pricing: Mapping[str, list[PriceEntry]]) -> PricingSummary:
        by_provider = {provider: len(entries) for provider, entries in pricing.items()}
        return PricingSummary(total=sum(by_provider.values()), by_provider=by_provider)
