"""
Per-provider pricing cache.

Each provider has one JSON record at <directory>/<provider>.json:

    {"timestamp": 1767225600000, "data": [...], "source": "anthropic.com"}

Records older than the TTL are treated as missing. Cache problems never
fail a run: unreadable records are skipped and failed writes are logged.
"""

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from routeopt.core.fileio import write_json_atomic
from routeopt.core.pricing.models import CacheRecord, PriceEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24.0


class PricingCache:
    """File-backed cache of provider price lists."""

    def __init__(
        self,
        directory: Path,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = Path(directory)
        self.ttl_ms = int(ttl_hours * 3600 * 1000)
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def path_for(self, provider: str) -> Path:
        return self.directory / f"{provider}.json"

    def read(self, provider: str) -> CacheRecord | None:
        """Return the provider's record if present and fresh."""
        path = self.path_for(provider)
        if not path.exists():
            return None

        try:
            with path.open(encoding="utf-8") as f:
                record = CacheRecord.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable pricing cache for {provider}: {e}")
            return None

        age = self._now_ms() - record.timestamp
        if age > self.ttl_ms:
            logger.debug(f"Pricing cache for {provider} expired ({age // 3_600_000}h old)")
            return None
        return record

    def write(self, provider: str, entries: list[PriceEntry], source: str) -> None:
        """Store a provider's price list; failures are logged, not raised."""
        payload = {
            "timestamp": self._now_ms(),
            "data": [entry.to_json_dict() for entry in entries],
            "source": source,
        }
        try:
            write_json_atomic(self.path_for(provider), payload)
        except OSError as e:
            logger.warning(f"Failed to write pricing cache for {provider}: {e}")
            return
        logger.debug(f"Cached {len(entries)} {provider} price(s) from {source}")
