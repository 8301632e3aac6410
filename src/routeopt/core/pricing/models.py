"""
Pricing data models.

Prices are USD per million tokens. Entries are persisted (cache records,
reports) with camelCase keys such as inputPerM and contextWindow.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PriceEntry(BaseModel):
    """
    Price of one model.

    Example:
        >>> entry = PriceEntry(model="deepseek/deepseek-v3", input_per_m=0.8, output_per_m=1.6,
        ...                    cache=True, cache_hit_input_per_m=0.2, cache_miss_input_per_m=0.8)
        >>> entry.effective_input_cost(0.5)
        0.5
        >>> entry.total_cost()
        2.4
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    model: str = Field(..., description="Model id, e.g. 'google/gemini-2.5-flash'")
    input_per_m: float = Field(..., ge=0)
    output_per_m: float = Field(..., ge=0)
    context_window: int | None = None
    vision: bool = False
    cache: bool = False
    cache_hit_input_per_m: float | None = None
    cache_miss_input_per_m: float | None = None
    free: bool = False
    note: str | None = None
    provider: str | None = Field(default=None, description="Filled in by the pricing service")

    @property
    def provider_name(self) -> str:
        """Provider from the entry, else the model id prefix before '/'."""
        if self.provider:
            return self.provider
        return self.model.split("/", 1)[0] if "/" in self.model else ""

    def effective_input_cost(self, cache_hit_probability: float | None = None) -> float:
        """Input price blended over cache hits and misses when both rates are known."""
        if (
            cache_hit_probability is not None
            and self.cache
            and self.cache_hit_input_per_m is not None
            and self.cache_miss_input_per_m is not None
        ):
            p = min(max(cache_hit_probability, 0.0), 1.0)
            return p * self.cache_hit_input_per_m + (1 - p) * self.cache_miss_input_per_m
        return self.input_per_m

    def total_cost(self, cache_hit_probability: float | None = None) -> float:
        return self.effective_input_cost(cache_hit_probability) + self.output_per_m

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CacheRecord(BaseModel):
    """One provider's cached price list. timestamp is epoch milliseconds."""

    timestamp: int
    data: list[PriceEntry]
    source: str


class PricingSummary(BaseModel):
    """Model counts per provider."""

    total: int
    by_provider: dict[str, int] = Field(default_factory=dict)

    @property
    def parts(self) -> list[str]:
        return [f"{provider}:{count}" for provider, count in self.by_provider.items()]
