"""
Exceptions for pricing retrieval.

Exception Hierarchy:
    PricingError (base)
    ├── ProviderError (one provider failed; degraded to an empty list)
    └── NoPricingDataError (every provider returned zero models)
"""

from routeopt.core.exceptions import RouteoptError


class PricingError(RouteoptError):
    """Base exception for pricing errors."""


class ProviderError(PricingError):
    """
    Raised by a pricing source when it cannot produce prices.

    Attributes:
        provider: Name of the failing provider
    """

    def __init__(self, provider: str, message: str, **context: object) -> None:
        super().__init__(message, provider=provider, **context)
        self.provider = provider

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class NoPricingDataError(PricingError):
    """Raised when no provider returned any model."""

    def __init__(self, providers: list[str]) -> None:
        super().__init__(
            "No pricing data available from any provider",
            providers=", ".join(providers) or "none",
        )


__all__ = [
    "PricingError",
    "ProviderError",
    "NoPricingDataError",
]
