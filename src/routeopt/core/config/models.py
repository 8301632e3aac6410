"""
Configuration data models for routeopt.

These models define the structure of .routeopt.json and
~/.config/routeopt/config.json files, with validation via Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from routeopt.core.approval.callbacks import HASH_LENGTH, build_item_token
from routeopt.core.routing.parser import resolve_home_path


class OptimizerConfig(BaseModel):
    """
    Scoring and selection settings for the recommendation engine.

    allowed_models of None means the conservative built-in allow-list;
    allow_all_models widens selection to every priced model.
    """
    quality_weight: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Weight of quality vs. cost in the score (0.0-1.0)"
    )
    cache_hit_probability: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Expected prompt cache hit rate for cache-priced models"
    )
    min_quality: int = Field(
        default=6,
        ge=1,
        le=10,
        description="Minimum quality score a candidate must reach"
    )
    max_cost: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Maximum total cost per 1M tokens (input + output)"
    )
    preferred_providers: list[str] = Field(
        default_factory=list,
        description="Only consider models from these providers (empty = all)"
    )
    allowed_models: Optional[list[str]] = Field(
        default=None,
        description="Explicit allow-list of model ids"
    )
    allow_all_models: bool = Field(
        default=False,
        description="Ignore the allow-list and consider every priced model"
    )
    pins: dict[str, str] = Field(
        default_factory=dict,
        description="Task type -> model id, merged over the built-in pins"
    )


class PricingConfig(BaseModel):
    """Pricing retrieval settings."""
    timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-provider time budget"
    )
    cache_ttl_hours: float = Field(
        default=24.0,
        ge=0,
        description="Age after which cached prices are refetched"
    )
    enabled_providers: Optional[list[str]] = Field(
        default=None,
        description="Providers to query (None = every registered source)"
    )


class DiscoveryConfig(BaseModel):
    """Task classifier settings."""
    classifier_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used to classify unknown task phrases"
    )
    api_key_env: str = Field(
        default="GEMINI_API_KEY",
        description="Environment variable holding the Gemini API key"
    )
    confidence_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Classifications above this confidence are learned"
    )


class NotifyConfig(BaseModel):
    """Chat delivery settings."""
    channel: str = Field(default="telegram")
    target: Optional[str] = Field(
        default=None,
        description="Chat target; falls back to the environment and allowFrom credentials"
    )
    command: str = Field(
        default="openclaw",
        description="Messaging CLI executable"
    )
    message_limit: int = Field(default=4096, ge=1)
    callback_limit: int = Field(default=64, ge=33)
    callback_namespace: str = Field(default="opt", pattern=r"^[a-z]+$")

    @model_validator(mode="after")
    def _check_callback_fits(self) -> "NotifyConfig":
        # Longest token: approve action, hashed batch id, three-digit item index.
        build_item_token("approve", "0" * HASH_LENGTH, 999, self.callback_namespace, self.callback_limit)
        return self


class RouteoptConfig(BaseModel):
    """
    Top-level routeopt configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = RouteoptConfig(optimizer=OptimizerConfig(min_quality=7))
        >>> config.optimizer.min_quality
        7
        >>> config.pricing.timeout_seconds
        20.0
    """
    soul_path: str = Field(
        default="~/.openclaw/workspace/SOUL.md",
        description="Routing document to optimize"
    )
    data_dir: str = Field(
        default="data",
        description="Root for approval batches, pricing cache and taxonomy"
    )
    reports_dir: str = Field(
        default="reports",
        description="Where weekly reports are written"
    )
    tables_path: Optional[str] = Field(
        default=None,
        description="JSON file overriding the built-in routing tables"
    )

    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)

    model_config = ConfigDict(
        extra="allow",
        validate_assignment=True,
    )

    @field_validator("data_dir", "reports_dir", mode="before")
    @classmethod
    def validate_dir(cls, v: object) -> object:
        if isinstance(v, Path):
            return str(v)
        return v

    @property
    def soul_file(self) -> Path:
        return resolve_home_path(self.soul_path)

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def reports_path(self) -> Path:
        return Path(self.reports_dir).expanduser()
