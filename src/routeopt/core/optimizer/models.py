"""Recommendation engine data models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from routeopt.core.pricing.models import PriceEntry


class OptimizerModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Constraints(OptimizerModel):
    """
    Candidate filters and scoring knobs for model selection.

    Attributes:
        min_quality: Minimum quality score a candidate must have
        max_cost: Optional ceiling on total cost (input + output per 1M tokens)
        preferred_providers: When set, only these providers are candidates
        allowed_models: Explicit allow-list; None means the default list
        allow_all_models: Ignore any allow-list and consider every priced model
        pins: Task type -> model id overrides, merged over the static pins
        quality_weight: Weight of quality vs. cost in the score (0-1)
        cache_hit_probability: Used to blend cached input prices (0-1)
    """

    min_quality: int = Field(default=6, ge=1, le=10)
    max_cost: float | None = Field(default=None, ge=0)
    preferred_providers: list[str] = Field(default_factory=list)
    allowed_models: list[str] | None = None
    allow_all_models: bool = False
    pins: dict[str, str] = Field(default_factory=dict)
    quality_weight: float = Field(default=0.5, ge=0, le=1)
    cache_hit_probability: float = Field(default=0.5, ge=0, le=1)


class ScoredModel(BaseModel):
    """A candidate with its computed score."""

    model: PriceEntry
    score: float
    quality: int
    total_cost: float
    pinned: bool = False


class Recommendation(OptimizerModel):
    """Best model for one task type."""

    task_type: str
    recommended_model: str
    score: float
    quality: int
    total_cost: float
    reasoning: str


class TaskImprovement(OptimizerModel):
    """Per-task cost change, listed when savings exceed 1%."""

    task_type: str
    current_model: str
    optimized_model: str
    savings_percent: float
    monthly_savings: float


class Savings(OptimizerModel):
    """
    Blended cost comparison over a usage mix.

    Costs are USD for monthly_tokens tokens spread over the usage mix.
    """

    current_monthly_cost: float
    optimized_monthly_cost: float
    monthly_savings: float
    savings_percent: float
    task_improvements: list[TaskImprovement] = Field(default_factory=list)
    monthly_tokens: int = 1_000_000
    usage_mix: dict[str, float] = Field(default_factory=dict)


class QualityImpact(OptimizerModel):
    tasks_improved: int = 0
    tasks_maintained: int = 0
    tasks_degraded: int = 0


class PriorityItem(OptimizerModel):
    task_type: str
    model: str
    impact: str = "high"


class OptimizationResult(OptimizerModel):
    """Everything one optimizer run produced."""

    timestamp: datetime
    models_analyzed: int
    current_rules: dict[str, int]
    recommendations: list[Recommendation]
    savings: Savings
    quality_impact: QualityImpact
    implementation_priority: list[PriorityItem] = Field(default_factory=list)
