"""
Recommendation engine.

Scores every priced model for a task type with a linear blend of quality
and cost:

    score = w * quality + (1 - w) * max(0, 10 - total_cost / 10) + bonus

where bonus is PREFERENCE_BONUS for models on the task's preference list.
Selection filters candidates first (allow-list, vision, minimum quality,
cost ceiling, providers). If the filters leave nothing, the full model
list is ranked instead so a task type always gets a recommendation. A
pinned model present among the candidates wins outright.

Example:
    >>> engine = RecommendationEngine(RoutingTables.default())
    >>> best = engine.select_model(models, "debugging")
    >>> best.model.model
    'claude-haiku-4-5-20251001'
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from routeopt.core.catalog import RoutingTables
from routeopt.core.optimizer.models import (
    Constraints,
    OptimizationResult,
    PriorityItem,
    QualityImpact,
    Recommendation,
    ScoredModel,
)
from routeopt.core.optimizer.savings import calculate_savings, current_models_from_document
from routeopt.core.pricing.models import PriceEntry
from routeopt.core.routing.models import RoutingDocument

logger = logging.getLogger(__name__)

PREFERENCE_BONUS = 0.8
RECOMMENDATION_LIMIT = 10
HIGH_IMPACT_SCORE = 7


class RecommendationEngine:
    """
    Picks the best model per task type.

    The engine holds no state beyond its tables and default constraints;
    every method is a pure function of its arguments.
    """

    def __init__(self, tables: RoutingTables, constraints: Constraints | None = None) -> None:
        self.tables = tables
        self.constraints = constraints or Constraints()

    def score(
        self,
        model: PriceEntry,
        task_type: str,
        quality_weight: float | None = None,
        cache_hit_probability: float | None = None,
    ) -> float:
        """Quality/cost score of a model for a task type (higher is better)."""
        weight = self.constraints.quality_weight if quality_weight is None else quality_weight
        hit_rate = (
            self.constraints.cache_hit_probability
            if cache_hit_probability is None
            else cache_hit_probability
        )

        quality = self.tables.quality(task_type, model.model)
        cost_score = max(0.0, 10 - model.total_cost(hit_rate) / 10)
        bonus = PREFERENCE_BONUS if self.tables.is_preferred(task_type, model.model) else 0.0
        return weight * quality + (1 - weight) * cost_score + bonus

    def _allowed(self, constraints: Constraints) -> set[str] | None:
        if constraints.allow_all_models:
            return None
        allowed = constraints.allowed_models
        if allowed is None:
            allowed = list(self.tables.allowed_models)
        return set(allowed) if allowed else None

    def _passes(self, model: PriceEntry, task_type: str, constraints: Constraints, allowed: set[str] | None) -> bool:
        if allowed is not None and model.model not in allowed:
            return False
        if self.tables.requires_vision(task_type) and not model.vision:
            return False
        if self.tables.quality(task_type, model.model) < constraints.min_quality:
            return False
        if constraints.max_cost is not None:
            if model.total_cost(constraints.cache_hit_probability) > constraints.max_cost:
                return False
        if constraints.preferred_providers and model.provider_name not in constraints.preferred_providers:
            return False
        return True

    def _scored(self, model: PriceEntry, task_type: str, constraints: Constraints, pinned: bool = False) -> ScoredModel:
        return ScoredModel(
            model=model,
            score=self.score(model, task_type, constraints.quality_weight, constraints.cache_hit_probability),
            quality=self.tables.quality(task_type, model.model),
            total_cost=model.total_cost(constraints.cache_hit_probability),
            pinned=pinned,
        )

    def select_model(
        self,
        models: Sequence[PriceEntry],
        task_type: str,
        constraints: Constraints | None = None,
    ) -> ScoredModel | None:
        """
        Choose the best model for a task type.

        Args:
            models: Priced candidates
            task_type: Task type id
            constraints: Overrides the engine's default constraints

        Returns:
            The winning candidate, or None only when models is empty
        """
        constraints = constraints or self.constraints
        allowed = self._allowed(constraints)

        candidates = [m for m in models if self._passes(m, task_type, constraints, allowed)]
        if not candidates:
            logger.debug(f"No candidate passes the filters for {task_type}; ranking all models")
            candidates = list(models)
        if not candidates:
            return None

        pins = {**self.tables.pins, **constraints.pins}
        pinned_id = pins.get(task_type)
        if pinned_id:
            for model in candidates:
                if model.model == pinned_id:
                    return self._scored(model, task_type, constraints, pinned=True)

        scored = [self._scored(model, task_type, constraints) for model in candidates]
        scored.sort(key=lambda candidate: candidate.score, reverse=True)
        return scored[0]

    def generate_recommendations(
        self,
        document: RoutingDocument,
        models: Sequence[PriceEntry],
        constraints: Constraints | None = None,
    ) -> list[Recommendation]:
        """One recommendation per task type found in the document, best score first."""
        task_types: list[str] = []
        for _, rule in document.iter_rules():
            for match in rule.matches:
                if match.task_type not in task_types:
                    task_types.append(match.task_type)

        recommendations = []
        for task_type in task_types:
            best = self.select_model(models, task_type, constraints)
            if best is None:
                continue
            reasoning = f"Balances quality ({best.quality}/10) with cost (${best.total_cost:.2f}/M)"
            if best.pinned:
                reasoning = f"Pinned model for {task_type}; {reasoning[0].lower()}{reasoning[1:]}"
            recommendations.append(
                Recommendation(
                    task_type=task_type,
                    recommended_model=best.model.model,
                    score=best.score,
                    quality=best.quality,
                    total_cost=best.total_cost,
                    reasoning=reasoning,
                )
            )

        recommendations.sort(key=lambda rec: rec.score, reverse=True)
        return recommendations

    def optimize(
        self,
        document: RoutingDocument,
        models: Sequence[PriceEntry],
        constraints: Constraints | None = None,
    ) -> OptimizationResult:
        """
        Full optimizer pass over a document.

        Returns the top recommendations together with the estimated savings
        against the models the document currently routes to.
        """
        constraints = constraints or self.constraints
        recommendations = self.generate_recommendations(document, models, constraints)
        savings = calculate_savings(
            recommendations,
            models,
            current_models_from_document(document, self.tables),
            self.tables.usage_mix,
            cache_hit_probability=constraints.cache_hit_probability,
        )

        logger.info(f"Optimization complete: {len(recommendations)} recommendation(s)")
        return OptimizationResult(
            timestamp=datetime.now(timezone.utc),
            models_analyzed=len(models),
            current_rules=document.rule_counts(),
            recommendations=recommendations[:RECOMMENDATION_LIMIT],
            savings=savings,
            quality_impact=QualityImpact(
                tasks_improved=sum(1 for r in recommendations if r.quality >= 7),
                tasks_maintained=sum(1 for r in recommendations if 5 <= r.quality < 7),
                tasks_degraded=sum(1 for r in recommendations if r.quality < 5),
            ),
            implementation_priority=[
                PriorityItem(task_type=r.task_type, model=r.recommended_model)
                for r in recommendations
                if r.score > HIGH_IMPACT_SCORE
            ],
        )
