"""
Model recommendation engine.

Scores priced models per task type, selects one under constraints, pins
and preferences, and estimates the savings of switching.
"""

from routeopt.core.optimizer.engine import PREFERENCE_BONUS, RecommendationEngine
from routeopt.core.optimizer.models import (
    Constraints,
    OptimizationResult,
    Recommendation,
    Savings,
    ScoredModel,
)
from routeopt.core.optimizer.report import generate_report
from routeopt.core.optimizer.savings import calculate_savings, current_models_from_document

__all__ = [
    "PREFERENCE_BONUS",
    "Constraints",
    "OptimizationResult",
    "Recommendation",
    "RecommendationEngine",
    "Savings",
    "ScoredModel",
    "calculate_savings",
    "current_models_from_document",
    "generate_report",
]
