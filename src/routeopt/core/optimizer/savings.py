"""
Savings estimates.

Compares the blended cost of the models a document routes to today with
the blended cost of the recommended models, weighted by a usage mix
(share of traffic per task type).
"""

import logging
import re
from collections.abc import Mapping, Sequence

from routeopt.core.catalog import RoutingTables
from routeopt.core.optimizer.models import Recommendation, Savings, TaskImprovement
from routeopt.core.pricing.models import PriceEntry
from routeopt.core.routing.labels import ModelLabeler
from routeopt.core.routing.models import RoutingDocument

logger = logging.getLogger(__name__)

MONTHLY_TOKENS = 1_000_000
MIN_REPORTED_SAVINGS_PERCENT = 1.0

_SEGMENT_END = re.compile(r"[,;]")


def current_models_from_document(document: RoutingDocument, tables: RoutingTables) -> dict[str, str]:
    """
    Map each task type to the model id its rule currently names.

    The text after the matched phrase (up to the next comma or semicolon)
    is looked up against the model labels. Task types whose model cannot
    be recognized are left out; the first rule for a task type wins.
    """
    labeler = ModelLabeler(tables.model_labels)
    current: dict[str, str] = {}
    for _, rule in document.iter_rules():
        for match in rule.matches:
            if match.task_type in current:
                continue
            start = rule.text.find(match.description)
            if start < 0:
                continue
            segment = _SEGMENT_END.split(rule.text[start + len(match.description):], maxsplit=1)[0]
            model_id = labeler.model_for_label(segment)
            if model_id:
                current[match.task_type] = model_id
    return current


def calculate_savings(
    recommendations: Sequence[Recommendation],
    models: Sequence[PriceEntry],
    current_models: Mapping[str, str],
    usage_mix: Mapping[str, float] | None = None,
    cache_hit_probability: float | None = None,
    monthly_tokens: int = MONTHLY_TOKENS,
) -> Savings:
    """
    Estimate monthly cost before and after applying recommendations.

    Args:
        recommendations: Recommended model per task type
        models: Priced models
        current_models: Task type -> model id routed today
        usage_mix: Task type -> share of traffic
        cache_hit_probability: Passed to PriceEntry.total_cost()
        monthly_tokens: Monthly token volume the costs are scaled to

    Returns:
        Savings with totals and per-task improvements above 1%
    """
    mix = dict(usage_mix or {})
    prices = {entry.model: entry for entry in models}
    recommended = {rec.task_type: rec.recommended_model for rec in recommendations}
    scale = monthly_tokens / 1_000_000

    current_total = 0.0
    optimized_total = 0.0
    improvements: list[TaskImprovement] = []

    for task_type, share in mix.items():
        current_entry = prices.get(current_models.get(task_type, ""))
        if current_entry is None:
            logger.debug(f"No priced current model for {task_type}; left out of savings")
            continue
        optimized_entry = prices.get(recommended.get(task_type, ""), current_entry)

        current_cost = current_entry.total_cost(cache_hit_probability) * share * scale
        optimized_cost = optimized_entry.total_cost(cache_hit_probability) * share * scale
        current_total += current_cost
        optimized_total += optimized_cost

        if current_entry.model == optimized_entry.model or current_cost <= 0:
            continue
        saved = current_cost - optimized_cost
        percent = saved / current_cost * 100 if saved > 0 else 0.0
        if percent > MIN_REPORTED_SAVINGS_PERCENT:
            improvements.append(
                TaskImprovement(
                    task_type=task_type,
                    current_model=current_entry.model,
                    optimized_model=optimized_entry.model,
                    savings_percent=round(percent, 1),
                    monthly_savings=round(saved, 2),
                )
            )

    total_saved = current_total - optimized_total
    return Savings(
        current_monthly_cost=round(current_total, 2),
        optimized_monthly_cost=round(optimized_total, 2),
        monthly_savings=round(total_saved, 2),
        savings_percent=round(total_saved / current_total * 100, 1) if current_total > 0 else 0.0,
        task_improvements=sorted(improvements, key=lambda item: item.monthly_savings, reverse=True),
        monthly_tokens=monthly_tokens,
        usage_mix=mix,
    )
