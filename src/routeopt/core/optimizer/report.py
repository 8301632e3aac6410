"""Weekly optimization report (markdown)."""

from routeopt.core.optimizer.models import OptimizationResult

TOP_SAVINGS_ROWS = 5
RECOMMENDATION_ROWS = 8


def _short(model_id: str) -> str:
    return model_id.rsplit("/", 1)[-1]


def _priority(score: float) -> str:
    if score >= 8:
        return "🔴 High"
    if score >= 6:
        return "🟡 Medium"
    return "🟢 Low"


def generate_report(result: OptimizationResult) -> str:
    """Render an OptimizationResult as the weekly markdown report."""
    savings = result.savings
    impact = result.quality_impact
    rules = result.current_rules
    generated = result.timestamp.strftime("%Y-%m-%d %H:%M UTC")

    lines = [
        "# Model Optimization Report",
        f"**Generated:** {generated}",
        f"**Models Analyzed:** {result.models_analyzed}",
        f"**Current Rules:** {rules.get('dailyConversation', 0)} daily + "
        f"{rules.get('actionTasks', 0)} action + {rules.get('escalation', 0)} escalation",
        "",
        "## 📊 Summary",
        f"- **Monthly Savings Potential:** ${savings.monthly_savings:.2f} ({savings.savings_percent:.1f}%)",
        f"- **Quality Impact:** {impact.tasks_improved} improved, "
        f"{impact.tasks_maintained} maintained, {impact.tasks_degraded} degraded",
        f"- **High-Impact Changes:** {len(result.implementation_priority)} tasks",
        "",
        "## 💰 Cost Analysis",
        "| Metric | Current | Optimized | Savings |",
        "|--------|---------|-----------|---------|",
        f"| Monthly Cost (per {savings.monthly_tokens:,} tokens) | ${savings.current_monthly_cost:.2f} | "
        f"${savings.optimized_monthly_cost:.2f} | **${savings.monthly_savings:.2f}** |",
        "",
    ]

    if savings.task_improvements:
        lines += [
            "### 🎯 Top Savings Opportunities",
            "| Task Type | Current Model | Optimized Model | Savings |",
            "|-----------|---------------|-----------------|---------|",
        ]
        for item in savings.task_improvements[:TOP_SAVINGS_ROWS]:
            lines.append(
                f"| {item.task_type} | {_short(item.current_model)} | {_short(item.optimized_model)} | "
                f"{item.savings_percent:.1f}% (${item.monthly_savings:.2f}) |"
            )
        lines.append("")

    lines += [
        "## 🚀 Recommended Changes",
        "| Priority | Task Type | Recommended Model | Score | Quality | Cost/M |",
        "|----------|-----------|-------------------|-------|---------|--------|",
    ]
    for rec in result.recommendations[:RECOMMENDATION_ROWS]:
        lines.append(
            f"| {_priority(rec.score)} | {rec.task_type} | {_short(rec.recommended_model)} | "
            f"{rec.score:.1f} | {rec.quality}/10 | ${rec.total_cost:.2f} |"
        )

    lines += [
        "",
        "## 📋 Implementation Recommendations",
        "1. **Start with high-impact changes** (score ≥ 8)",
        "2. **Monitor quality** for 1-2 weeks after changes",
        "3. **Adjust usage mix** based on actual performance",
        "4. **Re-run optimization** monthly for continuous improvement",
        "",
        "## ⚠️ Assumptions & Limitations",
        f"- **Monthly tokens:** {savings.monthly_tokens:,}",
        "- **Usage mix:** Estimated based on typical patterns",
        "- **Quality scores:** Subjective assessments",
        f"- **Cost data:** {result.timestamp.strftime('%Y-%m-%d')} pricing",
    ]
    return "\n".join(lines) + "\n"
