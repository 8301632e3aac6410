"""Discovery report (markdown)."""

from routeopt.core.discovery.models import DiscoveryResult
from routeopt.core.fileio import iso_timestamp


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100:.1f}%" if whole else "n/a"


def generate_discovery_report(result: DiscoveryResult) -> str:
    lines = [
        "# Task Discovery Report",
        f"**Generated:** {iso_timestamp()}",
        f"**Total Tasks Analyzed:** {result.total_tasks}",
        f"**Known Tasks:** {len(result.known_tasks)}",
        f"**Unknown Tasks:** {len(result.unknown_tasks)}",
        f"**Newly Discovered:** {len(result.newly_discovered)}",
        "",
    ]

    if result.known_tasks:
        lines += [
            "## ✅ Known Tasks",
            "| Description | Task Type | Source |",
            "|-------------|-----------|--------|",
        ]
        lines += [f"| {t.description} | {t.task_type} | {t.source} |" for t in result.known_tasks]
        lines.append("")

    if result.unknown_tasks:
        lines += [
            "## 🔍 Unknown Tasks (Classified)",
            "| Description | Classified As | Confidence | Reasoning |",
            "|-------------|---------------|------------|-----------|",
        ]
        for task in result.unknown_tasks:
            c = task.classification
            lines.append(f"| {task.description} | {c.task_type} | {c.confidence:.2f} | {c.reasoning} |")
        lines.append("")

    if result.newly_discovered:
        lines += [
            "## 🎉 Newly Discovered Task Types",
            "| ID | Name | Description | Category |",
            "|----|------|-------------|----------|",
        ]
        for task in result.newly_discovered:
            lines.append(f"| {task.id} | {task.name} | {task.description[:50]} | {task.category} |")
        lines += [
            "",
            f"**Taxonomy Updated:** Added {len(result.newly_discovered)} new task types to taxonomy.json",
        ]

    taxonomy = result.taxonomy
    lines += [
        "## 📊 Summary",
        f"- **Coverage:** {_percent(len(result.known_tasks), result.total_tasks)} of tasks recognized",
        f"- **Discovery Rate:** {_percent(len(result.newly_discovered), len(result.unknown_tasks))} "
        "of unknown tasks classified",
        f"- **Taxonomy Size:** {len(taxonomy.tasks)} task types across {len(taxonomy.categories)} categories",
    ]
    return "\n".join(lines) + "\n"
