"""
Task phrase extraction and fuzzy matching.

Extraction reads the bullet rules under task headings (any heading that
mentions "track" or "escalation") and keeps only the task part of each
rule: "- ✅ Debugging → Claude Sonnet" yields "Debugging".

Matching is loose: a description matches a known phrase when either
contains the other (raw or normalized), or when at least 60% of their
normalized tokens overlap.
"""

import re

from routeopt.core.catalog import RoutingTables
from routeopt.core.discovery.models import Taxonomy

TOKEN_OVERLAP_THRESHOLD = 0.6

_LEADING_MARKS = re.compile("^[\u2705\u2714\u2611\u26a1\U0001f50d\U0001f3af\U0001f527\u2699\U0001f6e0\U0001f9f0\ufe0f]+")
_HEADING_DECORATION = re.compile(r"[*_`]")


def normalize_task_text(value: str) -> str:
    """
    Lowercase, unify agent/coordination wording and strip punctuation.

    Example:
        >>> normalize_task_text("Sub-agent coordination (parallel)")
        'multi agent coordinate parallel'
    """
    if not value:
        return ""
    text = value.lower()
    text = re.sub(r"sub[\s-]*agent", "multi agent", text)
    text = re.sub(r"agents?", "agent", text)
    text = re.sub(r"coordination|coordinating", "coordinate", text)
    text = re.sub(r"[()]", " ", text)
    text = re.sub(r"[^a-z0-9\s-]", " ", text)
    text = text.replace("-", " ")
    return re.sub(r"\s+", " ", text).strip()


def token_overlap(text_a: str, text_b: str) -> float:
    """Shared tokens divided by the larger token set."""
    tokens_a = set(text_a.split())
    tokens_b = set(text_b.split())
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / max(len(tokens_a), len(tokens_b))


def is_task_section_header(line: str) -> bool:
    normalized = re.sub(r"\s+", " ", _HEADING_DECORATION.sub("", line)).strip().lower()
    return bool(normalized) and ("track" in normalized or "escalation" in normalized)


def _task_part(bullet: str) -> str:
    cleaned = _LEADING_MARKS.sub("", bullet[1:].strip()).strip()

    task = cleaned
    if "→" in cleaned:
        task = cleaned.split("→", 1)[0].strip()
    elif ":" in cleaned:
        task = cleaned.split(":", 1)[0].strip()

    # "Cheap edits use X" -> "Cheap edits"
    if "use" in task and "edits" in task:
        task = task[: task.index("use")].strip()
    return task


def extract_task_descriptions(text: str) -> list[str]:
    """Task phrases of every bullet rule under a task heading, in document order."""
    tasks: list[str] = []
    in_task_section = False

    for line in text.split("\n"):
        trimmed = line.strip()

        if is_task_section_header(trimmed):
            in_task_section = True
            continue
        if trimmed.startswith("##") or trimmed.startswith("**"):
            continue

        if in_task_section and trimmed.startswith("-"):
            task = _task_part(trimmed)
            if task:
                tasks.append(task)

        if not trimmed:
            in_task_section = False

    return tasks


def _similar(description: str, candidate: str) -> bool:
    if not description or not candidate:
        return False
    desc_lower = description.lower()
    cand_lower = candidate.lower()
    desc_norm = normalize_task_text(description)
    cand_norm = normalize_task_text(candidate)
    if desc_lower in cand_lower or cand_lower in desc_lower:
        return True
    if cand_norm and desc_norm and (cand_norm in desc_norm or desc_norm in cand_norm):
        return True
    return token_overlap(desc_norm, cand_norm) >= TOKEN_OVERLAP_THRESHOLD


def fuzzy_match_task(description: str, tables: RoutingTables, taxonomy: Taxonomy | None = None) -> str | None:
    """
    Known task type for a description, or None.

    The phrase table is searched first, then the learned taxonomy (by
    task name and by the description it was discovered from).
    """
    for phrase, task_type in tables.task_phrases.items():
        if _similar(description, phrase):
            return task_type

    for task in (taxonomy.tasks if taxonomy else []):
        if _similar(description, task.name) or _similar(description, task.description):
            return task.id
    return None
