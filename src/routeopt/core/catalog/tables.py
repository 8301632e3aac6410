"""
Immutable routing tables.

RoutingTables bundles the static phrase, quality, preference, pin and label
data into a single read-only object. It is built once at process start
(RoutingTables.default() or load_tables()) and handed to the parser,
rewriter and recommendation engine as an explicit argument.

Example:
    >>> tables = RoutingTables.default()
    >>> tables.quality("debugging", "claude-sonnet-4-6")
    10
    >>> tables.quality("debugging", "unknown/model")
    5
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from routeopt.core.catalog import data

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 5


def _freeze_mapping(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class RoutingTables:
    """
    Read-only routing data.

    Attributes:
        task_phrases: SOUL.md phrase -> task type id
        quality_scores: task type -> model id -> quality (1-10)
        preferences: task type -> models that earn the preference bonus
        pins: task type -> hard-pinned model id
        allowed_models: default candidate allow-list
        vision_tasks: task types that require vision-capable models
        model_labels: model id -> label written into SOUL.md
        usage_mix: task type -> traffic share used for savings estimates
    """

    task_phrases: Mapping[str, str]
    quality_scores: Mapping[str, Mapping[str, int]]
    preferences: Mapping[str, tuple[str, ...]]
    pins: Mapping[str, str]
    allowed_models: tuple[str, ...]
    vision_tasks: frozenset[str]
    model_labels: Mapping[str, str]
    usage_mix: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        *,
        task_phrases: Mapping[str, str],
        quality_scores: Mapping[str, Mapping[str, int]],
        preferences: Mapping[str, list[str] | tuple[str, ...]] | None = None,
        pins: Mapping[str, str] | None = None,
        allowed_models: list[str] | tuple[str, ...] | None = None,
        vision_tasks: list[str] | tuple[str, ...] | frozenset[str] | None = None,
        model_labels: Mapping[str, str] | None = None,
        usage_mix: Mapping[str, float] | None = None,
    ) -> "RoutingTables":
        """Build tables from plain dicts/lists, freezing every container."""
        return cls(
            task_phrases=_freeze_mapping(task_phrases),
            quality_scores=_freeze_mapping(
                {task: _freeze_mapping(scores) for task, scores in quality_scores.items()}
            ),
            preferences=_freeze_mapping(
                {task: tuple(models) for task, models in (preferences or {}).items()}
            ),
            pins=_freeze_mapping(pins or {}),
            allowed_models=tuple(allowed_models or ()),
            vision_tasks=frozenset(vision_tasks or ()),
            model_labels=_freeze_mapping(model_labels or {}),
            usage_mix=_freeze_mapping(usage_mix or {}),
        )

    @classmethod
    def default(cls) -> "RoutingTables":
        """Tables built from the data shipped with routeopt."""
        return cls.build(
            task_phrases=data.TASK_PHRASES,
            quality_scores=data.QUALITY_SCORES,
            preferences=data.TASK_PREFERENCES,
            pins=data.PINNED_MODELS,
            allowed_models=data.DEFAULT_ALLOWED_MODELS,
            vision_tasks=data.VISION_TASKS,
            model_labels=data.MODEL_LABELS,
            usage_mix=data.DEFAULT_USAGE_MIX,
        )

    def quality(self, task_type: str, model_id: str, default: int = DEFAULT_QUALITY) -> int:
        """Quality score for a model on a task type (default when unrated)."""
        return self.quality_scores.get(task_type, {}).get(model_id, default)

    def is_preferred(self, task_type: str, model_id: str) -> bool:
        return model_id in self.preferences.get(task_type, ())

    def requires_vision(self, task_type: str) -> bool:
        return task_type in self.vision_tasks

    @property
    def phrases_longest_first(self) -> list[tuple[str, str]]:
        """(phrase, task type) pairs ordered so longer phrases are tried first."""
        return sorted(self.task_phrases.items(), key=lambda item: len(item[0]), reverse=True)

    @property
    def task_types(self) -> list[str]:
        """Distinct task type ids in phrase-table order."""
        return list(dict.fromkeys(self.task_phrases.values()))


def load_tables(overrides_path: Path | None = None) -> RoutingTables:
    """
    Build routing tables, optionally overlaying a JSON overrides file.

    The overrides file may contain any of the keys taskPhrases,
    qualityScores, preferences, pins, allowedModels, visionTasks,
    modelLabels and usageMix. Mapping keys are merged over the defaults
    (qualityScores per task type); list keys replace the defaults.

    Args:
        overrides_path: Optional path to a JSON overrides file

    Returns:
        RoutingTables instance
    """
    if overrides_path is None or not overrides_path.exists():
        return RoutingTables.default()

    try:
        with overrides_path.open(encoding="utf-8") as f:
            overrides = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable routing tables override {overrides_path}: {e}")
        return RoutingTables.default()

    quality_scores = {task: dict(scores) for task, scores in data.QUALITY_SCORES.items()}
    for task, scores in overrides.get("qualityScores", {}).items():
        quality_scores.setdefault(task, {}).update(scores)

    return RoutingTables.build(
        task_phrases={**data.TASK_PHRASES, **overrides.get("taskPhrases", {})},
        quality_scores=quality_scores,
        preferences={**data.TASK_PREFERENCES, **overrides.get("preferences", {})},
        pins={**data.PINNED_MODELS, **overrides.get("pins", {})},
        allowed_models=overrides.get("allowedModels", data.DEFAULT_ALLOWED_MODELS),
        vision_tasks=overrides.get("visionTasks", data.VISION_TASKS),
        model_labels={**data.MODEL_LABELS, **overrides.get("modelLabels", {})},
        usage_mix={**data.DEFAULT_USAGE_MIX, **overrides.get("usageMix", {})},
    )
