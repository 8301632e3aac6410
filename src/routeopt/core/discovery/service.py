"""
Task discovery.

Finds the task phrases of a routing document, matches each against the
phrase table and the learned taxonomy, and classifies the rest. Verdicts
above the confidence threshold with a task type the taxonomy does not
have yet are added to it.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from routeopt.core.catalog import RoutingTables
from routeopt.core.discovery.matching import extract_task_descriptions, fuzzy_match_task
from routeopt.core.discovery.models import (
    Classification,
    DiscoveredTask,
    DiscoveryResult,
    KnownTask,
    TaxonomyTask,
    UnknownTask,
)
from routeopt.core.discovery.taxonomy import TaxonomyStore
from routeopt.core.fileio import utc_now

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.6


class TaskClassifier(Protocol):
    def classify(self, description: str) -> Classification: ...


def display_name(task_type: str) -> str:
    """'sub-agent-coordination' -> 'Sub Agent Coordination'"""
    return " ".join(word.capitalize() for word in task_type.split("-"))


class DiscoveryService:
    """
    Discovers task types in a routing document.

    Attributes:
        tables: Phrase table used for known tasks
        taxonomy_store: Learned task types, updated in place
        classifier: Classifies descriptions nothing matches
        confidence_threshold: Minimum confidence (exclusive) to learn a task type
    """

    def __init__(
        self,
        tables: RoutingTables,
        taxonomy_store: TaxonomyStore,
        classifier: TaskClassifier,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.tables = tables
        self.taxonomy_store = taxonomy_store
        self.classifier = classifier
        self.confidence_threshold = confidence_threshold
        self.clock = clock

    def discover_task_types(self, text: str) -> DiscoveryResult:
        """
        Classify every task phrase in a document.

        Args:
            text: Routing document content

        Returns:
            DiscoveryResult; the taxonomy it carries includes any task
            types learned during this call
        """
        descriptions = extract_task_descriptions(text)
        taxonomy = self.taxonomy_store.load()
        result = DiscoveryResult(total_tasks=len(descriptions), taxonomy=taxonomy)
        seen = taxonomy.task_ids()

        for description in descriptions:
            task_type = fuzzy_match_task(description, self.tables, taxonomy)
            if task_type:
                result.known_tasks.append(KnownTask(description=description, task_type=task_type))
                continue

            classification = self.classifier.classify(description)
            result.unknown_tasks.append(UnknownTask(description=description, classification=classification))

            if classification.task_type in seen or classification.confidence <= self.confidence_threshold:
                continue
            seen.add(classification.task_type)
            result.newly_discovered.append(
                DiscoveredTask(
                    id=classification.task_type,
                    name=display_name(classification.task_type),
                    description=description,
                    confidence=classification.confidence,
                )
            )

        if result.newly_discovered:
            now = self.clock()
            for task in result.newly_discovered:
                taxonomy.tasks.append(
                    TaxonomyTask(
                        id=task.id,
                        name=task.name,
                        description=task.description,
                        category=task.category,
                        discovered_at=now,
                    )
                )
                if task.category not in taxonomy.categories:
                    taxonomy.categories.append(task.category)
            self.taxonomy_store.save(taxonomy)
            logger.info(f"Learned {len(result.newly_discovered)} new task type(s)")

        return result
