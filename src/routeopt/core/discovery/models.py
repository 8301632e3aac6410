"""Task discovery data models."""

from datetime import datetime

from pydantic import Field

from routeopt.core.routing.models import RoutingModel

DEFAULT_CATEGORIES = ["Daily Conversation", "Action Tasks", "Escalation"]
DEFAULT_CATEGORY = "Action Tasks"


class Classification(RoutingModel):
    """A classifier verdict for one task description."""

    task_type: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    category: str = DEFAULT_CATEGORY
    source: str
    reasoning: str = ""


class TaxonomyTask(RoutingModel):
    id: str
    name: str
    description: str = ""
    category: str = DEFAULT_CATEGORY
    discovered_at: datetime | None = None


class Taxonomy(RoutingModel):
    """Task types learned from previous runs."""

    tasks: list[TaxonomyTask] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    version: str = "1.0.0"

    def task_ids(self) -> set[str]:
        return {task.id for task in self.tasks}


class KnownTask(RoutingModel):
    description: str
    task_type: str
    source: str = "fuzzy-match"


class UnknownTask(RoutingModel):
    description: str
    classification: Classification
    source: str = "llm-classification"


class DiscoveredTask(TaxonomyTask):
    confidence: float


class DiscoveryResult(RoutingModel):
    """Outcome of one discovery pass over a routing document."""

    total_tasks: int
    known_tasks: list[KnownTask] = Field(default_factory=list)
    unknown_tasks: list[UnknownTask] = Field(default_factory=list)
    newly_discovered: list[DiscoveredTask] = Field(default_factory=list)
    taxonomy: Taxonomy = Field(default_factory=Taxonomy)
