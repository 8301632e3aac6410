"""
Task type discovery.

Extracts task phrases from a routing document, recognizes known ones and
classifies the rest, learning new task types into a taxonomy.
"""

from routeopt.core.discovery.classifier import GeminiClassifier, classify_with_local_patterns
from routeopt.core.discovery.matching import extract_task_descriptions, fuzzy_match_task
from routeopt.core.discovery.models import Classification, DiscoveryResult, Taxonomy
from routeopt.core.discovery.report import generate_discovery_report
from routeopt.core.discovery.service import DiscoveryService
from routeopt.core.discovery.taxonomy import TaxonomyStore
from routeopt.core.exceptions import ClassificationError

__all__ = [
    "Classification",
    "ClassificationError",
    "DiscoveryResult",
    "DiscoveryService",
    "GeminiClassifier",
    "Taxonomy",
    "TaxonomyStore",
    "classify_with_local_patterns",
    "extract_task_descriptions",
    "fuzzy_match_task",
    "generate_discovery_report",
]
