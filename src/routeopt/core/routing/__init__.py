"""
Routing document model.

Parses SOUL.md into sections and addressable rule lines, rewrites model
names in place, validates the resulting change sets and applies them with
backup and rollback.
"""

from routeopt.core.routing.apply import apply_change_set, update_routing_config
from routeopt.core.routing.diff import generate_diff, render_change_set
from routeopt.core.routing.exceptions import (
    ParseError,
    PostWriteVerificationError,
    RoutingError,
    StaleDocumentError,
    ValidationError,
)
from routeopt.core.routing.labels import ModelLabeler
from routeopt.core.routing.models import (
    ApplyResult,
    ChangeSet,
    ModifiedLine,
    RoutingDocument,
    RuleLine,
    Section,
    TaskMatch,
    ValidationResult,
)
from routeopt.core.routing.parser import (
    build_rule_index,
    parse_document,
    read_document,
    render_document,
)
from routeopt.core.routing.rewriter import (
    apply_recommendations_to_document,
    build_single_item_change_set,
    recommendations_to_label_map,
    replace_model_for_task,
)
from routeopt.core.routing.sections import SectionKind, is_section_header
from routeopt.core.routing.validator import validate_change_set

__all__ = [
    "ApplyResult",
    "ChangeSet",
    "ModelLabeler",
    "ModifiedLine",
    "ParseError",
    "PostWriteVerificationError",
    "RoutingDocument",
    "RoutingError",
    "RuleLine",
    "Section",
    "SectionKind",
    "StaleDocumentError",
    "TaskMatch",
    "ValidationError",
    "ValidationResult",
    "apply_change_set",
    "apply_recommendations_to_document",
    "build_rule_index",
    "build_single_item_change_set",
    "generate_diff",
    "is_section_header",
    "parse_document",
    "read_document",
    "recommendations_to_label_map",
    "render_change_set",
    "render_document",
    "replace_model_for_task",
    "update_routing_config",
    "validate_change_set",
]
