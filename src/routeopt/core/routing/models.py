"""
Routing document data models.

Defines the parsed view of a SOUL.md document (sections and addressable
rule lines) and the line-addressed change sets computed against it.

Persisted JSON uses camelCase field names (lineNumber, originalContent,
modifiedLines, ...) so change sets stored inside approval batches keep the
same shape across runs.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from routeopt.core.routing.sections import SECTION_ORDER, SectionKind

BULLET_MARKER = "-"


def is_bullet_line(text: str) -> bool:
    """True if the line is a bullet rule line (trimmed form starts with '-')."""
    return text.strip().startswith(BULLET_MARKER)


class RoutingModel(BaseModel):
    """Base model with camelCase aliases for JSON round-trips."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


class TaskMatch(RoutingModel):
    """A task type phrase found on a rule line."""

    description: str = Field(..., description="Matched phrase as written in the document")
    task_type: str = Field(..., description="Canonical task type id")


class RuleLine(RoutingModel):
    """
    A bullet line inside a routing section.

    The 1-based line number is the rule's identity; edits never insert or
    delete lines, so it stays valid for the whole pipeline.
    """

    line_number: int = Field(..., ge=1)
    text: str = Field(..., description="Raw line text, untrimmed")
    matches: list[TaskMatch] = Field(default_factory=list)


class Section(RoutingModel):
    """A routing section with its line range and rule lines."""

    kind: SectionKind
    start_line: int | None = Field(default=None, description="Heading line (1-based)")
    end_line: int | None = Field(default=None, description="Last line of the section")
    rules: list[RuleLine] = Field(default_factory=list)

    @property
    def present(self) -> bool:
        """Whether the section heading was found in the document."""
        return self.start_line is not None


class RoutingDocument(RoutingModel):
    """
    A parsed routing document.

    Attributes:
        path: Path as given by the caller
        resolved_path: Absolute path the content was read from
        content: Full original text
        lines: content split on "\\n"; a "\\r" ending stays on its line
        sections: One Section per SectionKind, in SECTION_ORDER
    """

    path: str = ""
    resolved_path: str = ""
    content: str
    lines: list[str]
    sections: dict[SectionKind, Section]

    def section(self, kind: SectionKind) -> Section:
        return self.sections[kind]

    def iter_rules(self) -> list[tuple[SectionKind, RuleLine]]:
        """All rule lines as (section, rule) pairs in section then line order."""
        return [(kind, rule) for kind in SECTION_ORDER for rule in self.sections[kind].rules]

    def rule_counts(self) -> dict[str, int]:
        return {kind.value: len(self.sections[kind].rules) for kind in SECTION_ORDER}


class RuleReference(RoutingModel):
    """One occurrence of a task type in the document (rule index entry)."""

    section: SectionKind
    line_number: int
    description: str
    line: str


class ModifiedLine(RoutingModel):
    """
    A single line substitution.

    Both before and after are full bullet lines; section is kept as a
    plain string so that change sets loaded from disk can be validated
    even when they name an unknown section.
    """

    line_number: int
    section: str
    before: str
    after: str
    task_types: list[str] = Field(default_factory=list)


class ChangeSet(RoutingModel):
    """
    A line-addressed diff between two versions of a routing document.

    Invariants (checked by validate_change_set):
    - original and proposed content have the same number of lines
    - the lines that differ are exactly the ones named in modified_lines
    """

    path: str = ""
    resolved_path: str = ""
    original_content: str
    proposed_content: str
    modified_lines: list[ModifiedLine] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of change set validation."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


class ApplyResult(RoutingModel):
    """Outcome of applying (or dry-running) a change set."""

    applied: bool
    dry_run: bool
    path: str
    backup_path: str | None = None
    modified_lines: list[ModifiedLine] = Field(default_factory=list)
    proposed_content: str | None = None
