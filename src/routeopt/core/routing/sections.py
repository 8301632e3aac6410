"""
Section header detection for SOUL.md routing documents.

The routing rules live under three decorated headings, for example:

    **Daily Conversation Track:**
    **Action Task Track (specific routing per tool type):**
    - Further escalation: ...

Detection is isolated behind is_section_header() so the strategy can
change without touching the parser.
"""

import re
from enum import Enum


class SectionKind(str, Enum):
    """The routing sections a rule line can belong to."""

    DAILY_CONVERSATION = "dailyConversation"
    ACTION_TASKS = "actionTasks"
    ESCALATION = "escalation"

    @property
    def marker(self) -> str:
        """Heading text that opens this section."""
        return SECTION_MARKERS[self]

    @property
    def label(self) -> str:
        """Human label used in diffs and reports."""
        return self.marker.rstrip(":")


SECTION_MARKERS: dict[SectionKind, str] = {
    SectionKind.DAILY_CONVERSATION: "Daily Conversation Track",
    SectionKind.ACTION_TASKS: "Action Task Track",
    SectionKind.ESCALATION: "Further escalation",
}

SECTION_ORDER: tuple[SectionKind, ...] = (
    SectionKind.DAILY_CONVERSATION,
    SectionKind.ACTION_TASKS,
    SectionKind.ESCALATION,
)

_DECORATION = re.compile(r"[*_`#]")
_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")
_WHITESPACE = re.compile(r"\s+")


def _normalize_heading(line: str) -> str:
    text = _DECORATION.sub("", line)
    text = _PARENTHETICAL.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def is_section_header(line: str) -> SectionKind | None:
    """
    Return the section a heading line opens, or None.

    A line opens a section when, after stripping markdown decoration and
    parenthetical remarks, it contains the section marker followed by a
    colon.

    Examples:
        >>> is_section_header("**Daily Conversation Track:**")
        <SectionKind.DAILY_CONVERSATION: 'dailyConversation'>
        >>> is_section_header("**Action Task Track (per tool):**")
        <SectionKind.ACTION_TASKS: 'actionTasks'>
        >>> is_section_header("- Debugging: Claude Haiku") is None
        True
    """
    normalized = _normalize_heading(line)
    if not normalized:
        return None
    for kind in SECTION_ORDER:
        if f"{kind.marker}:" in normalized:
            return kind
    return None


def section_from_name(name: str) -> SectionKind | None:
    """Look up a section by its serialized name ('dailyConversation', ...)."""
    try:
        return SectionKind(name)
    except ValueError:
        return None
