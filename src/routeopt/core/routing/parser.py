"""
SOUL.md routing document parser.

Walks the document top to bottom, opening a section at every recognized
heading and collecting bullet lines inside an open section as rule lines.
Lines outside any section are never rule lines.

Example:
    >>> from routeopt.core.catalog import RoutingTables
    >>> text = "**Daily Conversation Track:**\\n- Casual chat, greetings, jokes: DeepSeek Chat"
    >>> doc = parse_document(text, RoutingTables.default())
    >>> doc.sections[SectionKind.DAILY_CONVERSATION].rules[0].matches[0].task_type
    'casual-chat'
    >>> render_document(doc) == text
    True
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from routeopt.core.catalog import RoutingTables
from routeopt.core.fileio import read_text_exact
from routeopt.core.routing.exceptions import ParseError
from routeopt.core.routing.models import (
    RoutingDocument,
    RuleLine,
    RuleReference,
    Section,
    TaskMatch,
    is_bullet_line,
)
from routeopt.core.routing.sections import SECTION_ORDER, SectionKind, is_section_header

logger = logging.getLogger(__name__)

LINE_BREAK = "\n"


def resolve_home_path(path: str | Path) -> Path:
    """Expand a leading '~' and make the path absolute."""
    return Path(os.path.expanduser(str(path))).resolve()


def split_lines(text: str) -> list[str]:
    """
    Split text on "\\n" only.

    A "\\r" before the break stays at the end of its line, so documents with
    "\\r\\n" or mixed endings keep one entry per line and join_lines()
    restores them byte for byte.
    """
    return text.split(LINE_BREAK)


def join_lines(lines: Sequence[str]) -> str:
    return LINE_BREAK.join(lines)


def split_line_ending(line: str) -> tuple[str, str]:
    """Separate a trailing "\\r" from the line body."""
    if line.endswith("\r"):
        return line[:-1], "\r"
    return line, ""


def find_task_matches(line: str, tables: RoutingTables) -> list[TaskMatch]:
    """
    Find every task phrase contained in a line.

    Matches are ordered longest phrase first, so a phrase that contains a
    shorter one is applied before it.
    """
    text = line.strip()
    return [
        TaskMatch(description=phrase, task_type=task_type)
        for phrase, task_type in tables.phrases_longest_first
        if phrase in text
    ]


def parse_document(
    text: str,
    tables: RoutingTables,
    path: str = "",
    resolved_path: str = "",
) -> RoutingDocument:
    """
    Parse routing document text into sections and rule lines.

    Args:
        text: Raw document content
        tables: Routing tables providing the phrase -> task type map
        path: Path as supplied by the caller (informational)
        resolved_path: Absolute path the text was read from (informational)

    Returns:
        RoutingDocument with one Section per SectionKind. Sections that do
        not appear in the text have start_line None and no rules.
    """
    lines = split_lines(text)
    sections = {kind: Section(kind=kind) for kind in SECTION_ORDER}

    current: Section | None = None
    for index, line in enumerate(lines):
        line_number = index + 1

        kind = is_section_header(line)
        if kind is not None:
            if current is not None and current.end_line is None:
                current.end_line = line_number - 1
            current = sections[kind]
            current.start_line = line_number
            current.end_line = None
            continue

        if current is None:
            continue

        if is_bullet_line(line):
            current.rules.append(
                RuleLine(
                    line_number=line_number,
                    text=line,
                    matches=find_task_matches(line, tables),
                )
            )

    if current is not None and current.end_line is None:
        current.end_line = len(lines)

    document = RoutingDocument(
        path=path,
        resolved_path=resolved_path,
        content=text,
        lines=lines,
        sections=sections,
    )
    logger.debug(f"Parsed routing document {path or '<text>'}: {document.rule_counts()}")
    return document


def read_document(path: str | Path, tables: RoutingTables) -> RoutingDocument:
    """
    Read and parse a routing document from disk.

    Raises:
        ParseError: If the file cannot be read
    """
    resolved = resolve_home_path(path)
    try:
        text = read_text_exact(resolved)
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(str(path), f"Cannot read routing document: {e}") from e
    return parse_document(text, tables, path=str(path), resolved_path=str(resolved))


def build_rule_index(document: RoutingDocument) -> dict[str, list[RuleReference]]:
    """
    Group every task match in the document by task type.

    Entries keep section order, then line order.
    """
    index: dict[str, list[RuleReference]] = {}
    for kind, rule in document.iter_rules():
        for match in rule.matches:
            index.setdefault(match.task_type, []).append(
                RuleReference(
                    section=kind,
                    line_number=rule.line_number,
                    description=match.description,
                    line=rule.text,
                )
            )
    return index


def render_document(document_or_lines: RoutingDocument | Sequence[str]) -> str:
    """Join lines back into text; line endings are restored as parsed."""
    if isinstance(document_or_lines, RoutingDocument):
        return join_lines(document_or_lines.lines)
    return join_lines(document_or_lines)
