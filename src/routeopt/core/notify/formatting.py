"""
Chat formatting for markdown reports.

Telegram renders a restricted MarkdownV2 dialect and rejects messages
longer than 4096 characters, so reports are flattened before sending:
headings lose their hashes, bullets are normalized, links become
"text (url)", tables are compacted to a header line plus a few bullet
rows, MarkdownV2 specials are escaped and the result is truncated.
"""

import re

MESSAGE_LIMIT = 4096
TABLE_ROW_LIMIT = 6
TRUNCATED_SUFFIX = "\n\n...\\(truncated\\)"

_SPECIALS = re.compile(r"([_*\[\]()~`>#+\-=|{}.!])")
_TABLE_LINE = re.compile(r"^\s*\|.*\|\s*$")
_SEPARATOR_CELL = re.compile(r"^:?-{3,}:?$")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_HEADING = re.compile(r"^\s*#{1,6}\s+")
_BULLET = re.compile(r"^\s*[-*]\s+")


def escape_markdown(value: str) -> str:
    """Escape backslashes and every MarkdownV2 special character."""
    return _SPECIALS.sub(r"\\\1", str(value).replace("\\", "\\\\"))


def truncate(text: str, limit: int = MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(TRUNCATED_SUFFIX))] + TRUNCATED_SUFFIX


def _cells(line: str) -> list[str]:
    body = line.strip()
    body = body[1:] if body.startswith("|") else body
    body = body[:-1] if body.endswith("|") else body
    return [cell.strip() for cell in body.split("|")]


def compact_table(lines: list[str], row_limit: int = TABLE_ROW_LIMIT) -> list[str]:
    """
    Compact a markdown table to "header | cells" plus bullet rows.

    Example:
        >>> compact_table(["| A | B |", "|---|---|", "| 1 | 2 |"])
        ['A | B', '- 1 | 2']
    """
    rows = [cells for cells in map(_cells, lines) if any(cells)]
    rows = [cells for cells in rows if not all(_SEPARATOR_CELL.match(cell) for cell in cells)]
    if not rows:
        return []

    header, body = rows[0], rows[1:]
    output = [" | ".join(header)]
    output.extend(f"- {' | '.join(row)}" for row in body[:row_limit])
    if len(body) > row_limit:
        output.append(f"- ... {len(body) - row_limit} more row(s)")
    return output


def normalize_markdown(markdown: str) -> str:
    """Flatten markdown into chat-friendly plain lines."""
    lines = str(markdown or "").replace("\r\n", "\n").split("\n")
    output: list[str] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if _TABLE_LINE.match(line):
            block = [line]
            while i + 1 < len(lines) and _TABLE_LINE.match(lines[i + 1]):
                i += 1
                block.append(lines[i])
            output.extend(compact_table(block))
        else:
            line = _LINK.sub(r"\1 (\2)", line)
            line = _HEADING.sub("", line)
            line = _BULLET.sub("- ", line)
            output.append(line)
        i += 1

    return "\n".join(output)


def format_for_chat(markdown: str, limit: int = MESSAGE_LIMIT) -> str:
    """Normalize, escape and truncate a markdown report for MarkdownV2."""
    return truncate(escape_markdown(normalize_markdown(markdown)), limit)
