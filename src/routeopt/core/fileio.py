"""
Small file and timestamp helpers shared by the stores.

JSON records are written atomically: the payload goes to a temp file in
the destination directory which is then renamed over the target.
"""

import json
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = moment or utc_now()
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filesystem_stamp(moment: datetime | None = None) -> str:
    """
    Timestamp safe for file names and ids.

    Example:
        >>> filesystem_stamp(datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc))
        '2026-02-01T09-30-00-000Z'
    """
    return re.sub(r"[:.]", "-", iso_timestamp(moment))


def read_text_exact(path: Path) -> str:
    """Read a text file without newline translation."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text_exact(path: Path, text: str) -> None:
    """Write a text file without newline translation."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def atomic_write_text(path: Path, text: str) -> Path:
    """Write text to path via a temp file and rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp.write(text)
        tmp.flush()
        tmp_path = Path(tmp.name)

    tmp_path.replace(path)
    return path


def write_json_atomic(path: Path, payload: Any) -> Path:
    """Serialize payload as indented JSON and write it atomically."""
    return atomic_write_text(path, json.dumps(payload, indent=2) + "\n")
