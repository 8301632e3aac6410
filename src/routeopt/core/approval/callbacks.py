"""
Callback tokens for chat buttons.

Item buttons carry  opt:item:<approve|reject|keep>:<batchId>:<n>
Final buttons carry opt:final:<apply|cancel>:<batchId>

Chat platforms cap callback data (64 characters on Telegram). When a
token would exceed the cap, the batch id is replaced by the first 12 hex
characters of its sha256 digest; ApprovalBatchStore.resolve_batch_id maps
the digest back to the stored batch.
"""

import hashlib
import re
from enum import Enum

from pydantic import BaseModel

from routeopt.core.approval.models import ApprovalStatus

NAMESPACE = "opt"
CALLBACK_LIMIT = 64
HASH_LENGTH = 12
CALLBACK_PREFIX = "callback_data:"

ITEM_ACTIONS = ("approve", "reject", "keep")
FINAL_ACTIONS = ("apply", "cancel")

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_ITEM_TOKEN = re.compile(r"^(?P<ns>[a-z]+):item:(?P<action>approve|reject|keep):(?P<batch>[a-zA-Z0-9._-]+):(?P<index>\d+)$")
_FINAL_TOKEN = re.compile(r"^(?P<ns>[a-z]+):final:(?P<action>apply|cancel):(?P<batch>[a-zA-Z0-9._-]+)$")

_DECISIONS = {
    "approve": ApprovalStatus.APPROVED,
    "reject": ApprovalStatus.REJECTED,
    "keep": ApprovalStatus.KEPT,
}


class CallbackKind(str, Enum):
    ITEM = "item"
    FINAL = "final"
    UNKNOWN = "unknown"


class CallbackCommand(BaseModel):
    """A parsed callback token."""

    kind: CallbackKind
    action: str | None = None
    batch_id: str | None = None
    item_index: int | None = None
    raw: str = ""

    @property
    def handled(self) -> bool:
        return self.kind is not CallbackKind.UNKNOWN


def sanitize_batch_id(batch_id: str) -> str:
    """Replace characters that may not appear in a token with underscores."""
    return _UNSAFE_ID_CHARS.sub("_", str(batch_id))


def hash_batch_id(batch_id: str) -> str:
    return hashlib.sha256(batch_id.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def _fit(prefix: str, batch_id: str, suffix: str, limit: int) -> str:
    safe = sanitize_batch_id(batch_id)
    token = f"{prefix}{safe}{suffix}"
    if len(token) <= limit:
        return token
    token = f"{prefix}{hash_batch_id(safe)}{suffix}"
    if len(token) > limit:
        raise ValueError(f"Callback token {token!r} exceeds the {limit}-character limit even with a hashed batch id")
    return token


def build_item_token(
    action: str,
    batch_id: str,
    item_index: int,
    namespace: str = NAMESPACE,
    limit: int = CALLBACK_LIMIT,
) -> str:
    """
    Token for a per-item decision button.

    Example:
        >>> build_item_token("approve", "weekly-2026-02-01", 3)
        'opt:item:approve:weekly-2026-02-01:3'

    Raises:
        ValueError: If action is unknown, or the token exceeds limit even
            with the batch id hashed
    """
    if action not in ITEM_ACTIONS:
        raise ValueError(f"Unknown item action: {action}")
    return _fit(f"{namespace}:item:{action}:", batch_id, f":{item_index}", limit)


def build_final_token(
    action: str,
    batch_id: str,
    namespace: str = NAMESPACE,
    limit: int = CALLBACK_LIMIT,
) -> str:
    """Token for a final apply/cancel button."""
    if action not in FINAL_ACTIONS:
        raise ValueError(f"Unknown final action: {action}")
    return _fit(f"{namespace}:final:{action}:", batch_id, "", limit)


def parse_callback(raw: str, namespace: str = NAMESPACE) -> CallbackCommand:
    """
    Parse inbound callback data.

    A leading "callback_data:" label, as some clients forward it, is
    ignored. Anything that is not an item or final token for the
    namespace parses as CallbackKind.UNKNOWN.
    """
    text = str(raw or "").strip()
    if text.startswith(CALLBACK_PREFIX):
        text = text[len(CALLBACK_PREFIX):].strip()

    match = _ITEM_TOKEN.match(text)
    if match and match.group("ns") == namespace:
        return CallbackCommand(
            kind=CallbackKind.ITEM,
            action=match.group("action"),
            batch_id=match.group("batch"),
            item_index=int(match.group("index")),
            raw=text,
        )

    match = _FINAL_TOKEN.match(text)
    if match and match.group("ns") == namespace:
        return CallbackCommand(
            kind=CallbackKind.FINAL,
            action=match.group("action"),
            batch_id=match.group("batch"),
            raw=text,
        )

    return CallbackCommand(kind=CallbackKind.UNKNOWN, raw=text)


def decision_for_action(action: str) -> ApprovalStatus:
    """
    Item decision recorded for a button action.

    Raises:
        ValueError: If action is not approve, reject or keep
    """
    try:
        return _DECISIONS[action]
    except KeyError:
        raise ValueError(f"Unknown item action: {action}") from None
