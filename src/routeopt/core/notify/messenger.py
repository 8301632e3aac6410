"""
Chat delivery.

Notifier is the protocol the services send through. CliNotifier shells
out to the OpenClaw messaging CLI:

    openclaw message send --channel telegram --target <T> --message <text> --json
        [--buttons <json>] [--media <path>]

The target comes from configuration, then the environment, then the
first entry of OpenClaw's Telegram allowFrom credentials file.
RecordingNotifier keeps messages in memory.
"""

import json
import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from routeopt.core.exceptions import NotificationError
from routeopt.core.notify.formatting import MESSAGE_LIMIT, truncate

logger = logging.getLogger(__name__)

TARGET_ENV_VARS = (
    "MODEL_OPTIMIZER_TELEGRAM_TARGET",
    "OPENCLAW_TELEGRAM_TARGET",
    "OPENCLAW_TELEGRAM_CHAT_ID",
    "TELEGRAM_TARGET",
)
BUTTON_TEXT_LIMIT = 64
CALLBACK_LIMIT = 64


class Button(BaseModel):
    """An inline button: label shown to the operator, token sent back."""

    label: str
    callback_token: str


class SentMessage(BaseModel):
    text: str
    buttons: list[Button] = Field(default_factory=list)
    media: str | None = None


@runtime_checkable
class Notifier(Protocol):
    """Protocol for chat delivery."""

    def send_message(
        self,
        text: str,
        buttons: Sequence[Button] | None = None,
        media: str | None = None,
    ) -> dict[str, Any]:
        """
        Deliver one message.

        Returns:
            Delivery acknowledgement

        Raises:
            NotificationError: If the message could not be delivered
        """
        ...


def allow_from_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".openclaw" / "credentials" / "telegram-default-allowFrom.json"


def resolve_target(
    configured: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> str | None:
    """
    Find the chat target.

    Args:
        configured: Explicit target from configuration
        environ: Environment to read (defaults to os.environ)
        home: Home directory holding .openclaw/credentials

    Returns:
        Target id, or None if nothing is configured
    """
    if configured:
        return str(configured)

    env = os.environ if environ is None else environ
    for name in TARGET_ENV_VARS:
        if env.get(name):
            return str(env[name])

    path = allow_from_path(home)
    if not path.exists():
        return None
    try:
        allowed = json.loads(path.read_text(encoding="utf-8")).get("allowFrom")
    except (OSError, json.JSONDecodeError, AttributeError) as e:
        logger.warning(f"Failed to read telegram allowFrom list: {e}")
        return None
    if isinstance(allowed, list) and allowed:
        return str(allowed[0])
    return None


def buttons_payload(buttons: Sequence[Button]) -> list[list[dict[str, str]]]:
    """Buttons as a single inline keyboard row."""
    return [
        [
            {
                "text": button.label[:BUTTON_TEXT_LIMIT],
                "callback_data": button.callback_token[:CALLBACK_LIMIT],
            }
            for button in buttons
        ]
    ]


class CliNotifier:
    """
    Sends messages with the OpenClaw CLI.

    Example:
        >>> notifier = CliNotifier(target="123456")
        >>> notifier.send_message("Weekly summary", media="/tmp/report.md")
        {'ok': True}
    """

    def __init__(
        self,
        target: str | None = None,
        channel: str = "telegram",
        command: str = "openclaw",
        message_limit: int = MESSAGE_LIMIT,
    ) -> None:
        self.target = target
        self.channel = channel
        self.command = command
        self.message_limit = message_limit

    def build_args(self, target: str, text: str, buttons: Sequence[Button] | None, media: str | None) -> list[str]:
        args = [
            self.command,
            "message",
            "send",
            "--channel",
            self.channel,
            "--target",
            target,
            "--message",
            truncate(text, self.message_limit),
            "--json",
        ]
        if buttons:
            args += ["--buttons", json.dumps(buttons_payload(buttons))]
        if media:
            args += ["--media", str(media)]
        return args

    def send_message(
        self,
        text: str,
        buttons: Sequence[Button] | None = None,
        media: str | None = None,
    ) -> dict[str, Any]:
        target = resolve_target(self.target)
        if not target:
            raise NotificationError(
                "Telegram target not configured. Set MODEL_OPTIMIZER_TELEGRAM_TARGET or allowFrom credentials."
            )

        try:
            result = subprocess.run(
                self.build_args(target, text, buttons, media),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise NotificationError(f"Failed to run {self.command}: {e}", command=self.command) from e

        if result.returncode != 0:
            error_msg = result.stderr.strip() or "Unknown error"
            raise NotificationError(f"Message send failed: {error_msg}", returncode=result.returncode)

        stdout = result.stdout.strip()
        if not stdout:
            return {"ok": True}
        try:
            return json.loads(stdout)
        except json.JSONDecodeError:
            return {"ok": True, "raw": stdout}


class RecordingNotifier:
    """Keeps every message in memory instead of delivering it."""

    def __init__(self) -> None:
        self.messages: list[SentMessage] = []

    def send_message(
        self,
        text: str,
        buttons: Sequence[Button] | None = None,
        media: str | None = None,
    ) -> dict[str, Any]:
        self.messages.append(SentMessage(text=text, buttons=list(buttons or []), media=media))
        return {"ok": True, "recorded": len(self.messages)}
