"""Fixed bot commands and the replies they produce."""

from __future__ import annotations

from enum import StrEnum

import structlog

from src.bot.allowlist import AllowList
from src.bot.types import TgMessage

logger = structlog.stdlib.get_logger()

ACCESS_DENIED = "Access denied"
LOGIN_OK = "Login successful"
USAGE_HINT = "Use /start to check access or /id to get your ID"


class Command(StrEnum):
    HELP = "help"
    START = "start"
    ID = "id"


_DESCRIPTIONS: dict[Command, str] = {
    Command.HELP: "Show this message",
    Command.START: "Check access",
    Command.ID: "Show your Telegram ID",
}


def help_text() -> str:
    lines = ["Available commands:"]
    lines.extend(f"/{cmd.value} - {desc}" for cmd, desc in _DESCRIPTIONS.items())
    return "\n".join(lines)


def parse_command(text: str | None, bot_username: str | None = None) -> Command | None:
    """Return the command in *text*, or None for anything else.

    ``/cmd@name`` is accepted only when *name* is this bot (or unknown).
    """
    if not text or not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0][1:]
    name, _, target = head.partition("@")
    if target and bot_username and target.lower() != bot_username.lower():
        return None
    try:
        return Command(name.lower())
    except ValueError:
        return None


def reply_for(
    msg: TgMessage,
    allow: AllowList,
    bot_username: str | None = None,
) -> str | None:
    """Compute the reply to *msg*; None means stay silent."""
    cmd = parse_command(msg.text, bot_username)
    uid = msg.from_user.id if msg.from_user is not None else None

    if cmd is Command.HELP:
        return help_text()

    if uid is None:
        if cmd is not None:
            logger.warning("bot_message_without_sender", chat_id=msg.chat.id)
        return None

    if cmd is Command.ID:
        return f"Your Telegram ID: {uid}"

    if not allow.is_authorized(uid):
        logger.warning("bot_unauthorized_user", user_id=uid)
        return ACCESS_DENIED

    if cmd is Command.START:
        logger.info("bot_authorized_user", user_id=uid)
        return LOGIN_OK

    return USAGE_HINT
