"""Exception hierarchy for the Telegram bot front end."""

from __future__ import annotations


class BotError(Exception):
    """Base exception for all bot errors."""


class BotConnectionError(BotError):
    """Telegram Bot API unreachable or returned a non-200 status."""


class BotApiError(BotError):
    """Telegram Bot API answered with ``ok: false``."""
