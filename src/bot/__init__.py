"""Telegram bot front end: allow-list gate and fixed commands."""

from src.bot.allowlist import AllowList, parse_allowed_users
from src.bot.commands import Command, help_text, parse_command, reply_for
from src.bot.exceptions import BotApiError, BotConnectionError, BotError
from src.bot.telegram import TelegramBot

__all__ = [
    "AllowList",
    "BotApiError",
    "BotConnectionError",
    "BotError",
    "Command",
    "TelegramBot",
    "help_text",
    "parse_allowed_users",
    "parse_command",
    "reply_for",
]
