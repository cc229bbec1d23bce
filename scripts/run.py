#!/usr/bin/env python3
"""Main entrypoint: runs the Telegram bot or the one-shot Zabbix setup.

Usage::

    # Run the bot (default)
    python scripts/run.py

    # Configure Zabbix media type, user media and action, then exit
    python scripts/run.py zbx-setup
    RUN_MODE=zbx-setup python scripts/run.py

    # Custom config file / log level
    python scripts/run.py --config config/settings.yaml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from src.bot.allowlist import AllowList
from src.bot.exceptions import BotError
from src.bot.telegram import TelegramBot
from src.core.config import Settings, load_settings
from src.core.logging import setup_logging
from src.zabbix.exceptions import ZbxError
from src.zabbix.setup import run_setup_from_settings

logger = structlog.get_logger(__name__)

SETUP_MODE = "zbx-setup"


async def zbx_setup(settings: Settings) -> int:
    """Run the Zabbix reconciliation once. Returns the process exit code."""
    try:
        await run_setup_from_settings(settings)
    except ZbxError as exc:
        logger.error("zbx_setup_failed", error=str(exc), error_type=type(exc).__name__)
        return 1
    return 0


async def run_bot(settings: Settings) -> int:
    """Run the bot until interrupted."""
    if not settings.telegram.bot_token.get_secret_value():
        logger.error("bot_token_missing", hint="set TELEGRAM_BOT_TOKEN")
        return 1

    allow = AllowList.from_file(settings.telegram.allowed_users_path)
    bot = TelegramBot(settings.telegram, allow)

    try:
        await bot.start()
    except BotError as exc:
        logger.error("bot_start_failed", error=str(exc))
        await bot.close()
        return 1

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    await bot.stop()
    return 0


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, config=settings.logging)

    if args.command == SETUP_MODE or settings.run_mode == SETUP_MODE:
        return await zbx_setup(settings)
    return await run_bot(settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zabbixbot",
        description="Zabbix <-> Telegram bot and setup utility.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=[SETUP_MODE],
        help="Configure Zabbix via the JSON-RPC API (media type + user media + action). "
        "If omitted, runs the Telegram bot.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()
    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
