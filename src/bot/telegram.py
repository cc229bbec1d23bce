"""Telegram long-polling bot: allow-list gate and fixed command replies."""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Any

import aiohttp
import structlog
from pydantic import TypeAdapter

from src.bot.allowlist import AllowList
from src.bot.commands import reply_for
from src.bot.exceptions import BotApiError, BotConnectionError
from src.bot.types import TgUpdate, TgUser
from src.core.config import TelegramConfig

logger = structlog.stdlib.get_logger()

_UPDATES = TypeAdapter(list[TgUpdate])


class TelegramBot:
    """Polls ``getUpdates`` and answers each message in arrival order.

    Usage::

        bot = TelegramBot(config, AllowList.from_file(path))
        async with bot:
            await stop_event.wait()
    """

    def __init__(
        self,
        config: TelegramConfig,
        allow: AllowList,
        error_backoff_secs: float = 1.0,
    ) -> None:
        self._token = config.bot_token.get_secret_value()
        self._api_base = config.api_base.rstrip("/")
        self._poll_timeout = config.poll_timeout_secs
        self._allow = allow
        self._error_backoff_secs = error_backoff_secs
        self._session: aiohttp.ClientSession | None = None
        self._offset: int | None = None
        self._me: TgUser | None = None
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._error_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def offset(self) -> int | None:
        return self._offset

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _api(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        """Call a Bot API method and return its ``result``."""
        url = f"{self._api_base}/bot{self._token}/{method}"
        try:
            session = self._get_session()
            async with session.post(url, json=payload or {}) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise BotConnectionError(
                        f"Telegram {method} returned {resp.status}: {body[:200]}"
                    )
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as exc:
            raise BotConnectionError(f"Telegram {method} failed: {exc}") from exc

        if not isinstance(data, dict):
            raise BotApiError(f"Telegram {method} returned a non-object body")
        if not data.get("ok"):
            raise BotApiError(f"Telegram {method} error: {data.get('description', '')}")
        return data.get("result")

    async def get_me(self) -> TgUser:
        self._me = TgUser.model_validate(await self._api("getMe"))
        return self._me

    async def send_message(self, chat_id: int, text: str) -> bool:
        """Send *text* to *chat_id*. Returns True on success."""
        try:
            await self._api("sendMessage", {"chat_id": chat_id, "text": text})
            return True
        except (BotConnectionError, BotApiError):
            logger.exception("bot_send_failed", chat_id=chat_id)
            return False

    async def poll(self) -> list[TgUpdate]:
        """Fetch the next batch of updates and advance the offset past them."""
        payload: dict[str, Any] = {
            "timeout": self._poll_timeout,
            "allowed_updates": ["message"],
        }
        if self._offset is not None:
            payload["offset"] = self._offset
        updates = _UPDATES.validate_python(await self._api("getUpdates", payload))
        if updates:
            self._offset = max(u.update_id for u in updates) + 1
        return updates

    async def handle_update(self, update: TgUpdate) -> None:
        msg = update.message
        if msg is None:
            logger.debug("bot_update_ignored", update_id=update.update_id)
            return
        username = self._me.username if self._me is not None else None
        reply = reply_for(msg, self._allow, username)
        if reply is not None:
            await self.send_message(msg.chat.id, reply)

    async def start(self) -> None:
        if self._running:
            return
        me = await self.get_me()
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "bot_started",
            username=me.username,
            id=me.id,
            allowed_users=len(self._allow),
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.close()
        logger.info("bot_stopped", errors=self._error_count)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                updates = await self.poll()
                for update in updates:
                    await self.handle_update(update)
                continue
            except asyncio.CancelledError:
                break
            except Exception:
                self._error_count += 1
                logger.exception("bot_poll_error", error_count=self._error_count)

            try:
                await asyncio.sleep(self._error_backoff_secs)
            except asyncio.CancelledError:
                break

    async def __aenter__(self) -> TelegramBot:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
