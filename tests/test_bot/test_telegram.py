"""Tests for the Telegram bot: HTTP mocking, update handling, offset tracking."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from pydantic import SecretStr

from src.bot.allowlist import AllowList
from src.bot.commands import ACCESS_DENIED, LOGIN_OK
from src.bot.exceptions import BotApiError, BotConnectionError
from src.bot.telegram import TelegramBot
from src.bot.types import TgUpdate
from src.core.config import TelegramConfig

ALLOWED = 111


# ── Helpers ─────────────────────────────────────────────────────


def _config(**kw: object) -> TelegramConfig:
    defaults: dict[str, object] = {
        "bot_token": SecretStr("fake-token"),
        "api_base": "https://tg.test",
        "poll_timeout_secs": 1,
    }
    defaults.update(kw)
    return TelegramConfig(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 200, body: object = None, text: str = "") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=body if body is not None else {"ok": True, "result": True})
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _bot_with(*responses: AsyncMock) -> tuple[TelegramBot, MagicMock]:
    bot = TelegramBot(_config(), AllowList([ALLOWED]), error_backoff_secs=0.0)
    session = MagicMock()
    session.post = MagicMock(side_effect=list(responses))
    session.closed = False
    session.close = AsyncMock()
    bot._session = session
    return bot, session


def _update(update_id: int, text: str, user_id: int = ALLOWED) -> dict[str, object]:
    return {
        "update_id": update_id,
        "message": {
            "message_id": update_id,
            "chat": {"id": 555},
            "from": {"id": user_id, "is_bot": False},
            "text": text,
        },
    }


# ── _api ────────────────────────────────────────────────────────


class TestApi:
    async def test_url_contains_token_and_method(self) -> None:
        bot, session = _bot_with(_mock_response(body={"ok": True, "result": {"id": 1}}))
        await bot.get_me()
        assert session.post.call_args[0][0] == "https://tg.test/botfake-token/getMe"

    async def test_non_200_is_connection_error(self) -> None:
        bot, _ = _bot_with(_mock_response(502, text="bad gateway"))
        with pytest.raises(BotConnectionError, match="502"):
            await bot.get_me()

    async def test_client_error_is_connection_error(self) -> None:
        bot, session = _bot_with()
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(BotConnectionError, match="refused"):
            await bot.get_me()

    async def test_ok_false_is_api_error(self) -> None:
        bot, _ = _bot_with(_mock_response(body={"ok": False, "description": "Unauthorized"}))
        with pytest.raises(BotApiError, match="Unauthorized"):
            await bot.get_me()


# ── poll / handle_update ───────────────────────────────────────


class TestPoll:
    async def test_offset_advances_past_last_update(self) -> None:
        body = {"ok": True, "result": [_update(10, "/start"), _update(11, "hi")]}
        bot, session = _bot_with(
            _mock_response(body=body),
            _mock_response(body={"ok": True, "result": []}),
        )

        updates = await bot.poll()
        assert [u.update_id for u in updates] == [10, 11]
        assert bot.offset == 12
        assert "offset" not in session.post.call_args[1]["json"]

        await bot.poll()
        assert session.post.call_args[1]["json"]["offset"] == 12
        assert bot.offset == 12

    async def test_poll_requests_long_poll_of_messages(self) -> None:
        bot, session = _bot_with(_mock_response(body={"ok": True, "result": []}))
        await bot.poll()
        payload = session.post.call_args[1]["json"]
        assert payload["timeout"] == 1
        assert payload["allowed_updates"] == ["message"]


class TestHandleUpdate:
    async def test_authorized_start(self) -> None:
        bot, session = _bot_with(_mock_response())
        await bot.handle_update(TgUpdate.model_validate(_update(1, "/start")))
        payload = session.post.call_args[1]["json"]
        assert payload == {"chat_id": 555, "text": LOGIN_OK}

    async def test_unauthorized_text(self) -> None:
        bot, session = _bot_with(_mock_response())
        await bot.handle_update(TgUpdate.model_validate(_update(1, "hello", user_id=999)))
        assert session.post.call_args[1]["json"]["text"] == ACCESS_DENIED

    async def test_update_without_message_is_ignored(self) -> None:
        bot, session = _bot_with()
        await bot.handle_update(TgUpdate(update_id=1))
        session.post.assert_not_called()

    async def test_send_failure_is_swallowed(self) -> None:
        bot, _ = _bot_with(_mock_response(403, text="blocked"))
        assert await bot.send_message(555, "x") is False


# ── Lifecycle ───────────────────────────────────────────────────


class TestLifecycle:
    async def test_start_poll_and_stop(self) -> None:
        me = _mock_response(body={"ok": True, "result": {"id": 42, "is_bot": True, "username": "zbx_bot"}})
        first = _mock_response(body={"ok": True, "result": [_update(5, "/start@zbx_bot")]})
        sent = _mock_response()
        bot, session = _bot_with(me, first, sent)
        # Later polls fail until the bot is stopped.
        idle = asyncio.Event()

        def _post(url: str, json: dict[str, object]) -> AsyncMock:
            if session.post.call_count <= 3:
                return [me, first, sent][session.post.call_count - 1]
            idle.set()
            raise aiohttp.ClientConnectionError("idle")

        session.post = MagicMock(side_effect=_post)

        await bot.start()
        assert bot.running
        await asyncio.wait_for(idle.wait(), timeout=2.0)
        await bot.stop()

        assert not bot.running
        assert bot.offset == 6
        texts = [c[1]["json"].get("text") for c in session.post.call_args_list]
        assert LOGIN_OK in texts
        assert bot.error_count >= 1

    async def test_close_session(self) -> None:
        bot = TelegramBot(_config(), AllowList())
        session = AsyncMock()
        session.closed = False
        bot._session = session

        await bot.close()
        session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        bot = TelegramBot(_config(), AllowList())
        await bot.close()  # should not raise
