"""Subset of Telegram Bot API objects the bot reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TgUser(BaseModel):
    id: int
    is_bot: bool = False
    username: str | None = None


class TgChat(BaseModel):
    id: int
    type: str = "private"


class TgMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TgChat
    from_user: TgUser | None = Field(default=None, alias="from")
    text: str | None = None


class TgUpdate(BaseModel):
    update_id: int
    message: TgMessage | None = None
